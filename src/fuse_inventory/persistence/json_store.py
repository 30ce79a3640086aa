"""File-backed snapshot store.

Each collection lives in its own JSON file inside the data directory.
Every file is replaced atomically (temporary file, then rename), but the
set of files is not committed as a unit: a crash in the middle of a save
can leave some files at the new state and others at the old one.
"""

import os
import threading
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import TypeAdapter, ValidationError

from fuse_inventory.errors import StoreLoadError
from fuse_inventory.models.entities import (
    Account,
    Application,
    DataStore,
    EnvironmentInfo,
    ExternalResource,
    KumaIntegration,
    Platform,
    SecretProvider,
    Tag,
)
from fuse_inventory.models.security import SecurityState
from fuse_inventory.models.snapshot import Snapshot
from fuse_inventory.observability.logging import get_logger
from fuse_inventory.persistence.store import SnapshotStore, check_cancelled

logger = get_logger(__name__)

# (snapshot field, file name, entity model)
COLLECTION_FILES: tuple[tuple[str, str, type], ...] = (
    ("applications", "applications.json", Application),
    ("data_stores", "datastores.json", DataStore),
    ("platforms", "platforms.json", Platform),
    ("external_resources", "externalresources.json", ExternalResource),
    ("accounts", "accounts.json", Account),
    ("tags", "tags.json", Tag),
    ("environments", "environments.json", EnvironmentInfo),
    ("kuma_integrations", "kumaintegrations.json", KumaIntegration),
    ("secret_providers", "secretproviders.json", SecretProvider),
)
SECURITY_FILE = "security.json"

_ADAPTERS: dict[type, TypeAdapter] = {
    model: TypeAdapter(tuple[model, ...]) for _, _, model in COLLECTION_FILES
}
_SECURITY_ADAPTER = TypeAdapter(SecurityState)


class JsonSnapshotStore(SnapshotStore):
    """Snapshot store persisting to one JSON file per collection.

    Args:
        data_dir: Directory holding the data files; created if missing.
    """

    def __init__(self, data_dir: Union[str, Path]) -> None:
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _read(self, cancel: Optional[threading.Event]) -> Snapshot:
        fields: dict[str, Any] = {}
        for field, file_name, model in COLLECTION_FILES:
            check_cancelled(cancel)
            fields[field] = self._read_file(file_name, _ADAPTERS[model], ())

        check_cancelled(cancel)
        fields["security"] = self._read_file(
            SECURITY_FILE, _SECURITY_ADAPTER, None
        ) or SecurityState()
        return Snapshot(**fields)

    def _write(
        self, snapshot: Snapshot, cancel: Optional[threading.Event]
    ) -> None:
        for field, file_name, model in COLLECTION_FILES:
            check_cancelled(cancel)
            payload = _ADAPTERS[model].dump_json(
                getattr(snapshot, field), indent=2, by_alias=True
            )
            self._write_atomic(file_name, payload)

        check_cancelled(cancel)
        self._write_atomic(
            SECURITY_FILE,
            _SECURITY_ADAPTER.dump_json(snapshot.security, indent=2, by_alias=True),
        )

    def _read_file(self, file_name: str, adapter: TypeAdapter, missing: Any) -> Any:
        path = self.data_dir / file_name
        if not path.exists():
            return missing

        raw = path.read_bytes()
        if not raw.strip() or raw.strip() == b"null":
            return missing
        try:
            return adapter.validate_json(raw)
        except ValidationError as exc:
            logger.error(
                "Unreadable data file",
                extra={"extra_fields": {"file": str(path)}},
            )
            raise StoreLoadError([f"{file_name}: {exc}"]) from exc

    def _write_atomic(self, file_name: str, payload: bytes) -> None:
        path = self.data_dir / file_name
        tmp = path.with_name(path.name + ".tmp")
        try:
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise


def data_file_schemas() -> dict[str, dict[str, Any]]:
    """JSON Schemas of every data file, keyed by "<file>.schema.json"."""
    schemas = {
        file_name.replace(".json", ".schema.json"): _ADAPTERS[model].json_schema(
            by_alias=True
        )
        for _, file_name, model in COLLECTION_FILES
    }
    schemas[SECURITY_FILE.replace(".json", ".schema.json")] = (
        _SECURITY_ADAPTER.json_schema(by_alias=True)
    )
    return schemas
