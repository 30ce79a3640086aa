import json
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import Field

from fuse_inventory.models.base import EntityId, ModelBase, utc_now
from fuse_inventory.observability.logging import get_logger

logger = get_logger(__name__)


class AuditAction(str, Enum):
    SECURITY_USER_CREATED = "SecurityUserCreated"
    SECURITY_USER_UPDATED = "SecurityUserUpdated"
    SECURITY_USER_DELETED = "SecurityUserDeleted"
    SECURITY_USER_LOGIN = "SecurityUserLogin"
    SECURITY_USER_LOGOUT = "SecurityUserLogout"
    SECURITY_SETTINGS_UPDATED = "SecuritySettingsUpdated"


class AuditArea(str, Enum):
    SECURITY = "Security"


class AuditLog(ModelBase):
    """One audited action.

    Attributes:
        user_name: Who acted, or "Anonymous" when unauthenticated.
        entity_id: The entity the action touched, if any.
        change_details: Sanitized description of the change.
    """

    id: EntityId = Field(default_factory=uuid.uuid4)
    timestamp: datetime = Field(default_factory=utc_now)
    action: AuditAction
    area: AuditArea
    user_name: str = "Anonymous"
    user_id: Optional[EntityId] = None
    entity_id: Optional[EntityId] = None
    change_details: Optional[dict[str, Any]] = None


class JsonlAuditLogger:
    def __init__(self, path: Union[str, Path] = "./audit_log.jsonl") -> None:
        self.path = Path(path)

    def log(self, entry: AuditLog) -> None:
        record = entry.model_dump(mode="json", by_alias=True, exclude_none=True)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")

    def try_log(self, entry: AuditLog) -> None:
        """Logs an entry; a failing sink is reported but never raised."""
        try:
            self.log(entry)
        except OSError:
            logger.exception(
                "Audit log write failed",
                extra={"extra_fields": {"action": entry.action.value}},
            )

    def read(self) -> list[AuditLog]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as f:
            return [AuditLog.model_validate_json(line) for line in f if line.strip()]
