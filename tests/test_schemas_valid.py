import json

import jsonschema
from typer.testing import CliRunner

from fuse_inventory.cli import app
from fuse_inventory.persistence.json_store import (
    COLLECTION_FILES,
    JsonSnapshotStore,
)

runner = CliRunner()


def _export(tmp_path):
    out = tmp_path / "schemas"
    result = runner.invoke(app, ["export-schemas", "--output", str(out)])
    assert result.exit_code == 0
    return out


def test_all_schemas_are_valid_jsonschema(tmp_path):
    out = _export(tmp_path)
    paths = list(out.glob("*.schema.json"))
    assert len(paths) == len(COLLECTION_FILES) + 1
    for path in paths:
        jsonschema.Draft202012Validator.check_schema(
            json.loads(path.read_text(encoding="utf-8"))
        )


def test_saved_files_match_their_schemas(tmp_path, inventory):
    snapshot, _ = inventory
    store = JsonSnapshotStore(tmp_path / "data")
    store.save(snapshot)
    out = _export(tmp_path)

    for data_file in store.data_dir.glob("*.json"):
        schema = json.loads(
            (out / data_file.name.replace(".json", ".schema.json")).read_text()
        )
        jsonschema.validate(json.loads(data_file.read_text()), schema)
