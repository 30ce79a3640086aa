import json
import re
import uuid

import pytest
from typer.testing import CliRunner

from fuse_inventory.cli import app, get_store

runner = CliRunner()

UUID_RE = re.compile(r"\(([0-9a-f-]{36})\)")


class TestCLI:
    @pytest.fixture(autouse=True)
    def data_dir(self, tmp_path, monkeypatch):
        path = tmp_path / "data"
        monkeypatch.setenv("FUSE_DATA_DIR", str(path))
        return path

    def create_admin(self, name="admin"):
        result = runner.invoke(
            app, ["user", "create", "--username", name, "--password", "pw"]
        )
        assert result.exit_code == 0, result.output
        return uuid.UUID(UUID_RE.search(result.output).group(1))

    def test_validate_empty_directory(self, data_dir):
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 0
        assert f"Data directory {data_dir} is valid." in result.output

    def test_validate_reports_violations(self, data_dir):
        data_dir.mkdir(parents=True, exist_ok=True)
        missing = uuid.uuid4()
        env = {"id": str(uuid.uuid4()), "name": "dev", "tagIds": [str(missing)]}
        (data_dir / "environments.json").write_text(json.dumps([env]))

        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 1
        assert f"tag {missing} not found" in result.output

    def test_user_create_prompts_for_password(self):
        result = runner.invoke(
            app, ["user", "create", "--username", "alice"], input="secret\n"
        )
        assert result.exit_code == 0
        assert "User created: alice" in result.output

        snapshot = get_store().load()
        assert snapshot.security.users[0].user_name == "alice"

    def test_first_user_must_be_admin(self):
        result = runner.invoke(
            app,
            ["user", "create", "--username", "bob", "--password", "pw", "--role", "Reader"],
        )
        assert result.exit_code == 1
        assert "Error (Validation)" in result.output

    def test_state_lists_users(self):
        assert "No users found." in runner.invoke(app, ["state"]).output

        admin_id = self.create_admin()
        result = runner.invoke(app, ["state"])
        assert "Security level: None" in result.output
        assert "Requires setup: False" in result.output
        assert f"[Admin] admin ({admin_id})" in result.output

    def test_reader_needs_requesting_admin(self):
        admin_id = self.create_admin()
        args = ["user", "create", "--username", "r", "--password", "pw", "--role", "Reader"]

        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "Error (Unauthorized)" in result.output

        result = runner.invoke(app, args + ["--requested-by", str(admin_id)])
        assert result.exit_code == 0

    def test_set_role_and_delete(self):
        admin_id = self.create_admin()
        result = runner.invoke(
            app,
            [
                "user", "create", "--username", "r", "--password", "pw",
                "--role", "Reader", "--requested-by", str(admin_id),
            ],
        )
        reader_id = UUID_RE.search(result.output).group(1)

        result = runner.invoke(app, ["user", "set-role", reader_id, "Admin"])
        assert result.exit_code == 0
        assert "Role of r set to Admin" in result.output

        result = runner.invoke(app, ["user", "delete", reader_id])
        assert result.exit_code == 0
        assert f"User deleted: {reader_id}" in result.output

        result = runner.invoke(app, ["user", "delete", reader_id])
        assert result.exit_code == 1
        assert "Error (NotFound)" in result.output

    def test_cannot_demote_last_admin(self):
        admin_id = self.create_admin()
        result = runner.invoke(app, ["user", "set-role", str(admin_id), "Reader"])
        assert result.exit_code == 1
        assert "At least one admin user is required" in result.output

    def test_settings_set_level(self):
        admin_id = self.create_admin()
        result = runner.invoke(
            app,
            ["settings", "set-level", "FullyRestricted", "--requested-by", str(admin_id)],
        )
        assert result.exit_code == 0
        assert "Security level set to FullyRestricted" in result.output
        assert "Security level: FullyRestricted" in runner.invoke(app, ["state"]).output
