from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from fuse_inventory.config import FuseSettings


class TestFuseSettings:
    def test_defaults(self):
        settings = FuseSettings.from_env({})
        assert settings.data_dir == Path("./data")
        assert settings.session_lifetime == timedelta(days=30)
        assert settings.audit_path == Path("./data/audit/audit_log.jsonl")
        assert settings.log_level == "INFO"

    def test_from_env(self, tmp_path):
        settings = FuseSettings.from_env(
            {
                "FUSE_DATA_DIR": str(tmp_path),
                "FUSE_SESSION_LIFETIME_DAYS": "0.5",
                "FUSE_AUDIT_LOG": str(tmp_path / "a.jsonl"),
                "LOG_LEVEL": "debug",
            }
        )
        assert settings.data_dir == tmp_path
        assert settings.session_lifetime == timedelta(hours=12)
        assert settings.audit_path == tmp_path / "a.jsonl"
        assert settings.log_level == "DEBUG"

    def test_reads_process_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FUSE_DATA_DIR", str(tmp_path))
        assert FuseSettings.from_env().data_dir == tmp_path

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_invalid_lifetime(self, value):
        with pytest.raises(ValidationError):
            FuseSettings.from_env({"FUSE_SESSION_LIFETIME_DAYS": value})
