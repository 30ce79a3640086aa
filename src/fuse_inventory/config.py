"""Runtime configuration read from environment variables."""

import os
from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FuseSettings(BaseModel):
    """
    Static configuration for a fuse-inventory process.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding the JSON data files.",
    )
    session_lifetime_days: float = Field(
        default=30,
        gt=0,
        description="How long a login session stays valid without activity.",
    )
    audit_log_path: Optional[Path] = Field(
        default=None,
        description="JSONL audit sink. Defaults to <data_dir>/audit/audit_log.jsonl.",
    )
    log_level: str = Field(default="INFO", description="Root log level.")

    @property
    def session_lifetime(self) -> timedelta:
        return timedelta(days=self.session_lifetime_days)

    @property
    def audit_path(self) -> Path:
        return self.audit_log_path or self.data_dir / "audit" / "audit_log.jsonl"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FuseSettings":
        """Builds settings from FUSE_* variables and LOG_LEVEL.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if env.get("FUSE_DATA_DIR"):
            values["data_dir"] = env["FUSE_DATA_DIR"]
        if env.get("FUSE_SESSION_LIFETIME_DAYS"):
            values["session_lifetime_days"] = env["FUSE_SESSION_LIFETIME_DAYS"]
        if env.get("FUSE_AUDIT_LOG"):
            values["audit_log_path"] = env["FUSE_AUDIT_LOG"]
        if env.get("LOG_LEVEL"):
            values["log_level"] = env["LOG_LEVEL"].upper()
        return cls(**values)
