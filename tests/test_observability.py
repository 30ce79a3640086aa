import io
import json
import logging
import sys
import uuid

import pytest

from fuse_inventory.observability.audit import (
    AuditAction,
    AuditArea,
    AuditLog,
    JsonlAuditLogger,
)
from fuse_inventory.observability.logging import JsonFormatter, get_logger, setup_logging


def test_json_formatter():
    formatter = JsonFormatter()
    log_record = logging.LogRecord(
        name="fuse_inventory.persistence.store",
        level=logging.WARNING,
        pathname="store.py",
        lineno=10,
        msg="Rejected snapshot commit",
        args=(),
        exc_info=None,
    )
    log_record.extra_fields = {"violations": ["a", "b"]}
    log_record.user_id = uuid.UUID(int=1)

    data = json.loads(formatter.format(log_record))

    assert data["message"] == "Rejected snapshot commit"
    assert data["level"] == "WARNING"
    assert data["component"] == "fuse_inventory.persistence.store"
    assert data["violations"] == ["a", "b"]
    assert data["user_id"] == str(uuid.UUID(int=1))
    assert "timestamp" in data
    assert "extra_fields" not in data


def test_json_formatter_includes_exception():
    formatter = JsonFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "x", logging.ERROR, "f.py", 1, "failed", (), sys.exc_info()
        )
    data = json.loads(formatter.format(record))
    assert "ValueError: boom" in data["exception"]


def test_setup_logging_installs_single_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        setup_logging("debug")
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.DEBUG
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_logger_emits_extra_fields():
    log_output = io.StringIO()
    handler = logging.StreamHandler(log_output)
    handler.setFormatter(JsonFormatter())

    logger = get_logger("test_extra")
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    try:
        logger.info("Snapshot loaded", extra={"extra_fields": {"applications": 3}})
    finally:
        logger.removeHandler(handler)

    data = json.loads(log_output.getvalue())
    assert data["applications"] == 3
    assert logger.name == "test_extra"


class TestAuditLog:
    @pytest.fixture
    def audit(self, tmp_path):
        return JsonlAuditLogger(tmp_path / "audit" / "audit_log.jsonl")

    def test_entries_are_appended_as_json_lines(self, audit):
        user_id = uuid.uuid4()
        audit.log(
            AuditLog(
                action=AuditAction.SECURITY_USER_CREATED,
                area=AuditArea.SECURITY,
                user_name="admin",
                user_id=user_id,
                change_details={"role": "Reader"},
            )
        )
        audit.log(AuditLog(action=AuditAction.SECURITY_USER_LOGOUT, area=AuditArea.SECURITY))

        lines = audit.path.read_text().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["action"] == "SecurityUserCreated"
        assert first["userId"] == str(user_id)
        assert first["changeDetails"] == {"role": "Reader"}
        assert "entityId" not in first

        entries = audit.read()
        assert entries[1].user_name == "Anonymous"

    def test_read_missing_file(self, audit):
        assert audit.read() == []

    def test_try_log_swallows_io_errors(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        audit = JsonlAuditLogger(blocker / "audit_log.jsonl")

        audit.try_log(
            AuditLog(action=AuditAction.SECURITY_USER_LOGIN, area=AuditArea.SECURITY)
        )
        assert not (blocker / "audit_log.jsonl").exists()
