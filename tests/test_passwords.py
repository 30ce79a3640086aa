import base64
import uuid
from datetime import datetime, timedelta, timezone

from fuse_inventory.security.passwords import (
    KEY_BYTES,
    SALT_BYTES,
    generate_salt,
    hash_password,
    verify_password,
)
from fuse_inventory.security.sessions import SessionRecord, SessionTable, new_token


class TestPasswordHashing:
    def test_salt_is_random_base64(self):
        salt = generate_salt()
        assert len(base64.b64decode(salt)) == SALT_BYTES
        assert generate_salt() != salt

    def test_hash_is_deterministic_for_salt(self):
        salt = generate_salt()
        digest = hash_password("s3cret", salt)
        assert len(base64.b64decode(digest)) == KEY_BYTES
        assert hash_password("s3cret", salt) == digest
        assert hash_password("s3cret", generate_salt()) != digest

    def test_verify(self):
        salt = generate_salt()
        digest = hash_password("s3cret", salt)
        assert verify_password("s3cret", salt, digest) is True
        assert verify_password("S3cret", salt, digest) is False

    def test_malformed_stored_values_do_not_verify(self):
        assert verify_password("pw", "not base64!", "also not") is False
        assert verify_password("pw", generate_salt(), "@@@") is False


class TestSessionTable:
    def test_put_get_remove(self):
        table = SessionTable()
        record = SessionRecord(
            token=new_token(),
            user_id=uuid.uuid4(),
            expires_at=datetime.now(timezone.utc),
        )
        table.put(record)
        assert table.get(record.token) is record
        assert len(table) == 1

        table.remove(record.token)
        table.remove(record.token)
        assert table.get(record.token) is None
        assert len(table) == 0

    def test_refresh_replaces_expiry(self):
        table = SessionTable()
        now = datetime.now(timezone.utc)
        record = SessionRecord(token="t", user_id=uuid.uuid4(), expires_at=now)
        table.put(record)

        refreshed = table.refresh(record, now + timedelta(days=1))
        assert refreshed.expires_at == now + timedelta(days=1)
        assert table.get("t") == refreshed
        assert record.expires_at == now

    def test_refresh_does_not_revive_removed_session(self):
        table = SessionTable()
        now = datetime.now(timezone.utc)
        record = SessionRecord(token="t", user_id=uuid.uuid4(), expires_at=now)
        table.put(record)

        table.remove("t")
        assert table.refresh(record, now + timedelta(days=1)) is None
        assert table.get("t") is None

    def test_tokens_are_unique(self):
        assert len({new_token() for _ in range(100)}) == 100
