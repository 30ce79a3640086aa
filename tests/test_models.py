import uuid

import pytest
from pydantic import ValidationError

from fuse_inventory.errors import SnapshotValidationError, StoreLoadError
from fuse_inventory.models.entities import Grant, Tag
from fuse_inventory.models.enums import Privilege, SecurityRole
from fuse_inventory.models.result import ErrorType, Result
from fuse_inventory.models.security import SecurityState, SecurityUserInfo
from fuse_inventory.models.snapshot import Snapshot


class TestModels:
    def test_models_are_frozen(self):
        tag = Tag(id=uuid.uuid4(), name="prod")
        with pytest.raises(ValidationError):
            tag.name = "dev"

    def test_camel_case_aliases(self):
        grant = Grant.model_validate(
            {"id": str(uuid.uuid4()), "schema": "public", "privileges": ["Select"]}
        )
        assert grant.schema_ == "public"
        assert grant.privileges == frozenset({Privilege.SELECT})
        assert "schema" in grant.model_dump(by_alias=True)

    def test_grant_without_privileges_parses(self):
        grant = Grant.model_validate({"id": str(uuid.uuid4()), "privileges": []})
        assert grant.privileges == frozenset()

    def test_empty_snapshot(self):
        snapshot = Snapshot.empty()
        assert snapshot.security.requires_setup
        assert snapshot.applications == ()

    def test_user_lookup(self, make_user):
        alice = make_user("Alice", SecurityRole.READER)
        state = SecurityState(users=(alice,))

        assert state.find_user(alice.id) is alice
        assert state.find_user(uuid.uuid4()) is None
        assert state.find_user_by_name("ALICE") is alice
        assert state.requires_setup

    def test_user_info_hides_credentials(self, make_user):
        info = SecurityUserInfo.from_user(make_user("admin"))
        dumped = info.model_dump(by_alias=True)
        assert set(dumped) == {"id", "userName", "role", "createdAt", "updatedAt"}


class TestResult:
    def test_success(self):
        result = Result.success(3)
        assert result.is_success
        assert result.value == 3
        assert result.error is None

    def test_failure_defaults_to_validation(self):
        result = Result.failure("bad")
        assert not result.is_success
        assert result.error_type == ErrorType.VALIDATION


class TestErrors:
    def test_validation_error_message(self):
        exc = SnapshotValidationError(["one", "two"])
        assert exc.errors == ["one", "two"]
        assert str(exc) == "Data validation failed:\none\ntwo"
        assert isinstance(StoreLoadError(["x"]), SnapshotValidationError)
