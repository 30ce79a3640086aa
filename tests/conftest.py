import uuid
from types import SimpleNamespace

import pytest

from fuse_inventory.models.entities import (
    Account,
    Application,
    ApplicationInstance,
    ApplicationInstanceDependency,
    DataStore,
    EnvironmentInfo,
    ExternalResource,
    Grant,
    Platform,
    Tag,
)
from fuse_inventory.models.enums import (
    PlatformKind,
    Privilege,
    SecurityLevel,
    SecurityRole,
    TargetKind,
)
from fuse_inventory.models.security import (
    SecuritySettings,
    SecurityState,
    SecurityUser,
)
from fuse_inventory.models.snapshot import Snapshot
from fuse_inventory.security.passwords import generate_salt, hash_password


def build_user(user_name="admin", role=SecurityRole.ADMIN, password=None):
    if password is None:
        return SecurityUser(
            id=uuid.uuid4(),
            user_name=user_name,
            password_hash="hash",
            password_salt="salt",
            role=role,
        )
    salt = generate_salt()
    return SecurityUser(
        id=uuid.uuid4(),
        user_name=user_name,
        password_hash=hash_password(password, salt),
        password_salt=salt,
        role=role,
    )


def build_inventory():
    """A small but complete inventory where every reference resolves."""
    ids = SimpleNamespace(
        tag=uuid.uuid4(),
        env=uuid.uuid4(),
        platform=uuid.uuid4(),
        data_store=uuid.uuid4(),
        external=uuid.uuid4(),
        app=uuid.uuid4(),
        instance=uuid.uuid4(),
        other_app=uuid.uuid4(),
        other_instance=uuid.uuid4(),
        account=uuid.uuid4(),
    )
    tag_ids = frozenset({ids.tag})

    instance = ApplicationInstance(
        id=ids.instance,
        environment_id=ids.env,
        platform_id=ids.platform,
        base_uri="https://app.example.com",
        version="1.0",
        tag_ids=tag_ids,
        dependencies=(
            ApplicationInstanceDependency(
                id=uuid.uuid4(),
                target_id=ids.data_store,
                target_kind=TargetKind.DATA_STORE,
                port=5432,
            ),
            ApplicationInstanceDependency(
                id=uuid.uuid4(),
                target_id=ids.external,
                target_kind=TargetKind.EXTERNAL,
            ),
            ApplicationInstanceDependency(
                id=uuid.uuid4(),
                target_id=ids.other_instance,
                target_kind=TargetKind.APPLICATION,
            ),
        ),
    )
    other = Application(
        id=ids.other_app,
        name="billing",
        instances=(
            ApplicationInstance(id=ids.other_instance, environment_id=ids.env),
        ),
    )

    snapshot = Snapshot(
        tags=(Tag(id=ids.tag, name="prod", color="Red"),),
        environments=(EnvironmentInfo(id=ids.env, name="production"),),
        platforms=(
            Platform(
                id=ids.platform,
                display_name="srv-01",
                dns_name="srv-01.example.com",
                kind=PlatformKind.SERVER,
                tag_ids=tag_ids,
            ),
        ),
        data_stores=(
            DataStore(
                id=ids.data_store,
                name="orders-db",
                kind="postgres",
                environment_id=ids.env,
                platform_id=ids.platform,
                connection_uri="postgres://srv-01/orders",
                tag_ids=tag_ids,
            ),
        ),
        external_resources=(
            ExternalResource(
                id=ids.external,
                name="payments-api",
                resource_uri="https://payments.example.com",
                tag_ids=tag_ids,
            ),
        ),
        applications=(
            Application(
                id=ids.app,
                name="shop",
                version="1.0",
                tag_ids=tag_ids,
                instances=(instance,),
            ),
            other,
        ),
        accounts=(
            Account(
                id=ids.account,
                target_id=ids.data_store,
                target_kind=TargetKind.DATA_STORE,
                secret_ref="vault://orders-db",
                grants=(
                    Grant(
                        id=uuid.uuid4(),
                        database="orders",
                        privileges=frozenset({Privilege.SELECT, Privilege.INSERT}),
                    ),
                ),
                tag_ids=tag_ids,
            ),
        ),
        security=SecurityState(
            settings=SecuritySettings(level=SecurityLevel.NONE),
            users=(build_user(),),
        ),
    )
    return snapshot, ids


@pytest.fixture
def inventory():
    return build_inventory()


@pytest.fixture
def make_user():
    return build_user
