"""Inventory entity models.

Each collection held by a Snapshot is a tuple of one of these models. All
cross-entity references are plain ids; whether they resolve is decided by
the snapshot validator at commit time, never by the models themselves.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from fuse_inventory.models.base import EntityId, ModelBase, utc_now
from fuse_inventory.models.enums import (
    AuthKind,
    PlatformKind,
    Privilege,
    SecretProviderAuthMode,
    SecretProviderCapability,
    TargetKind,
)


class Tag(ModelBase):
    id: EntityId
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


class EnvironmentInfo(ModelBase):
    """A deployment environment (dev, staging, production...).

    Attributes:
        auto_create_instances: Whether new applications get an instance here.
        base_uri_template: Template used to derive instance base URIs.
    """

    id: EntityId
    name: str
    description: Optional[str] = None
    tag_ids: frozenset[EntityId] = frozenset()
    auto_create_instances: bool = False
    base_uri_template: Optional[str] = None
    health_uri_template: Optional[str] = None
    open_api_uri_template: Optional[str] = None


class Platform(ModelBase):
    id: EntityId
    display_name: str
    dns_name: Optional[str] = None
    os: Optional[str] = None
    kind: Optional[PlatformKind] = None
    ip_address: Optional[str] = None
    notes: Optional[str] = None
    tag_ids: frozenset[EntityId] = frozenset()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class DataStore(ModelBase):
    id: EntityId
    name: str
    description: Optional[str] = None
    kind: str
    environment_id: EntityId
    platform_id: Optional[EntityId] = None
    connection_uri: Optional[str] = None
    tag_ids: frozenset[EntityId] = frozenset()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ExternalResource(ModelBase):
    id: EntityId
    name: str
    description: Optional[str] = None
    resource_uri: Optional[str] = None
    tag_ids: frozenset[EntityId] = frozenset()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ApplicationInstanceDependency(ModelBase):
    """An edge from an application instance to something it talks to.

    Attributes:
        target_id: Id of the target; an instance id when target_kind is Application.
        target_kind: Which collection target_id lives in.
        port: Optional port used for the connection.
        account_id: Optional Account used for the connection.
    """

    id: EntityId
    target_id: EntityId
    target_kind: TargetKind
    port: Optional[int] = None
    account_id: Optional[EntityId] = None


class ApplicationInstance(ModelBase):
    id: EntityId
    environment_id: EntityId
    platform_id: Optional[EntityId] = None
    base_uri: Optional[str] = None
    health_uri: Optional[str] = None
    open_api_uri: Optional[str] = None
    version: Optional[str] = None
    dependencies: tuple[ApplicationInstanceDependency, ...] = ()
    tag_ids: frozenset[EntityId] = frozenset()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ApplicationPipeline(ModelBase):
    id: EntityId
    name: str
    pipeline_uri: Optional[str] = None


class Application(ModelBase):
    """An application together with the instances and pipelines it owns."""

    id: EntityId
    name: str
    version: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[str] = None
    notes: Optional[str] = None
    framework: Optional[str] = None
    repository_uri: Optional[str] = None
    tag_ids: frozenset[EntityId] = frozenset()
    instances: tuple[ApplicationInstance, ...] = ()
    pipelines: tuple[ApplicationPipeline, ...] = ()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Grant(ModelBase):
    id: EntityId
    database: Optional[str] = None
    schema_: Optional[str] = Field(default=None, alias="schema")
    privileges: frozenset[Privilege] = Field(
        default=frozenset(),
        description="Privileges granted; the validator requires at least one.",
    )


class Account(ModelBase):
    """Credentials used to reach a target entity.

    The secret itself never lives in the inventory; secret_ref points at
    wherever it is kept.
    """

    id: EntityId
    target_id: EntityId
    target_kind: TargetKind
    auth_kind: AuthKind = AuthKind.NONE
    secret_ref: str = ""
    user_name: Optional[str] = None
    parameters: Optional[dict[str, str]] = None
    grants: tuple[Grant, ...] = ()
    tag_ids: frozenset[EntityId] = frozenset()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class KumaIntegration(ModelBase):
    id: EntityId
    name: Optional[str] = None
    environment_ids: tuple[EntityId, ...] = ()
    platform_id: Optional[EntityId] = None
    account_id: Optional[EntityId] = None
    uri: str
    api_key: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class SecretProviderCredentials(ModelBase):
    tenant_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None


class SecretProvider(ModelBase):
    id: EntityId
    name: str
    vault_uri: str
    auth_mode: SecretProviderAuthMode
    credentials: Optional[SecretProviderCredentials] = None
    capabilities: frozenset[SecretProviderCapability] = frozenset()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
