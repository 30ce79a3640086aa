"""Data model for the inventory snapshot.

A Snapshot is the single root of truth: every entity collection plus the
security state at one point in time. It is immutable; the store replaces
it wholesale on every successful mutation.
"""

from pydantic import Field

from fuse_inventory.models.base import ModelBase
from fuse_inventory.models.entities import (
    Account,
    Application,
    DataStore,
    EnvironmentInfo,
    ExternalResource,
    KumaIntegration,
    Platform,
    SecretProvider,
    Tag,
)
from fuse_inventory.models.security import SecurityState


class Snapshot(ModelBase):
    """Represents the complete inventory at one point in time.

    Attributes:
        applications: Applications with their instances and pipelines.
        data_stores: Databases, caches, queues...
        platforms: Hosts and clusters instances and data stores run on.
        external_resources: Third-party services outside the inventory.
        accounts: Credentials pointing at applications, stores or externals.
        tags: Labels referenced by id from most other entities.
        environments: Deployment environments.
        kuma_integrations: Health-monitoring integrations.
        secret_providers: Secret vaults accounts may be bound to.
        security: Durable security settings and users.
    """

    applications: tuple[Application, ...] = ()
    data_stores: tuple[DataStore, ...] = ()
    platforms: tuple[Platform, ...] = ()
    external_resources: tuple[ExternalResource, ...] = ()
    accounts: tuple[Account, ...] = ()
    tags: tuple[Tag, ...] = ()
    environments: tuple[EnvironmentInfo, ...] = ()
    kuma_integrations: tuple[KumaIntegration, ...] = ()
    secret_providers: tuple[SecretProvider, ...] = ()
    security: SecurityState = Field(
        default_factory=SecurityState,
        description="Durable security settings and users.",
    )

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()
