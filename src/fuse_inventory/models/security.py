"""Security domain models stored alongside the inventory.

Users and settings are durable and live inside the Snapshot. Sessions are
not modelled here; they are ephemeral and owned by the security service.
"""

from datetime import datetime

from pydantic import Field

from fuse_inventory.models.base import EntityId, ModelBase, utc_now
from fuse_inventory.models.enums import SecurityLevel, SecurityRole


class SecuritySettings(ModelBase):
    """Global security configuration.

    Attributes:
        level: How much of the inventory requires authentication.
        updated_at: When the level was last changed.
    """

    level: SecurityLevel = Field(
        default=SecurityLevel.NONE,
        description="How much of the inventory requires authentication.",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        description="When the level was last changed.",
    )


class SecurityUser(ModelBase):
    """A durable user account.

    Attributes:
        password_hash: Base64 PBKDF2-HMAC-SHA256 digest of the password.
        password_salt: Base64 salt the digest was derived with.
    """

    id: EntityId
    user_name: str = ""
    password_hash: str = ""
    password_salt: str = ""
    role: SecurityRole = SecurityRole.READER
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class SecurityState(ModelBase):
    settings: SecuritySettings = Field(default_factory=SecuritySettings)
    users: tuple[SecurityUser, ...] = ()

    @property
    def requires_setup(self) -> bool:
        """True until at least one administrator exists."""
        return not any(u.role == SecurityRole.ADMIN for u in self.users)

    def find_user(self, user_id: EntityId) -> SecurityUser | None:
        return next((u for u in self.users if u.id == user_id), None)

    def find_user_by_name(self, user_name: str) -> SecurityUser | None:
        wanted = user_name.casefold()
        return next(
            (u for u in self.users if u.user_name.casefold() == wanted), None
        )


class SecurityUserInfo(ModelBase):
    """Redacted projection of a SecurityUser, safe to hand to clients."""

    id: EntityId
    user_name: str
    role: SecurityRole
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: SecurityUser) -> "SecurityUserInfo":
        return cls(
            id=user.id,
            user_name=user.user_name,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class LoginSession(ModelBase):
    token: str
    expires_at: datetime
    user: SecurityUserInfo
