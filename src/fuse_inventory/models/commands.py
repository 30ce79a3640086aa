"""Command models accepted by the security service."""

from typing import Optional

from fuse_inventory.models.base import NIL_ID, EntityId, ModelBase
from fuse_inventory.models.enums import SecurityLevel, SecurityRole


class CreateSecurityUser(ModelBase):
    user_name: str = ""
    password: str = ""
    role: SecurityRole = SecurityRole.READER
    requested_by: Optional[EntityId] = None


class LoginSecurityUser(ModelBase):
    user_name: str = ""
    password: str = ""


class LogoutSecurityUser(ModelBase):
    token: str = ""


class UpdateSecuritySettings(ModelBase):
    level: SecurityLevel
    requested_by: Optional[EntityId] = None


class UpdateUser(ModelBase):
    id: EntityId = NIL_ID
    role: SecurityRole


class DeleteUser(ModelBase):
    id: EntityId = NIL_ID
