"""Request authorization rules.

Pure functions deciding what a request needs given the configured
security level, so that the HTTP middleware only has to extract the
token and turn a denial into a response.
"""

from enum import Enum
from typing import Optional

from fuse_inventory.models.enums import SecurityLevel, SecurityRole
from fuse_inventory.models.security import SecurityUser

SECURITY_PREFIX = "/api/security"

_READ_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


class AccessRequirement(str, Enum):
    """What a caller needs to reach a non-security endpoint.

    Attributes:
        PUBLIC: Anyone, authenticated or not.
        READ: Any authenticated user.
        ADMIN: An authenticated administrator.
    """

    PUBLIC = "public"
    READ = "read"
    ADMIN = "admin"


def starts_with_segments(path: str, prefix: str) -> bool:
    """Case-insensitive path prefix match on whole segments."""
    path = path.lower().rstrip("/")
    prefix = prefix.lower().rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def is_security_path(path: str) -> bool:
    return starts_with_segments(path, SECURITY_PREFIX)


def requirement_for(level: SecurityLevel, method: str) -> AccessRequirement:
    if level == SecurityLevel.NONE:
        return AccessRequirement.PUBLIC

    is_read = method.upper() in _READ_METHODS
    if level == SecurityLevel.RESTRICTED_EDITING:
        return AccessRequirement.PUBLIC if is_read else AccessRequirement.ADMIN
    return AccessRequirement.READ if is_read else AccessRequirement.ADMIN


def is_setup_allowed(path: str, method: str) -> bool:
    """Endpoints reachable while no administrator exists yet."""
    method = method.upper()
    if starts_with_segments(path, f"{SECURITY_PREFIX}/state"):
        return True
    if starts_with_segments(path, f"{SECURITY_PREFIX}/accounts") and method == "POST":
        return True
    if starts_with_segments(path, f"{SECURITY_PREFIX}/login") and method == "POST":
        return True
    return False


def is_security_endpoint_allowed(
    path: str,
    method: str,
    user: Optional[SecurityUser],
    requires_setup: bool,
) -> bool:
    method = method.upper()
    if requires_setup and is_setup_allowed(path, method):
        return True
    if starts_with_segments(path, f"{SECURITY_PREFIX}/state") and method == "GET":
        return True
    if method == "POST" and (
        starts_with_segments(path, f"{SECURITY_PREFIX}/login")
        or starts_with_segments(path, f"{SECURITY_PREFIX}/logout")
    ):
        return True
    return user is not None and user.role == SecurityRole.ADMIN


def satisfies(requirement: AccessRequirement, user: Optional[SecurityUser]) -> bool:
    if requirement == AccessRequirement.PUBLIC:
        return True
    if user is None:
        return False
    if requirement == AccessRequirement.ADMIN:
        return user.role == SecurityRole.ADMIN
    return True
