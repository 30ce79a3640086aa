"""Enumeration definitions for the inventory data model.

Values match the strings stored in the JSON data files, so renaming a
member is a data migration.
"""

from enum import Enum


class TargetKind(str, Enum):
    """Categories of entity an Account or a dependency can point at.

    Attributes:
        APPLICATION: An application *instance* (not the application itself).
        DATA_STORE: A DataStore.
        EXTERNAL: An ExternalResource.
    """

    APPLICATION = "Application"
    DATA_STORE = "DataStore"
    EXTERNAL = "External"


class PlatformKind(str, Enum):
    SERVER = "Server"
    CLUSTER = "Cluster"
    SERVERLESS = "Serverless"
    CONTAINER_HOST = "ContainerHost"


class AuthKind(str, Enum):
    """How an Account authenticates against its target."""

    NONE = "None"
    USER_PASSWORD = "UserPassword"
    API_KEY = "ApiKey"
    BEARER_TOKEN = "BearerToken"
    OAUTH_CLIENT = "OAuthClient"
    MANAGED_IDENTITY = "ManagedIdentity"
    CERTIFICATE = "Certificate"
    OTHER = "Other"


class Privilege(str, Enum):
    SELECT = "Select"
    INSERT = "Insert"
    UPDATE = "Update"
    DELETE = "Delete"
    EXECUTE = "Execute"
    CONNECT = "Connect"
    ALTER = "Alter"
    CONTROL = "Control"


class SecretProviderAuthMode(str, Enum):
    MANAGED_IDENTITY = "ManagedIdentity"
    CLIENT_SECRET = "ClientSecret"


class SecretProviderCapability(str, Enum):
    CHECK = "Check"
    CREATE = "Create"
    ROTATE = "Rotate"
    READ = "Read"


class SecurityLevel(str, Enum):
    """Defines how much of the inventory is guarded by authentication.

    Attributes:
        NONE: Everything is public.
        RESTRICTED_EDITING: Reads are public, writes require an administrator.
        FULLY_RESTRICTED: Reads require a session, writes require an administrator.
    """

    NONE = "None"
    RESTRICTED_EDITING = "RestrictedEditing"
    FULLY_RESTRICTED = "FullyRestricted"


class SecurityRole(str, Enum):
    READER = "Reader"
    ADMIN = "Admin"
