"""Example showing the bootstrap flow of the security service.

While no administrator exists the inventory is in setup mode: the first
account must be an administrator, and only after that can readers be
added and the security level raised.
"""

from fuse_inventory.models.commands import (
    CreateSecurityUser,
    LoginSecurityUser,
    UpdateSecuritySettings,
)
from fuse_inventory.models.enums import SecurityLevel, SecurityRole
from fuse_inventory.persistence.in_memory import InMemorySnapshotStore
from fuse_inventory.security.service import SecurityService


def run_example():
    service = SecurityService(InMemorySnapshotStore())
    print(f"Requires setup: {service.get_security_state().requires_setup}")

    print("\n--- Scenario 1: First user as reader ---")
    result = service.create_user(
        CreateSecurityUser(user_name="bob", password="pw", role=SecurityRole.READER)
    )
    print(f"Rejected ({result.error_type.value}): {result.error}")

    print("\n--- Scenario 2: First user as administrator ---")
    admin = service.create_user(
        CreateSecurityUser(user_name="admin", password="pw", role=SecurityRole.ADMIN)
    ).value
    print(f"Created {admin.user_name} ({admin.id})")
    print(f"Requires setup: {service.get_security_state().requires_setup}")

    print("\n--- Scenario 3: Raise the security level ---")
    settings = service.update_security_settings(
        UpdateSecuritySettings(
            level=SecurityLevel.FULLY_RESTRICTED, requested_by=admin.id
        )
    ).value
    print(f"Security level: {settings.level.value}")

    session = service.login(LoginSecurityUser(user_name="ADMIN", password="pw")).value
    user = service.validate_session(session.token, refresh=True)
    print(f"Token resolves to {user.user_name}, expires {session.expires_at:%Y-%m-%d}")


if __name__ == "__main__":
    run_example()
