"""Authentication and user management for the inventory.

Users and settings are durable and go through the snapshot store like any
other entity. Sessions are ephemeral and live only in this service.
"""

import threading
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from fuse_inventory.errors import SnapshotValidationError
from fuse_inventory.models.base import NIL_ID, EntityId, utc_now
from fuse_inventory.models.commands import (
    CreateSecurityUser,
    DeleteUser,
    LoginSecurityUser,
    LogoutSecurityUser,
    UpdateSecuritySettings,
    UpdateUser,
)
from fuse_inventory.models.enums import SecurityLevel, SecurityRole
from fuse_inventory.models.result import ErrorType, Result
from fuse_inventory.models.security import (
    LoginSession,
    SecuritySettings,
    SecurityState,
    SecurityUser,
    SecurityUserInfo,
)
from fuse_inventory.models.snapshot import Snapshot
from fuse_inventory.observability.logging import get_logger
from fuse_inventory.persistence.store import SnapshotStore
from fuse_inventory.security.passwords import (
    generate_salt,
    hash_password,
    verify_password,
)
from fuse_inventory.security.sessions import SessionRecord, SessionTable, new_token

logger = get_logger(__name__)

DEFAULT_SESSION_LIFETIME = timedelta(days=30)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class _CommandRefused(Exception):
    """Aborts a store transform with the Result to hand back."""

    def __init__(self, result: Result) -> None:
        super().__init__(result.error)
        self.result = result


class SecurityService:
    """Single point of truth for "is this request authenticated/authorized".

    Args:
        store: The snapshot store holding users and settings.
        session_lifetime: How long a session lives after login or refresh.
        clock: Source of the current UTC time; replaceable in tests.
    """

    def __init__(
        self,
        store: SnapshotStore,
        session_lifetime: timedelta = DEFAULT_SESSION_LIFETIME,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._session_lifetime = session_lifetime
        self._clock = clock
        self._sessions = SessionTable()

    def get_security_state(
        self, cancel: Optional[threading.Event] = None
    ) -> SecurityState:
        return self._store.get(cancel).security

    def list_users(self) -> list[SecurityUserInfo]:
        return [
            SecurityUserInfo.from_user(u) for u in self.get_security_state().users
        ]

    def update_security_settings(
        self,
        command: UpdateSecuritySettings,
        cancel: Optional[threading.Event] = None,
    ) -> Result[SecuritySettings]:
        state = self.get_security_state(cancel)

        if state.requires_setup:
            return Result.failure(
                "An administrator account must be created before security settings can be modified.",
                ErrorType.VALIDATION,
            )

        if not self._is_admin(state, command.requested_by):
            return Result.failure(
                "Only administrators can update security settings.",
                ErrorType.UNAUTHORIZED,
            )

        if state.settings.level == command.level:
            return Result.success(state.settings)

        if command.level != SecurityLevel.NONE and not any(
            u.role == SecurityRole.ADMIN for u in state.users
        ):
            return Result.failure(
                "An administrator account is required before enabling restrictions.",
                ErrorType.VALIDATION,
            )

        updated = SecuritySettings(level=command.level, updated_at=self._clock())
        error = self._commit(
            lambda s: s.model_copy(
                update={
                    "security": s.security.model_copy(update={"settings": updated})
                }
            ),
            cancel,
        )
        if error is not None:
            return error

        logger.info(
            "Security level changed",
            extra={
                "extra_fields": {
                    "level": updated.level.value,
                    "requested_by": str(command.requested_by),
                }
            },
        )
        return Result.success(updated)

    def create_user(
        self,
        command: CreateSecurityUser,
        cancel: Optional[threading.Event] = None,
    ) -> Result[SecurityUser]:
        if _is_blank(command.user_name):
            return Result.failure("User name cannot be empty.")
        if _is_blank(command.password):
            return Result.failure("Password cannot be empty.")

        user_name = command.user_name.strip()
        refusal = self._creation_refusal(
            self.get_security_state(cancel), command, user_name
        )
        if refusal is not None:
            return refusal

        now = self._clock()
        salt = generate_salt()
        user = SecurityUser(
            id=uuid.uuid4(),
            user_name=user_name,
            password_hash=hash_password(command.password, salt),
            password_salt=salt,
            role=command.role,
            created_at=now,
            updated_at=now,
        )

        def add_user(s: Snapshot) -> Snapshot:
            # Checked again under the store lock; a concurrent request may
            # have committed since the first check.
            late = self._creation_refusal(s.security, command, user_name)
            if late is not None:
                raise _CommandRefused(late)
            return s.model_copy(
                update={
                    "security": s.security.model_copy(
                        update={"users": s.security.users + (user,)}
                    )
                }
            )

        error = self._commit(add_user, cancel)
        if error is not None:
            return error

        logger.info(
            "Security user created",
            extra={
                "extra_fields": {
                    "user_id": str(user.id),
                    "user_name": user.user_name,
                    "role": user.role.value,
                }
            },
        )
        return Result.success(user)

    def login(
        self,
        command: LoginSecurityUser,
        cancel: Optional[threading.Event] = None,
    ) -> Result[LoginSession]:
        if _is_blank(command.user_name) or _is_blank(command.password):
            return Result.failure(
                "User name and password are required.", ErrorType.VALIDATION
            )

        state = self.get_security_state(cancel)
        user = state.find_user_by_name(command.user_name)
        if user is None or not verify_password(
            command.password, user.password_salt, user.password_hash
        ):
            logger.warning(
                "Login failed",
                extra={"extra_fields": {"user_name": command.user_name}},
            )
            return Result.failure("Invalid credentials.", ErrorType.UNAUTHORIZED)

        record = SessionRecord(
            token=new_token(),
            user_id=user.id,
            expires_at=self._clock() + self._session_lifetime,
        )
        self._sessions.put(record)

        logger.info(
            "Login succeeded",
            extra={"extra_fields": {"user_id": str(user.id)}},
        )
        return Result.success(
            LoginSession(
                token=record.token,
                expires_at=record.expires_at,
                user=SecurityUserInfo.from_user(user),
            )
        )

    def logout(self, command: LogoutSecurityUser) -> Result[None]:
        if _is_blank(command.token):
            return Result.failure("Invalid logout request.")

        self._sessions.remove(command.token)
        logger.info("Session revoked")
        return Result.success()

    def validate_session(
        self,
        token: Optional[str],
        refresh: bool,
        cancel: Optional[threading.Event] = None,
    ) -> Optional[SecurityUser]:
        """Resolves a session token to the user it belongs to.

        Args:
            token: The opaque session token.
            refresh: Whether to push the expiry out to now + lifetime.
            cancel: Optional cancellation signal for the store read.

        Returns:
            The user from the *current* snapshot, or None when the token is
            empty, unknown or expired, or its user no longer exists.
        """
        if _is_blank(token):
            return None

        session = self._sessions.get(token)
        if session is None:
            return None

        now = self._clock()
        if session.expires_at <= now:
            self._sessions.remove(token)
            logger.debug("Expired session evicted")
            return None

        if refresh:
            session = self._sessions.refresh(session, now + self._session_lifetime)
            if session is None:
                return None

        snapshot = self._store.current or self._store.get(cancel)
        return snapshot.security.find_user(session.user_id)

    def update_user(
        self,
        command: UpdateUser,
        cancel: Optional[threading.Event] = None,
    ) -> Result[SecurityUser]:
        # No local "last administrator" check here; demoting the last admin
        # is refused by the store's validator when the commit is attempted.
        if command.id == NIL_ID:
            return Result.failure("User Id must be provided", ErrorType.VALIDATION)

        user = self.get_security_state(cancel).find_user(command.id)
        if user is None:
            return Result.failure("User not found", ErrorType.NOT_FOUND)

        updated = user.model_copy(
            update={"role": command.role, "updated_at": self._clock()}
        )
        error = self._commit(
            lambda s: s.model_copy(
                update={
                    "security": s.security.model_copy(
                        update={
                            "users": tuple(
                                updated if u.id == command.id else u
                                for u in s.security.users
                            )
                        }
                    )
                }
            ),
            cancel,
        )
        if error is not None:
            return error

        logger.info(
            "Security user updated",
            extra={
                "extra_fields": {
                    "user_id": str(updated.id),
                    "role": updated.role.value,
                }
            },
        )
        return Result.success(updated)

    def delete_user(
        self,
        command: DeleteUser,
        cancel: Optional[threading.Event] = None,
    ) -> Result[None]:
        if command.id == NIL_ID:
            return Result.failure("User Id must be provided", ErrorType.VALIDATION)

        if self.get_security_state(cancel).find_user(command.id) is None:
            return Result.failure("User not found", ErrorType.NOT_FOUND)

        error = self._commit(
            lambda s: s.model_copy(
                update={
                    "security": s.security.model_copy(
                        update={
                            "users": tuple(
                                u for u in s.security.users if u.id != command.id
                            )
                        }
                    )
                }
            ),
            cancel,
        )
        if error is not None:
            return error

        logger.info(
            "Security user deleted",
            extra={"extra_fields": {"user_id": str(command.id)}},
        )
        return Result.success()

    @staticmethod
    def _is_admin(state: SecurityState, user_id: Optional[EntityId]) -> bool:
        if user_id is None:
            return False
        requester = state.find_user(user_id)
        return requester is not None and requester.role == SecurityRole.ADMIN

    def _commit(
        self,
        transform: Callable[[Snapshot], Snapshot],
        cancel: Optional[threading.Event],
    ) -> Optional[Result]:
        """Runs a store update, turning a refusal into a Result."""
        try:
            self._store.update(transform, cancel)
        except _CommandRefused as exc:
            return exc.result
        except SnapshotValidationError as exc:
            return Result.failure("\n".join(exc.errors), ErrorType.VALIDATION)
        return None

    def _creation_refusal(
        self,
        state: SecurityState,
        command: CreateSecurityUser,
        user_name: str,
    ) -> Optional[Result]:
        if state.find_user_by_name(user_name) is not None:
            return Result.failure(
                f"A user with the name '{command.user_name}' already exists.",
                ErrorType.CONFLICT,
            )

        if state.requires_setup:
            # Bootstrap: the first account must be able to administer the rest.
            if command.role != SecurityRole.ADMIN:
                return Result.failure(
                    "The initial user must be an administrator.",
                    ErrorType.VALIDATION,
                )
        elif not self._is_admin(state, command.requested_by):
            return Result.failure(
                "Only administrators can create users.", ErrorType.UNAUTHORIZED
            )
        return None
