"""HTTP endpoints for the security subsystem.

Thin translation layer: each handler merges the authenticated caller into
the command, calls the SecurityService and maps the Result to a response.
"""

from typing import Any, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response

from fuse_inventory.models.base import ModelBase
from fuse_inventory.models.commands import (
    CreateSecurityUser,
    DeleteUser,
    LoginSecurityUser,
    LogoutSecurityUser,
    UpdateSecuritySettings,
    UpdateUser,
)
from fuse_inventory.models.enums import SecurityRole
from fuse_inventory.models.result import ErrorType, Result
from fuse_inventory.models.security import SecurityUser, SecurityUserInfo
from fuse_inventory.observability.audit import (
    AuditAction,
    AuditArea,
    AuditLog,
    JsonlAuditLogger,
)
from fuse_inventory.security.service import SecurityService

_STATUS_BY_ERROR = {
    ErrorType.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorType.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorType.SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(result: Result) -> JSONResponse:
    code = _STATUS_BY_ERROR.get(
        result.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse({"error": result.error}, status_code=code)


def _error(message: str, code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=code)


def _dump(model: ModelBase) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


def current_user(request: Request) -> Optional[SecurityUser]:
    return getattr(request.state, "user", None)


def build_security_router(
    service: SecurityService, audit: Optional[JsonlAuditLogger] = None
) -> APIRouter:
    """Creates the /api/security router bound to a service instance.

    Args:
        service: The security service handling every request.
        audit: Optional sink for successful security actions.
    """
    router = APIRouter(prefix="/api/security", tags=["security"])

    def record(
        action: AuditAction,
        actor: Optional[Union[SecurityUser, SecurityUserInfo]],
        entity_id: Optional[UUID] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        if audit is None:
            return
        audit.try_log(
            AuditLog(
                action=action,
                area=AuditArea.SECURITY,
                user_name=actor.user_name if actor else "Anonymous",
                user_id=actor.id if actor else None,
                entity_id=entity_id,
                change_details=details,
            )
        )

    @router.get("/state")
    def get_state(request: Request):
        state = service.get_security_state()
        user = current_user(request)
        return {
            "level": state.settings.level.value,
            "updatedAt": state.settings.updated_at.isoformat(),
            "requiresSetup": state.requires_setup,
            "currentUser": _dump(SecurityUserInfo.from_user(user)) if user else None,
            "hasUsers": len(state.users) > 0,
        }

    @router.post("/settings")
    def update_settings(command: UpdateSecuritySettings, request: Request):
        user = current_user(request)
        if user is None:
            return _error("Authentication required.", status.HTTP_401_UNAUTHORIZED)
        if user.role != SecurityRole.ADMIN:
            return _error(
                "Administrator privileges are required.", status.HTTP_403_FORBIDDEN
            )

        merged = command.model_copy(update={"requested_by": user.id})
        result = service.update_security_settings(merged)
        if not result.is_success:
            return error_response(result)

        record(
            AuditAction.SECURITY_SETTINGS_UPDATED,
            user,
            details={"level": result.value.level.value},
        )
        return _dump(result.value)

    @router.get("/accounts")
    def list_accounts():
        return [_dump(info) for info in service.list_users()]

    @router.post("/accounts", status_code=status.HTTP_201_CREATED)
    def create_account(command: CreateSecurityUser, request: Request):
        state = service.get_security_state()
        user = current_user(request)
        if not state.requires_setup:
            if user is None:
                return _error("Authentication required.", status.HTTP_401_UNAUTHORIZED)
            if user.role != SecurityRole.ADMIN:
                return _error(
                    "Administrator privileges are required.",
                    status.HTTP_403_FORBIDDEN,
                )

        merged = command.model_copy(update={"requested_by": user.id if user else None})
        result = service.create_user(merged)
        if not result.is_success:
            return error_response(result)

        created = result.value
        record(
            AuditAction.SECURITY_USER_CREATED,
            user,
            entity_id=created.id,
            details={"userName": created.user_name, "role": created.role.value},
        )
        return _dump(SecurityUserInfo.from_user(created))

    @router.patch("/accounts/{user_id}")
    def update_account(user_id: UUID, command: UpdateUser, request: Request):
        user = current_user(request)
        if user is None:
            return _error("Invalid user context.", status.HTTP_400_BAD_REQUEST)
        if user_id == user.id:
            return _error(
                "You cannot edit your own account.", status.HTTP_400_BAD_REQUEST
            )

        result = service.update_user(command.model_copy(update={"id": user_id}))
        if not result.is_success:
            return error_response(result)

        record(
            AuditAction.SECURITY_USER_UPDATED,
            user,
            entity_id=user_id,
            details={"role": result.value.role.value},
        )
        return _dump(SecurityUserInfo.from_user(result.value))

    @router.delete("/accounts/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_account(user_id: UUID, request: Request):
        user = current_user(request)
        if user is None:
            return _error("Invalid user context.", status.HTTP_400_BAD_REQUEST)
        if user_id == user.id:
            return _error(
                "You cannot delete your own account.", status.HTTP_400_BAD_REQUEST
            )

        result = service.delete_user(DeleteUser(id=user_id))
        if not result.is_success:
            return error_response(result)

        record(AuditAction.SECURITY_USER_DELETED, user, entity_id=user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.post("/login")
    def login(command: LoginSecurityUser):
        result = service.login(command)
        if not result.is_success:
            if result.error_type == ErrorType.VALIDATION:
                return error_response(result)
            return _error(result.error, status.HTTP_401_UNAUTHORIZED)

        session = result.value
        record(
            AuditAction.SECURITY_USER_LOGIN,
            session.user,
            entity_id=session.user.id,
            details={"userName": session.user.user_name},
        )
        return _dump(session)

    @router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
    def logout(command: LogoutSecurityUser, request: Request):
        result = service.logout(command)
        if not result.is_success:
            return error_response(result)

        record(AuditAction.SECURITY_USER_LOGOUT, current_user(request))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
