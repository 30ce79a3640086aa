"""Bearer-token authentication middleware.

Resolves the session token on every request, attaches the user to
``request.state.user`` and rejects requests the configured security level
does not allow.
"""

from typing import Optional

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from fuse_inventory.models.security import SecurityUser
from fuse_inventory.security.access import (
    is_security_endpoint_allowed,
    is_security_path,
    is_setup_allowed,
    requirement_for,
    satisfies,
)
from fuse_inventory.security.service import SecurityService

BEARER_PREFIX = "bearer "


def extract_token(header: Optional[str]) -> Optional[str]:
    if not header or not header.strip():
        return None
    if header.lower().startswith(BEARER_PREFIX):
        token = header[len(BEARER_PREFIX):].strip()
        return token or None
    return None


def unauthorized() -> JSONResponse:
    return JSONResponse({"error": "Authentication required."}, status_code=401)


def forbidden() -> JSONResponse:
    return JSONResponse(
        {"error": "Administrator privileges are required."}, status_code=403
    )


class SecurityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, service: SecurityService) -> None:
        super().__init__(app)
        self.service = service

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        method = request.method

        state = await run_in_threadpool(self.service.get_security_state)
        token = extract_token(request.headers.get("Authorization"))
        user: Optional[SecurityUser] = None
        if token is not None:
            user = await run_in_threadpool(self.service.validate_session, token, True)
        request.state.user = user

        if state.requires_setup and not is_setup_allowed(path, method):
            return JSONResponse(
                {
                    "error": "Initial administrator setup is required before accessing the API.",
                    "requiresSetup": True,
                },
                status_code=503,
            )

        if is_security_path(path):
            if not is_security_endpoint_allowed(
                path, method, user, state.requires_setup
            ):
                return unauthorized() if user is None else forbidden()
        else:
            requirement = requirement_for(state.settings.level, method)
            if not satisfies(requirement, user):
                return unauthorized() if user is None else forbidden()

        return await call_next(request)
