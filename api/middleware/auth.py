"""
Session gate middleware and auth dependencies.

Requests to protected route prefixes must carry a valid session cookie.
The gate verifies it once and stores the identity on request.state, so
handlers read the identity through get_current_user() and never parse
the cookie themselves.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from modules.auth.exceptions import MissingTokenError
from shared.exceptions import AuthenticationError
from shared.models import AuthenticatedUser, User

from ..dependencies import get_auth_service, get_container

# Chat list, chat completion and file upload namespaces
PROTECTED_PREFIXES: tuple[str, ...] = ("/api/chats", "/api/chat", "/api/upload")


def is_protected(path: str, prefixes: tuple[str, ...] = PROTECTED_PREFIXES) -> bool:
    """Whether path falls under one of the prefixes (segment-aware)."""
    return any(path == prefix or path.startswith(prefix + "/") for prefix in prefixes)


class SessionGateMiddleware(BaseHTTPMiddleware):
    """
    Reject unauthenticated requests to protected routes with 401.

    Missing cookie -> {"error": "Not authenticated"}
    Cookie present but unverifiable -> {"error": "Invalid token"}
    """

    def __init__(self, app, prefixes: tuple[str, ...] = PROTECTED_PREFIXES) -> None:
        super().__init__(app)
        self._prefixes = prefixes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not is_protected(request.url.path, self._prefixes):
            return await call_next(request)

        container = get_container()
        token = request.cookies.get(container.settings.auth_cookie_name)
        try:
            request.state.user = container.auth.authenticate(token)
        except AuthenticationError as e:
            return JSONResponse(status_code=e.status_code, content={"error": e.message})

        return await call_next(request)


def session_token(request: Request) -> Optional[str]:
    """Read the raw session token cookie."""
    return request.cookies.get(get_container().settings.auth_cookie_name)


async def get_current_user(request: Request) -> AuthenticatedUser:
    """
    Dependency returning the identity established by the session gate.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    user: Optional[AuthenticatedUser] = getattr(request.state, "user", None)
    if user is None:
        raise MissingTokenError()
    return user


async def get_current_identity(
    request: Request,
    service=Depends(get_auth_service),
) -> User:
    """
    Dependency re-deriving the full account from the session token.

    Unlike get_current_user(), this queries the user repository, so it
    fails when the account was deactivated or removed even though the
    token itself is still valid.
    """
    user = await service.current_user(session_token(request))
    if user is None:
        raise MissingTokenError()
    return user


# Type aliases for cleaner route definitions
RequireAuth = Depends(get_current_user)
RequireIdentity = Depends(get_current_identity)
