"""
Authentication API endpoints.

Provides signup, signin, signout and the current-user profile. The session
token travels in an httpOnly cookie; it is never returned in a body.
"""

from fastapi import APIRouter, Depends, Response

from api.dependencies import get_app_settings, get_auth_service
from api.middleware.auth import get_current_identity
from shared.config import Settings
from shared.models import User

from .interfaces import IAuthService
from .models import (
    AuthResponse,
    AuthResult,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    UserProfile,
)

router = APIRouter()


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the session token as a secure, httpOnly, same-site cookie."""
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        path="/",
    )


def _respond(result: AuthResult, response: Response, settings: Settings) -> AuthResponse:
    set_session_cookie(response, result.token, settings)
    return AuthResponse(user=result.user)


@router.post("/register", response_model=AuthResponse)
async def register(
    request: RegisterRequest,
    response: Response,
    service: IAuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    """
    Create an account and sign it in.
    """
    result = await service.register(request)
    return _respond(result, response, settings)


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    response: Response,
    service: IAuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    """
    Sign in with email and password.

    Unknown emails and wrong passwords produce the same 401 response.
    """
    result = await service.login(request)
    return _respond(result, response, settings)


@router.post("/logout")
async def logout(
    response: Response,
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """
    Sign out by clearing the session cookie.
    """
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return {"success": True}


@router.get("/me", response_model=ProfileResponse)
async def me(user: User = Depends(get_current_identity)) -> ProfileResponse:
    """
    Get the signed-in user's profile.
    """
    return ProfileResponse(user=UserProfile.from_user(user))
