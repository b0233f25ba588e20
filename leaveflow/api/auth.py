from __future__ import annotations

from fastapi import APIRouter, Response, status

from leaveflow.api.deps import AuthDep
from leaveflow.config import get_settings
from leaveflow.db import SessionDep
from leaveflow.schemas.auth import LoginPayload, LoginResponse, MessageResponse, RegisterPayload
from leaveflow.schemas.user import UserResponse
from leaveflow.security import create_access_token
from leaveflow.services import user as user_service

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterPayload,
    session: SessionDep,
) -> UserResponse:
    """Create a user account."""
    return await user_service.register_user(session, payload)


@auth_router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginPayload,
    response: Response,
    session: SessionDep,
) -> LoginResponse:
    """Verify credentials, set the session cookie and return the token."""
    settings = get_settings()
    user = await user_service.authenticate_user(session, payload.email, payload.password)
    token = create_access_token(user.id, user.role)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
    )
    return LoginResponse(access_token=token, user=user_service.build_user_response(user))


@auth_router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    response.delete_cookie(get_settings().session_cookie_name)
    return MessageResponse(message="Logout successful")


@auth_router.get("/me", response_model=UserResponse)
async def me(
    session: SessionDep,
    auth: AuthDep,
) -> UserResponse:
    """Return the authenticated user."""
    return await user_service.get_user(session, auth.user_id)
