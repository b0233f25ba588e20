# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from leaveflow.config import get_settings
from leaveflow.db import SessionDep
from leaveflow.exceptions import Forbidden, Unauthorized, UserNotFound
from leaveflow.models.enums import Role
from leaveflow.schemas.auth import AuthContext
from leaveflow.security import decode_access_token
from leaveflow.services.user import get_user_or_404

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


async def get_auth_context(
    request: Request,
    session: SessionDep,
    bearer_token: str | None = Depends(oauth2_scheme),
) -> AuthContext:
    """Resolve the caller from a bearer token or the session cookie."""
    token = bearer_token or request.cookies.get(get_settings().session_cookie_name)
    if not token:
        raise Unauthorized
    user_id = decode_access_token(token)

    try:
        user = await get_user_or_404(session, user_id)
    except UserNotFound:
        raise Unauthorized("Could not validate credentials") from None

    return AuthContext(
        user_id=user.id,
        name=user.name,
        email=user.email,
        role=Role(user.role),
    )


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if not auth.is_admin:
        raise Forbidden("Admin access required")
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]
