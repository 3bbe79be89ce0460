"""
Session tokens and the per-request auth dependencies.

Tokens are HS256 JWTs issued through fastapi-users' jwt helpers. They carry
{id, email, fullName, role}, but handlers never trust those claims alone:
`verify_auth` reloads the user on every request and rejects deleted or
deactivated accounts.
"""

import logging
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, Request, Response
from fastapi_users.jwt import decode_jwt, generate_jwt
from fastapi_users.password import PasswordHelper
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.errors import AuthenticationError, AuthorizationError
from db.database import get_async_session
from db.users import User, UserRole

logger = logging.getLogger(__name__)

TOKEN_AUDIENCE = ["inventory:auth"]
BEARER_SCHEME = "bearer"

password_helper = PasswordHelper()


def generate_token(user: User) -> str:
    data = {
        "id": str(user.id),
        "email": user.email,
        "fullName": user.full_name,
        "role": UserRole(user.role).value,
        "aud": TOKEN_AUDIENCE,
    }
    return generate_jwt(data, settings.jwt_secret, settings.jwt_lifetime_seconds)


def decode_token(token: str) -> Optional[dict]:
    """Return the claims of a valid, unexpired token, else None."""
    try:
        return decode_jwt(token, settings.jwt_secret, TOKEN_AUDIENCE)
    except jwt.PyJWTError as e:
        logger.debug("token rejected: %s", e)
        return None


def extract_token(request: Request) -> Optional[str]:
    # Authorization header wins over the cookie.
    header = request.headers.get("authorization")
    if header:
        scheme, _, credentials = header.strip().partition(" ")
        if scheme.lower() == BEARER_SCHEME:
            return credentials.strip() or None
    return request.cookies.get(settings.auth_cookie_name) or None


async def verify_auth(request: Request, db: AsyncSession) -> Optional[User]:
    token = extract_token(request)
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    try:
        user_id = UUID(str(payload.get("id")))
    except ValueError:
        return None

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_lifetime_seconds,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


async def current_active_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
) -> User:
    user = await verify_auth(request, db)
    if user is None:
        raise AuthenticationError()
    return user


async def current_admin_user(user: User = Depends(current_active_user)) -> User:
    if not user.is_admin:
        raise AuthorizationError("Admin access required")
    return user
