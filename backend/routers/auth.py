from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import clear_auth_cookie, current_active_user, set_auth_cookie
from db.database import get_async_session
from db.users import User
from schemas.inventory import SuccessResponse
from schemas.users import (
    AuthResponse,
    CheckEmailRequest,
    CheckEmailResponse,
    LoginRequest,
    SetupPasswordRequest,
    UserRead,
)
from services import auth as auth_service

router = APIRouter()


@router.post("/check-email", response_model=CheckEmailResponse)
async def check_email(
    payload: CheckEmailRequest,
    db: AsyncSession = Depends(get_async_session),
):
    """
    First step of the login form.

    404 for an unknown email and 403 for a deactivated account. Unlike
    /login this does reveal whether an account exists.
    """
    needs_setup = await auth_service.check_email(db, payload.email)
    return CheckEmailResponse(exists=True, needs_password_setup=needs_setup)


@router.post("/setup-password", response_model=AuthResponse)
async def setup_password(
    payload: SetupPasswordRequest,
    response: Response,
    db: AsyncSession = Depends(get_async_session),
):
    """First-login password setup. Fails if the password was already set."""
    user, token = await auth_service.setup_password(db, payload.email, payload.password, payload.confirm_password)
    set_auth_cookie(response, token)
    return AuthResponse(success=True, user=UserRead(**user.to_schema))


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_async_session),
):
    user, token = await auth_service.login(db, payload.email, payload.password)
    set_auth_cookie(response, token)
    return AuthResponse(success=True, user=UserRead(**user.to_schema))


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response):
    clear_auth_cookie(response)
    return SuccessResponse(success=True)


@router.get("/me", response_model=UserRead)
async def me(user: User = Depends(current_active_user)):
    return UserRead(**user.to_schema)
