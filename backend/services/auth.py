"""
Email-first login flow.

1. check_email: does the account exist, and has it set a password yet?
2. setup_password: first login only, sets the hash and issues a token.
3. login: every later login.

check_email answers 404/403 and so reveals whether an account exists, while
login answers 401 for every failure. The two policies disagree; both are kept
as-is until someone decides which one is intended.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import generate_token, password_helper
from core.errors import AuthenticationError, AuthorizationError, BusinessRuleViolation, NotFoundError, ValidationError
from db.database import atomic
from db.users import User
from schemas.validators import MIN_PASSWORD_LENGTH, normalize_email, passwords_match

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


async def get_user_by_email(db: AsyncSession, email: str, for_update: bool = False) -> Optional[User]:
    stmt = select(User).where(func.lower(User.email) == normalize_email(email))
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


async def check_email(db: AsyncSession, email: str) -> bool:
    """Return True when the account still needs its first password."""
    user = await get_user_by_email(db, email)
    if user is None:
        raise NotFoundError("User not found. Please contact an administrator.")
    if not user.is_active:
        raise AuthorizationError("Account is deactivated. Please contact an administrator.")
    return not user.hashed_password


async def setup_password(
    db: AsyncSession,
    email: str,
    password: str,
    confirm_password: str,
) -> Tuple[User, str]:
    if not passwords_match(password, confirm_password):
        raise ValidationError.for_field("confirmPassword", "Passwords don't match")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError.for_field("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    async with atomic(db):
        user = await get_user_by_email(db, email, for_update=True)
        # A set hash is never overwritten here; later changes need a separate flow.
        if user is None or not user.is_active or user.hashed_password:
            raise BusinessRuleViolation("Invalid request. User may not exist or password already set.")
        user.hashed_password = password_helper.hash(password)

    logger.info("password set up for user %s", user.id)
    return user, generate_token(user)


async def login(db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
    user = await get_user_by_email(db, email)

    if user is None:
        logger.warning("login rejected: unknown email")
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not user.is_active:
        logger.warning("login rejected: user %s is inactive", user.id)
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not user.hashed_password:
        logger.warning("login rejected: user %s has not set a password", user.id)
        raise AuthenticationError(INVALID_CREDENTIALS)

    verified, updated_hash = password_helper.verify_and_update(password, user.hashed_password)
    if not verified:
        logger.warning("login rejected: wrong password for user %s", user.id)
        raise AuthenticationError(INVALID_CREDENTIALS)
    if updated_hash:
        # Hash produced by a deprecated scheme; store the upgraded one.
        async with atomic(db):
            user.hashed_password = updated_hash

    return user, generate_token(user)
