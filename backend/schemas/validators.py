"""Named field validators shared by the request schemas and the services."""

import re
from datetime import datetime, timezone
from typing import Iterable, Optional

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

MIN_PASSWORD_LENGTH = 6
_HEX_COLOR = re.compile(r"^#[0-9A-F]{6}$", re.IGNORECASE)
_HTTP_URL = TypeAdapter(HttpUrl)


def normalize_email(v: str) -> str:
    return (v or "").strip().lower()


def validate_password_length(v: str) -> str:
    if len(v or "") < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return v


def passwords_match(password: str, confirm_password: str) -> bool:
    return password == confirm_password


def require_text(v: Optional[str], message: str = "field is required") -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError(message)
    return v


def optional_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


def validate_hex_color(v: Optional[str]) -> Optional[str]:
    v = optional_text(v)
    if v is None:
        return None
    if not _HEX_COLOR.match(v):
        raise ValueError("Invalid hex color")
    return v.upper()


def validate_http_url(v: Optional[str]) -> Optional[str]:
    """http(s) URL checked by pydantic's HttpUrl, stored as its normalized string."""
    v = optional_text(v)
    if v is None:
        return None
    try:
        return str(_HTTP_URL.validate_python(v))
    except PydanticValidationError:
        raise ValueError("Invalid url") from None


def reject_explicit_nulls(model, names: Iterable[str]):
    """Partial updates may omit these fields but not send them as null."""
    for name in names:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")
    return model


def to_naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    # Columns are timezone-naive and hold UTC.
    if v is None or v.tzinfo is None:
        return v
    return v.astimezone(timezone.utc).replace(tzinfo=None)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
