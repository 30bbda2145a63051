"""Request field validation. Every failure raises ValidationError."""

import re

from gatekeeper.errors import ValidationError
from gatekeeper.services.password import BCRYPT_MAX_BYTES

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")
MAX_EMAIL_LENGTH = 255
MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
MAX_TOKEN_LENGTH = 2000


def validate_email(email: str) -> str:
    """Return the trimmed email or raise."""
    email = (email or "").strip()
    if not email:
        raise ValidationError("email is required")
    if len(email) > MAX_EMAIL_LENGTH:
        raise ValidationError(f"email must not exceed {MAX_EMAIL_LENGTH} characters")
    if not EMAIL_RE.match(email):
        raise ValidationError("invalid email format")
    return email


def validate_password(password: str) -> str:
    if not password:
        raise ValidationError("password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"password must not exceed {BCRYPT_MAX_BYTES} bytes")

    missing = []
    if not any(c.isalpha() for c in password):
        missing.append("at least one letter")
    if not any(c.isdigit() for c in password):
        missing.append("at least one number")
    if missing:
        raise ValidationError(f"password must contain {', '.join(missing)}")
    return password


def validate_name(name: str, field_name: str) -> str:
    """Letters, spaces, hyphens and apostrophes only."""
    name = (name or "").strip()
    if not name:
        raise ValidationError(f"{field_name} is required")
    if len(name) < MIN_NAME_LENGTH:
        raise ValidationError(f"{field_name} must be at least {MIN_NAME_LENGTH} characters long")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"{field_name} must not exceed {MAX_NAME_LENGTH} characters")
    if not all(c.isalpha() or c in " -'" for c in name):
        raise ValidationError(f"{field_name} contains invalid characters")
    return name


def validate_token(token: str) -> str:
    token = (token or "").strip()
    if not token:
        raise ValidationError("token is required")
    if len(token) > MAX_TOKEN_LENGTH:
        raise ValidationError("token is too long")
    return token
