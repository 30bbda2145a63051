"""Service wiring and authentication dependencies for FastAPI routes."""

from datetime import timedelta

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from gatekeeper.clock import Clock, get_clock
from gatekeeper.config import get_settings
from gatekeeper.database import get_db
from gatekeeper.errors import UnauthorizedError
from gatekeeper.services.auth import AuthService, TokenLifetimes, TokenValidationResult
from gatekeeper.services.jwt import JWTService, get_jwt_service
from gatekeeper.services.notifier import ResetNotifier, get_reset_notifier
from gatekeeper.services.password import PasswordHasher, get_password_hasher
from gatekeeper.services.session_store import SessionStore, get_session_store
from gatekeeper.services.users import UserRepository


def get_token_lifetimes() -> TokenLifetimes:
    settings = get_settings()
    return TokenLifetimes(
        access=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        refresh=timedelta(hours=settings.REFRESH_TOKEN_EXPIRE_HOURS),
        reset=timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
    )


def get_auth_service(
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
    tokens: JWTService = Depends(get_jwt_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
    notifier: ResetNotifier = Depends(get_reset_notifier),
    lifetimes: TokenLifetimes = Depends(get_token_lifetimes),
    clock: Clock = Depends(get_clock),
) -> AuthService:
    """Build an AuthService for one request."""
    return AuthService(
        users=UserRepository(db, clock=clock),
        sessions=sessions,
        tokens=tokens,
        hasher=hasher,
        notifier=notifier,
        lifetimes=lifetimes,
        clock=clock,
    )


def get_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenValidationResult:
    """Validate the Bearer token on the request. Raises UnauthorizedError if missing or invalid."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedError("Not authenticated")

    return auth_service.validate_token(auth_header[7:])
