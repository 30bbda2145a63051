"""Authentication service.

Implements the credential and session lifecycle: sign-up, login, forgotten
password, password reset and access-token validation. The service keeps no
state of its own between calls; everything lives in the user repository and
the session store it is constructed with.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import timedelta

from gatekeeper.clock import Clock, get_clock
from gatekeeper.errors import BadRequestError, InternalError, StoreError, UnauthorizedError, ValidationError
from gatekeeper.models.user import User
from gatekeeper.services.jwt import ACCESS_TOKEN, REFRESH_TOKEN, JWTService, TokenError
from gatekeeper.services.notifier import ResetNotifier
from gatekeeper.services.password import PasswordHasher, PasswordHashError
from gatekeeper.services.session_store import SessionStore, refresh_key, reset_key
from gatekeeper.services.users import UserRepository
from gatekeeper.services.validation import (
    validate_email,
    validate_name,
    validate_password,
    validate_token,
)

logger = logging.getLogger("gatekeeper")

INVALID_CREDENTIALS = "invalid email or password"
INVALID_TOKEN = "invalid or expired token"
INVALID_RESET_TOKEN = "invalid or expired reset token"
FORGOT_PASSWORD_MESSAGE = "If your email is registered, you will receive a password reset link"


@dataclass(frozen=True)
class PublicUser:
    """User fields that may leave the service."""

    id: str
    email: str
    first_name: str
    last_name: str

    @classmethod
    def from_model(cls, user: User) -> "PublicUser":
        return cls(id=user.id, email=user.email, first_name=user.first_name, last_name=user.last_name)


@dataclass(frozen=True)
class SignUpResult:
    success: bool
    message: str
    user: PublicUser


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    refresh_token: str
    expires_in: int
    user: PublicUser


@dataclass(frozen=True)
class StatusResult:
    success: bool
    message: str


@dataclass(frozen=True)
class TokenValidationResult:
    valid: bool
    user: PublicUser
    message: str


@dataclass(frozen=True)
class TokenLifetimes:
    access: timedelta = timedelta(minutes=15)
    refresh: timedelta = timedelta(hours=168)
    reset: timedelta = timedelta(minutes=30)


class AuthService:
    """Handles registration, authentication and password reset."""

    def __init__(
        self,
        users: UserRepository,
        sessions: SessionStore,
        tokens: JWTService,
        hasher: PasswordHasher,
        notifier: ResetNotifier,
        lifetimes: TokenLifetimes | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.users = users
        self.sessions = sessions
        self.tokens = tokens
        self.hasher = hasher
        self.notifier = notifier
        self.lifetimes = lifetimes or TokenLifetimes()
        self.clock = clock or get_clock()

    def sign_up(self, email: str, password: str, first_name: str, last_name: str) -> SignUpResult:
        """Register a new active user.

        Email uniqueness is left to the store's constraint rather than checked
        first, so two concurrent sign-ups with one email yield exactly one
        AlreadyExistsError.
        """
        email = validate_email(email)
        validate_password(password)
        first_name = validate_name(first_name, "first_name")
        last_name = validate_name(last_name, "last_name")

        password_hash = self.hasher.hash(password)
        user = self.users.create(email, password_hash, first_name, last_name)
        logger.info("Registered user %s", user.id)

        return SignUpResult(success=True, message="User registered successfully", user=PublicUser.from_model(user))

    def login(self, email: str, password: str) -> LoginResult:
        """Authenticate by email and password and issue an access/refresh pair."""
        email = validate_email(email)
        if not password:
            raise ValidationError("password is required")

        user = self.users.find_by_email(email)
        if user is None:
            # Same bcrypt cost as a registered account.
            self.hasher.verify(self.hasher.dummy_hash, password)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        try:
            password_ok = self.hasher.verify(user.password_hash, password)
        except PasswordHashError as e:
            logger.error("Corrupted password hash for user %s: %s", user.id, e)
            raise StoreError("stored credentials are corrupted") from e

        if not password_ok or not user.is_active:
            raise UnauthorizedError(INVALID_CREDENTIALS)

        # A failed last-login write rolls the session back and expires `user`,
        # so nothing below may read from it.
        user_id = user.id
        public = PublicUser.from_model(user)

        access = self.tokens.issue(user_id, self.lifetimes.access, ACCESS_TOKEN)
        refresh = self.tokens.issue(user_id, self.lifetimes.refresh, REFRESH_TOKEN)

        # Stored TTL follows the token's own expiry so the two lapse together.
        remaining = refresh.expires_at - self.clock.now()
        self.sessions.put(refresh_key(user_id), refresh.token, remaining)

        try:
            self.users.update_last_login(user_id)
        except StoreError:
            logger.warning("Could not record last login for user %s", user_id, exc_info=True)

        return LoginResult(
            access_token=access.token,
            refresh_token=refresh.token,
            expires_in=int(self.lifetimes.access.total_seconds()),
            user=public,
        )

    def forgot_password(self, email: str) -> StatusResult:
        """Start a password reset.

        The response is identical whether or not the email is registered.
        """
        email = validate_email(email)

        user = self.users.find_by_email(email)
        if user is not None:
            token = secrets.token_urlsafe(32)
            self.sessions.put(reset_key(token), user.id, self.lifetimes.reset)
            self.notifier.send_reset_token(user, token, self.lifetimes.reset)

        return StatusResult(success=True, message=FORGOT_PASSWORD_MESSAGE)

    def reset_password(self, token: str, new_password: str) -> StatusResult:
        """Consume a reset token and set a new password.

        The token is removed as it is read, so it works at most once. The
        user's registered refresh token is revoked.
        """
        token = validate_token(token)
        validate_password(new_password)

        user_id = self.sessions.pop(reset_key(token))
        if user_id is None:
            raise BadRequestError(INVALID_RESET_TOKEN)

        password_hash = self.hasher.hash(new_password)
        if not self.users.update_password(user_id, password_hash):
            raise BadRequestError(INVALID_RESET_TOKEN)

        self.sessions.delete(refresh_key(user_id))
        logger.info("Password reset for user %s", user_id)

        return StatusResult(success=True, message="Password reset successfully")

    def validate_token(self, access_token: str) -> TokenValidationResult:
        """Check an access token and that its user still exists and is active."""
        try:
            access_token = validate_token(access_token)
        except ValidationError as e:
            raise UnauthorizedError(INVALID_TOKEN) from e

        try:
            claims = self.tokens.verify(access_token, ACCESS_TOKEN)
        except TokenError as e:
            logger.debug("Rejected access token: %s: %s", type(e).__name__, e)
            raise UnauthorizedError(INVALID_TOKEN) from e

        try:
            user_id = str(uuid.UUID(claims.subject))
        except ValueError as e:
            logger.error("Signed token carries unparsable subject %r", claims.subject)
            raise InternalError("token subject is not a valid user id") from e

        user = self.users.find_by_id(user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError(INVALID_TOKEN)

        return TokenValidationResult(valid=True, user=PublicUser.from_model(user), message="token is valid")
