"""JWT Token Service."""

import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from jose.exceptions import JWTClaimsError

from gatekeeper.clock import Clock, get_clock
from gatekeeper.config import get_settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


class TokenError(Exception):
    """Base class for token verification failures."""


class MalformedTokenError(TokenError):
    """Token cannot be decoded or lacks required claims."""


class InvalidSignatureError(TokenError):
    """Token signature does not match (tampered or foreign key)."""


class TokenExpiredError(TokenError):
    """Token signature is valid but its expiry has passed."""


class TokenTypeError(TokenError):
    """Token is valid but of the wrong kind (e.g. refresh used as access)."""


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    token_type: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


class JWTService:
    """Handles signing and verification of expiring subject tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "gatekeeper",
        clock: Clock | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.clock = clock or get_clock()

    def issue(self, subject: str, ttl: timedelta, token_type: str = ACCESS_TOKEN) -> IssuedToken:
        """Sign a token for ``subject`` that expires ``ttl`` from now."""
        now = self.clock.now()
        issued_at = math.floor(now.timestamp())
        expires_at = math.ceil((now + ttl).timestamp())
        payload = {
            "sub": subject,
            "iat": issued_at,
            "exp": expires_at,
            "jti": str(uuid.uuid4()),
            "iss": self.issuer,
            "type": token_type,
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return IssuedToken(token=token, expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc))

    def verify(self, token: str, token_type: str | None = None) -> TokenClaims:
        """Verify signature, expiry and (optionally) kind. Raises a TokenError subclass."""
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise MalformedTokenError(str(e)) from e

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_exp": False},
            )
        except JWTClaimsError as e:
            raise MalformedTokenError(str(e)) from e
        except JWTError as e:
            raise InvalidSignatureError(str(e)) from e

        claims = self._parse_claims(payload)
        if claims.expires_at <= self.clock.now():
            raise TokenExpiredError("token has expired")
        if token_type is not None and claims.token_type != token_type:
            raise TokenTypeError(f"expected {token_type} token, got {claims.token_type}")
        return claims

    @staticmethod
    def _parse_claims(payload: dict[str, Any]) -> TokenClaims:
        try:
            return TokenClaims(
                subject=str(payload["sub"]),
                token_type=str(payload.get("type", "")),
                token_id=str(payload.get("jti", "")),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise MalformedTokenError(f"invalid token claims: {e}") from e


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        settings = get_settings()
        _jwt_service = JWTService(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            issuer=settings.JWT_ISSUER,
        )
    return _jwt_service
