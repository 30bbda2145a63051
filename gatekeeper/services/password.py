"""Password hashing service."""

import re
import secrets

import bcrypt

from gatekeeper.config import get_settings

BCRYPT_MAX_BYTES = 72
_BCRYPT_HASH_RE = re.compile(r"^\$2[abxy]?\$(\d{2})\$[./A-Za-z0-9]{53}$")


class PasswordHashError(Exception):
    """Stored hash is structurally invalid (corrupted), as opposed to a wrong password."""


class PasswordHasher:
    """Salted bcrypt hashing. The salt and cost are embedded in every hash."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        """Hash a plaintext password with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password_hash: str, password: str) -> bool:
        """Check a plaintext against a stored hash.

        Returns False on mismatch. Raises PasswordHashError if the stored hash
        cannot be parsed, so corruption is not mistaken for bad credentials.
        """
        if not password_hash or not _BCRYPT_HASH_RE.match(password_hash):
            raise PasswordHashError("stored password hash has an invalid format")

        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            return False

        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except ValueError as e:
            raise PasswordHashError(f"stored password hash is corrupted: {e}") from e

    @property
    def dummy_hash(self) -> str:
        """Hash of a random secret, verified against when no account matches."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash(secrets.token_urlsafe(16))
        return self._dummy_hash


_password_hasher: PasswordHasher | None = None


def get_password_hasher() -> PasswordHasher:
    """Get singleton password hasher instance."""
    global _password_hasher
    if _password_hasher is None:
        _password_hasher = PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)
    return _password_hasher
