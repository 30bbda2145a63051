"""Delivery of password reset tokens to users."""

import logging
from datetime import timedelta
from typing import Protocol
from urllib.parse import urlencode

from gatekeeper.config import get_settings
from gatekeeper.models.user import User

logger = logging.getLogger("gatekeeper")


class ResetNotifier(Protocol):
    def send_reset_token(self, user: User, token: str, expires_in: timedelta) -> None: ...


class LoggingResetNotifier:
    """Writes the reset link to the server log instead of sending email."""

    def __init__(self, reset_url_base: str) -> None:
        self.reset_url_base = reset_url_base

    def reset_link(self, token: str) -> str:
        return f"{self.reset_url_base}?{urlencode({'token': token})}"

    def send_reset_token(self, user: User, token: str, expires_in: timedelta) -> None:
        logger.info(
            "PASSWORD RESET for user %s: %s (expires in %d minutes)",
            user.id,
            self.reset_link(token),
            int(expires_in.total_seconds() // 60),
        )


def get_reset_notifier() -> ResetNotifier:
    return LoggingResetNotifier(get_settings().RESET_URL_BASE)
