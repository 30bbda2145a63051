"""Wall-clock time source shared by the token codec and session store."""

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Current UTC time, timezone-aware."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


_clock = SystemClock()


def get_clock() -> Clock:
    """Get the process-wide clock."""
    return _clock
