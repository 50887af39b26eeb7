# session_auth/core/clock.py

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    # naive UTC, matching how DateTime columns are stored
    return datetime.now(tz=timezone.utc).replace(tzinfo=None)
