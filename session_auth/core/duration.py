# session_auth/core/duration.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta

_PATTERN = re.compile(r"^(\d+)([smhd])$")

_UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 60 * 60 * 24,
}


@dataclass(frozen=True)
class Duration:
    """A token lifetime written as ``<int><s|m|h|d>`` (e.g. ``15m``, ``7d``).

    Parsing happens once, when configuration loads; anything else in the
    grammar is rejected with ValueError.
    """

    value: int
    unit: str

    @classmethod
    def parse(cls, raw: str) -> "Duration":
        if not isinstance(raw, str):
            raise ValueError(f"Invalid duration: {raw!r}")

        match = _PATTERN.match(raw.strip())
        if match is None:
            raise ValueError(f"Invalid duration {raw!r}: expected <int><s|m|h|d>")

        value = int(match.group(1))
        if value <= 0:
            raise ValueError(f"Invalid duration {raw!r}: must be positive")

        return cls(value=value, unit=match.group(2))

    @property
    def seconds(self) -> int:
        return self.value * _UNIT_SECONDS[self.unit]

    def as_timedelta(self) -> timedelta:
        return timedelta(seconds=self.seconds)

    def __str__(self) -> str:
        return f"{self.value}{self.unit}"
