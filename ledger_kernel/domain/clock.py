"""
Clock -- where "now" comes from.

Report headers stamp a generation time; services take a Clock instead of
calling ``datetime.now()`` so that stamp is reproducible in tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current instant, timezone-aware UTC."""


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """Always answers the instant it was built with."""

    def __init__(self, fixed: datetime):
        if fixed.tzinfo is None:
            raise ValueError("DeterministicClock needs a timezone-aware instant")
        self._fixed = fixed.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._fixed
