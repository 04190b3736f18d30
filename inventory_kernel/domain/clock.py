"""
Clock -- injectable time source.

Services never call ``datetime.now()`` directly.  The ledger stamps every
movement with ``clock.now_utc()``, so tests can pin movement dates with
DeterministicClock.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Guarantees:
        - ``now_utc()`` returns a timezone-aware UTC ``datetime``.
    """

    @abstractmethod
    def now_utc(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now_utc().date()


class SystemClock(Clock):
    """Production clock; the one sanctioned source of wall time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    ``now_utc()`` returns the same value until ``advance()``, ``tick()`` or
    ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc
        )
        self._advance_seconds = 0

    def now_utc(self) -> datetime:
        current = self._fixed_time + timedelta(seconds=self._advance_seconds)
        return current.astimezone(timezone.utc)

    def set_time(self, time: datetime) -> None:
        self._fixed_time = time
        self._advance_seconds = 0

    def advance(self, seconds: int = 1) -> None:
        self._advance_seconds += seconds

    def tick(self) -> datetime:
        """Advance by 1 second and return the new time."""
        self.advance(1)
        return self.now_utc()
