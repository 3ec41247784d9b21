"""
Clock -- injectable time source.

Responsibility:
    Lets the proposal assembler and the proposal service stamp
    ``generated_at``, ``expires_at`` and ``signed_at`` without calling
    ``datetime.now()`` themselves.

Architecture position:
    Kernel > Domain -- pure, zero I/O except ``SystemClock``, which is the
    one place the wall clock is read.

Failure modes:
    None.  Both clocks always return a timezone-aware UTC datetime.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Anything that needs the current time receives a Clock through its
        constructor or as a keyword argument.

    Guarantees:
        ``now()`` returns a timezone-aware UTC ``datetime``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...


class SystemClock(Clock):
    """Production clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Controlled clock for tests and proposal replays.

    ``now()`` returns the same value on repeated calls until ``advance()``
    or ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc
        )
        self._offset = timedelta()

    def now(self) -> datetime:
        return self._fixed_time + self._offset

    def set_time(self, time: datetime) -> None:
        """Pin the clock to a specific time."""
        self._fixed_time = time
        self._offset = timedelta()

    def advance(self, seconds: float = 0, *, days: float = 0) -> datetime:
        """Move the clock forward and return the new time."""
        self._offset += timedelta(days=days, seconds=seconds)
        return self.now()
