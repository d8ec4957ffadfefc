"""Clock implementations."""

from datetime import UTC, datetime

from src.core.interfaces.clock import IClock


class SystemClock(IClock):
    """Production clock using the system time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock(IClock):
    """Clock frozen at a given instant, for tests and replays."""

    def __init__(self, fixed_time: datetime) -> None:
        self._validate_utc(fixed_time)
        self._fixed_time = fixed_time

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, new_time: datetime) -> None:
        self._validate_utc(new_time)
        self._fixed_time = new_time

    @staticmethod
    def _validate_utc(dt: datetime) -> None:
        if dt.tzinfo is not UTC:
            raise ValueError(f"datetime must have tzinfo=UTC, got tzinfo={dt.tzinfo}")
