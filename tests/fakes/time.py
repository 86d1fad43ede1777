"""Fake Time implementation for testing.

FakeTime returns a fixed instant so snapshot timestamps are deterministic.
"""

from datetime import UTC, datetime

from ksr.core.time.abc import Time

DEFAULT_NOW = datetime(2024, 1, 15, 10, 30, 0, tzinfo=UTC)


class FakeTime(Time):
    """Fake implementation returning a fixed current time.

    This class has NO public setup methods. All state is provided via constructor.
    """

    def __init__(self, now: datetime = DEFAULT_NOW) -> None:
        """Create FakeTime.

        Args:
            now: Instant returned by every now() call
        """
        self._now = now

    def now(self) -> datetime:
        return self._now
