from datetime import UTC, datetime


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock pinned to one instant; for tests and replaying cron runs."""

    def __init__(self, now: datetime):
        self.now = now if now.tzinfo else now.replace(tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self.now
