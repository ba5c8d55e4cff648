from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def now_millis() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return int(now().timestamp() * 1000)
