from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTimeField columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
