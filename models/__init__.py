from datetime import datetime, timezone


def utcnow():
    """Naive UTC now, the form timestamps are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
