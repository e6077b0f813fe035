"""Time utilities."""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def elapsed_millis(start: datetime, end: datetime) -> int:
    """Wall-clock milliseconds between two instants, never negative."""
    return max(0, int((end - start).total_seconds() * 1000))


def day_key(moment: datetime) -> str:
    """Calendar date string (YYYY-MM-DD) used to bucket sessions."""
    return moment.date().isoformat()


def format_clock(seconds: int) -> str:
    """Render remaining seconds as MM:SS."""
    seconds = max(0, seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"
