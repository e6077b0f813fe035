"""Application configuration and constants."""
import os
from pathlib import Path


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Directories
BANKS_DIR = Path(os.environ.get("PYQ_BANKS_DIR", Path.cwd() / "data" / "banks"))

# Database
DB_DIR = Path(os.environ.get("DB_DIR", Path.cwd() / "data"))
DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{DB_DIR / 'pyq.db'}")

# Exam timing
DEFAULT_EXAM_MINUTES = _parse_int_env("PYQ_DEFAULT_EXAM_MINUTES", 60)
LEGACY_EXAM_MINUTES = 4  # old papers shipped "4" meaning an hour
TIMER_WARNING_SECONDS = 300
TIMER_DANGER_SECONDS = 60
TIMER_TICK_SECONDS = 1

# Payload markers
EXTRA_INFO_MARKER = "extra_info"

# Time tracking
ACTIVITY_TYPE = "assessment"

# Finished attempts stay reviewable this long before the registry drops them
FINISHED_ATTEMPT_TTL_SECONDS = _parse_int_env("PYQ_FINISHED_ATTEMPT_TTL_SECONDS", 60 * 60)
