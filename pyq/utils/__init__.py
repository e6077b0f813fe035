"""Utility modules."""
from pyq.utils.json_utils import json_dump, json_load
from pyq.utils.paths import bank_path, banks_dir
from pyq.utils.time_utils import day_key, elapsed_millis, format_clock, utc_now
from pyq.utils.validation import validate_id

__all__ = [
    "json_dump",
    "json_load",
    "bank_path",
    "banks_dir",
    "day_key",
    "elapsed_millis",
    "format_clock",
    "utc_now",
    "validate_id",
]
