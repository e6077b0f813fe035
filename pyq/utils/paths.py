"""Path utilities for question banks."""
from pathlib import Path

from pyq.config import BANKS_DIR


def banks_dir() -> Path:
    """Get directory holding question-bank JSON files."""
    return BANKS_DIR


def bank_path(bank_id: str) -> Path:
    """Get path to question-bank JSON."""
    return banks_dir() / f"{bank_id}.json"
