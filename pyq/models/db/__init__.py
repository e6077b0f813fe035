"""Database models."""
from pyq.models.db.session import PYQSession, TimeEntry

__all__ = [
    "PYQSession",
    "TimeEntry",
]
