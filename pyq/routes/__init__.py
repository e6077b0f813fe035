"""API route modules."""
from pyq.routes import attempts, banks, sessions

__all__ = ["attempts", "banks", "sessions"]
