"""FastAPI dependencies."""
from pyq.dependencies.attempts import get_active_attempt, get_registry, get_session_store

__all__ = ["get_active_attempt", "get_registry", "get_session_store"]
