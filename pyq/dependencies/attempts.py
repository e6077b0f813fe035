"""Dependencies for attempt endpoints."""
from typing import Annotated

from fastapi import Depends, Request

from pyq.database import SessionLocal
from pyq.services.attempt_service import ActiveAttempt, AttemptRegistry
from pyq.services.session_service import SqlSessionStore
from pyq.utils import validate_id


def get_registry(request: Request) -> AttemptRegistry:
    """Registry of active attempts held on the application."""
    return request.app.state.attempts


def get_session_store() -> SqlSessionStore:
    """Store that persists finished attempts."""
    return SqlSessionStore(SessionLocal)


def get_active_attempt(
    attempt_id: str,
    registry: Annotated[AttemptRegistry, Depends(get_registry)],
) -> ActiveAttempt:
    """Resolve the attempt addressed by the path, or 404."""
    return registry.get(validate_id("attemptId", attempt_id))
