"""Main FastAPI application with modularized routes."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pyq.database import init_db
from pyq.logging_setup import setup_console_logging
from pyq.routes import attempts, banks, sessions
from pyq.services.attempt_service import AttemptRegistry

setup_console_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup; stop countdowns on shutdown."""
    init_db()
    yield
    app.state.attempts.close_all()


def create_app() -> FastAPI:
    app = FastAPI(title="PYQ Assessment API", lifespan=lifespan)
    app.state.attempts = AttemptRegistry()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(banks.router)
    app.include_router(attempts.router)
    app.include_router(sessions.router)
    return app


app = create_app()
