"""
FastAPI application entry point.

Run with: uvicorn satprep.main:app --reload
"""

from contextlib import asynccontextmanager
import uuid

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from satprep import __version__
from satprep.core.config import settings
from satprep.core.logging import configure_logging, request_context
from satprep.persistence.database import init_database
from satprep.api.routes import domains, full_tests, health, practice, progress, scoring
from satprep.api.exception_handlers import setup_exception_handlers

# Configure logging before anything else
configure_logging(log_sessions_to_keep=settings.log_sessions_to_keep)
log = structlog.get_logger(__name__)


# =============================================================================
# Correlation ID Middleware
# =============================================================================


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Tags each request's logs with a request_id and echoes it as X-Request-ID."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        with request_context(request_id):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Applies the schema on startup; the database file is created if missing.
    """
    log.info(
        "application_starting",
        debug=settings.debug,
        database_path=str(settings.database_path),
    )

    await init_database()

    log.info("application_started")

    yield

    log.info("application_shutting_down")


app = FastAPI(
    title="SAT Prep Service",
    description="Adaptive SAT practice tests with module routing and score scaling",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware for development
if settings.debug:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(CorrelationIDMiddleware)

setup_exception_handlers(app)

app.include_router(health.router, tags=["system"])
app.include_router(full_tests.router)
app.include_router(practice.router)
app.include_router(progress.router)
app.include_router(domains.router)
app.include_router(scoring.router)


@app.get("/")
async def root():
    """Root endpoint with basic info."""
    return {"name": "SAT Prep Service", "version": __version__, "status": "running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "satprep.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
