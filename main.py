"""
Backend entry point for Siplan Skills.

Architecture:
- One Python process, one asyncio event loop
- FastAPI serves the web frontend
- APScheduler runs session heartbeat jobs in the same loop

We use FastAPI's lifespan to manage startup/shutdown. The lifespan pattern
gives us uvicorn's signal handling and --reload for free.

Run with: python main.py [--port PORT] [--dev]
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

project_root = Path(__file__).parent

from dotenv import load_dotenv

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")  # Local overrides (gitignored)
load_dotenv()  # Fallback to .env

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skills_api.errors import register_error_handlers
from skills_api.routes.catalog import router as catalog_router
from skills_api.routes.progress import router as progress_router
from skills_api.routes.quizzes import router as quizzes_router
from skills_api.routes.sessions import router as sessions_router
from skills_api.routes.tracks import router as tracks_router
from skills_core.config import (
    check_required_env_vars,
    get_allowed_origins,
    get_api_port,
    get_log_level,
)
from skills_core.database import close_engine, is_configured
from skills_core.refresh import ProgressRefresh
from skills_core.scheduler import init_scheduler, shutdown_scheduler

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if os.environ.get("SENTRY_DSN"):
    sentry_sdk.init(
        dsn=os.environ["SENTRY_DSN"],
        traces_sample_rate=0.0,
        environment=os.environ.get("SENTRY_ENVIRONMENT", "production"),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Starts the session scheduler alongside FastAPI in the same event loop.
    """
    ok, messages = check_required_env_vars()
    for message in messages:
        print(message)
    if not ok:
        print("Error: missing required environment variables")
        sys.exit(1)

    if not is_configured():
        print("Warning: DATABASE_URL not set, database-backed endpoints will fail")

    init_scheduler()

    yield  # FastAPI runs here

    print("Shutting down...")
    shutdown_scheduler()
    await close_engine()  # Close database connections


# Create FastAPI app with lifespan
app = FastAPI(
    title="Siplan Skills API",
    lifespan=lifespan,
)

# Process-wide refresh generation, bumped after each completion write
app.state.refresh = ProgressRefresh()

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(catalog_router)
app.include_router(progress_router)
app.include_router(quizzes_router)
app.include_router(tracks_router)
app.include_router(sessions_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "database_configured": is_configured(),
        "refresh_generation": app.state.refresh.generation,
    }


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Siplan Skills API Server")
    parser.add_argument(
        "--port",
        type=int,
        default=get_api_port(),
        help="Port to run the server on (default: API_PORT or 8000)",
    )
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development mode (missing settings are warnings, not errors)",
    )
    args = parser.parse_args()

    # Set env var so it persists across uvicorn reloads
    if args.dev:
        os.environ["DEV_MODE"] = "true"

    # Pass app object directly (not string) to avoid module reimport issues
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
