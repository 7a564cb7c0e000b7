"""
Centralized configuration for the Siplan Skills backend.

Environment-aware settings shared by main.py, the API routes and the
progress/quiz services.
"""

import os


def is_dev_mode() -> bool:
    """Check if running in development mode (--dev flag or DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8000"))


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_frontend_url() -> str:
    """Get frontend URL (the React app that consumes this API)."""
    return os.environ.get("FRONTEND_URL", "http://localhost:5173").rstrip("/")


def get_allowed_origins() -> list[str]:
    """
    Get list of allowed CORS origins.

    Includes localhost variants for dev and the configured frontend URL.
    """
    hosts = ["localhost", "127.0.0.1"]
    ports = [5173, 8080, get_api_port()]
    origins = [f"http://{host}:{port}" for host in hosts for port in ports]

    frontend_url = get_frontend_url()
    if frontend_url not in origins:
        origins.append(frontend_url)

    return origins


def get_required_watch_seconds() -> int:
    """Minimum wall-clock seconds a lesson must be open before completion."""
    return int(os.getenv("REQUIRED_WATCH_SECONDS", "120"))


def get_heartbeat_interval_seconds() -> int:
    """Interval between cartório session heartbeats."""
    return int(os.getenv("HEARTBEAT_INTERVAL_SECONDS", "60"))


def get_read_retry_attempts() -> int:
    """Total attempts (first try included) for retryable reads."""
    return int(os.getenv("READ_RETRY_ATTEMPTS", "3"))


def get_db_query_timeout_seconds() -> float:
    """Per-statement timeout; a timed-out read counts as transient and is retried."""
    return float(os.getenv("DB_QUERY_TIMEOUT_SECONDS", "10"))


# Required environment variables for production
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("JWT_SECRET", "Secret key for JWT tokens", True),
    ("SENTRY_DSN", "Sentry DSN for error reporting", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        if os.environ.get(name):
            continue
        if required_in_dev and not in_dev:
            errors.append(f"  ✗ {name}: Not set ({description})")
        else:
            warnings.append(f"  ⚠ {name}: Not set ({description})")

    return not errors, errors + warnings
