"""Root pytest configuration."""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)

# skills_api.auth reads the secret at import time
os.environ.setdefault("JWT_SECRET", "test-secret-for-pytest-only-0123456789abcdef")


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()
