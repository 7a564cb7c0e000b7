"""Shared fixtures for skills_core tests."""

import uuid

import pytest


@pytest.fixture
def account_id():
    """Generate a random account UUID for testing."""
    return uuid.uuid4()


@pytest.fixture
def lesson_id():
    return uuid.uuid4()


@pytest.fixture
def track_id():
    return uuid.uuid4()
