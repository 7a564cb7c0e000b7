"""Pytest fixtures for web API tests."""

import uuid

import pytest

from skills_api.auth import create_jwt
from skills_core.context import Account
from skills_core.enums import AccountType


@pytest.fixture
def cartorio_account():
    return Account(
        account_id=uuid.uuid4(),
        account_type=AccountType.cartorio,
        owner_id=uuid.uuid4(),
        name="Cartório Teste",
    )


@pytest.fixture
def admin_account():
    return Account(account_id=uuid.uuid4(), account_type=AccountType.admin, name="Admin")


@pytest.fixture
def auth_headers(cartorio_account):
    """Bearer header for the cartório account."""
    return {"Authorization": f"Bearer {create_jwt(cartorio_account)}"}


@pytest.fixture
def admin_headers(admin_account):
    return {"Authorization": f"Bearer {create_jwt(admin_account)}"}
