"""
JWT authentication utilities for the web API.

Security measures implemented:
- HS256 signing algorithm with 256-bit secret
- Token expiration (24 hours)
- HttpOnly "session" cookie (set by the sign-in frontend)

The token is accepted from the "session" cookie or an
"Authorization: Bearer" header.
"""

import os
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from fastapi import HTTPException, Request

from skills_core.context import Account
from skills_core.enums import AccountType

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = 24


def create_jwt(account: Account) -> str:
    """
    Create a signed JWT token for an authenticated account.

    Args:
        account: The signed-in account (cartório or admin)

    Returns:
        Signed JWT token string
    """
    if not JWT_SECRET:
        raise ValueError("JWT_SECRET environment variable not set")

    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(account.account_id),
        "type": account.account_type.value,
        "owner_id": str(account.owner_id) if account.owner_id else None,
        "name": account.name,
        "iat": now,
        "exp": now + timedelta(hours=JWT_EXPIRATION_HOURS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_jwt(token: str) -> dict | None:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token string

    Returns:
        Decoded payload dict if valid, None if invalid
    """
    if not JWT_SECRET:
        raise ValueError("JWT_SECRET environment variable not set")

    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def _extract_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return request.cookies.get("session")


def account_from_payload(payload: dict) -> Account | None:
    """Build an Account from a decoded token, None if the claims are malformed."""
    try:
        owner_id = payload.get("owner_id")
        return Account(
            account_id=UUID(payload["sub"]),
            account_type=AccountType(payload["type"]),
            owner_id=UUID(owner_id) if owner_id else None,
            name=payload.get("name"),
        )
    except (KeyError, ValueError):
        return None


async def get_current_account(request: Request) -> Account:
    """
    FastAPI dependency to get the current authenticated account.

    Args:
        request: The FastAPI request object

    Returns:
        The account described by the token

    Raises:
        HTTPException: 401 if not authenticated or invalid token
    """
    token = _extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = verify_jwt(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    account = account_from_payload(payload)
    if account is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return account


def require_self_or_admin(account: Account, account_id: UUID) -> None:
    """Allow reading another account's data only for admins."""
    if account.account_id != account_id and not account.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
