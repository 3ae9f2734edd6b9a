"""
JWT Authentication utilities for Django Ninja.

The site has a single owner; dashboard tokens carry ``role: owner``.
"""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from django.conf import settings
from django.http import HttpRequest
from ninja.security import HttpBearer

OWNER_ROLE = "owner"


class AuthBearer(HttpBearer):
    """JWT Bearer token authentication for the dashboard."""

    def authenticate(self, request: HttpRequest, token: str) -> str | None:
        payload = verify_token(token)
        if not payload or payload.get("role") != OWNER_ROLE:
            return None

        subject = payload.get("sub")
        if not subject:
            return None

        request.auth_user = subject
        return subject


def get_current_user(request: HttpRequest) -> str:
    """Get authenticated subject from request."""
    return getattr(request, "auth_user", request.auth)


def check_password(password: str) -> bool:
    """Compare against DASHBOARD_PASSWORD; an unset password never matches."""
    expected = settings.DASHBOARD_PASSWORD
    if not expected:
        return False
    return hmac.compare_digest(password.encode(), expected.encode())


def create_token(subject: str) -> str:
    """Create JWT token for the site owner."""
    payload = {
        "sub": subject,
        "role": OWNER_ROLE,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS),
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict[str, Any] | None:
    """Verify JWT token and return payload."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.InvalidTokenError:
        return None
