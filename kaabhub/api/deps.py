"""
kaabhub.api.deps — FastAPI dependency injection
=================================================

Everything a handler needs comes from the :class:`~kaabhub.api.context.AppContext`
stored on ``app.state.context``.  No module-level engine or config.

Auth is stateless: the bearer token is an HS256 JWT whose only claims are
``sub`` (the user id) and ``exp``.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
from fastapi import Depends, Header
from fastapi.requests import HTTPConnection
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from kaabhub.config import KaabConfig
from kaabhub.database.models import User
from kaabhub.errors import AuthenticationError

_WEAK_SECRETS = frozenset({
    "kaabhub-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


# ---------------------------------------------------------------------------
# Application context
# ---------------------------------------------------------------------------
def get_context(connection: HTTPConnection):
    """Return the AppContext built at startup (or injected by tests)."""
    context = getattr(connection.app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context is not initialised")
    return context


def get_engine(context=Depends(get_context)) -> Engine:
    return context.engine


def get_config(context=Depends(get_context)) -> KaabConfig:
    return context.config


def get_hub(context=Depends(get_context)):
    return context.hub


def get_session(engine: Annotated[Engine, Depends(get_engine)]):
    with Session(engine) as session:
        yield session


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------
def issue_token(user_id: int, ttl_hours: int = 168) -> str:
    """Sign a bearer token for *user_id*."""
    payload = {
        "sub": str(user_id),
        "exp": datetime.now(UTC) + timedelta(hours=ttl_hours),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> int:
    """Return the user id carried by *token*.  Raises AuthenticationError."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise AuthenticationError("Invalid token") from None
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token") from None


def _bearer(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


# ---------------------------------------------------------------------------
# Acting user
# ---------------------------------------------------------------------------
def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    session: Session = Depends(get_session),
) -> User:
    """Resolve the bearer token to a :class:`User`.  Raises 401 if invalid."""
    token = _bearer(authorization)
    if token is None:
        raise AuthenticationError("Missing token")
    user = session.get(User, decode_token(token))
    if user is None:
        raise AuthenticationError("User not found")
    return user


def get_optional_user(
    authorization: Annotated[str | None, Header()] = None,
    session: Session = Depends(get_session),
) -> User | None:
    """Like :func:`get_current_user` but anonymous callers get ``None``.

    A stale or invalid token on a public read is treated as anonymous.
    """
    if _bearer(authorization) is None:
        return None
    try:
        return get_current_user(authorization, session)
    except AuthenticationError:
        return None
