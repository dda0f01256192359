"""
kaabhub.services.user_service — Accounts & Profiles
====================================================

Registration, credential checks, and self-service profile edits.
Passwords are stored as bcrypt hashes; the plaintext never leaves this module.
"""

from __future__ import annotations

import logging
from typing import Any

import bcrypt
from sqlalchemy import select
from sqlalchemy.orm import Session

from kaabhub.constants import (
    MAX_BIO_LENGTH,
    MIN_PASSWORD_LENGTH,
    NOTIFICATION_PREFERENCE_FIELDS,
    PRIVACY_SETTING_FIELDS,
    PROFILE_UPDATE_FIELDS,
)
from kaabhub.database.models import User
from kaabhub.errors import AuthenticationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ---------------------------------------------------------------------------
# Registration & login
# ---------------------------------------------------------------------------
def register_user(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    university: str | None = None,
    course: str | None = None,
    year: int | None = None,
) -> User:
    """Create a new account.

    Raises
    ------
    ValidationError
        Blank name/email, short password, or an email already registered.
    """
    name = name.strip()
    email = normalize_email(email)
    if not name:
        raise ValidationError("Name is required")
    if not email or "@" not in email:
        raise ValidationError("A valid email is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    existing = session.scalar(select(User.id).where(User.email == email))
    if existing is not None:
        raise ValidationError("Email already registered")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        university=university.strip() if university else None,
        course=course.strip() if course else None,
        year=year,
    )
    session.add(user)
    session.commit()
    logger.info("Registered user %d (%s)", user.id, email)
    return user


def authenticate(session: Session, email: str, password: str) -> User:
    """Return the user for *email* if *password* matches.

    Unknown email and wrong password produce the same error.
    """
    user = session.scalar(select(User).where(User.email == normalize_email(email)))
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid credentials")
    return user


def get_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


# ---------------------------------------------------------------------------
# Self-service edits
# ---------------------------------------------------------------------------
def _reject_unknown_keys(updates: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(updates) - allowed
    if unknown:
        raise ValidationError(f"Invalid updates: {', '.join(sorted(unknown))}")


def update_profile(session: Session, user: User, updates: dict[str, Any]) -> User:
    """Apply a partial profile update.  Keys outside the allow-list → 400."""
    _reject_unknown_keys(updates, PROFILE_UPDATE_FIELDS)

    if "name" in updates:
        name = (updates["name"] or "").strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        updates["name"] = name
    if "bio" in updates:
        bio = updates["bio"] or ""
        if len(bio) > MAX_BIO_LENGTH:
            raise ValidationError(f"Bio must be at most {MAX_BIO_LENGTH} characters")
        updates["bio"] = bio
    if "profile_picture" in updates:
        updates["profile_picture"] = updates["profile_picture"] or ""

    for key, value in updates.items():
        if isinstance(value, str) and key != "bio":
            value = value.strip()
        setattr(user, key, value)
    session.commit()
    return user


def update_settings(session: Session, user: User, updates: dict[str, Any]) -> User:
    """Toggle notification preferences and privacy settings."""
    _reject_unknown_keys(
        updates, NOTIFICATION_PREFERENCE_FIELDS | PRIVACY_SETTING_FIELDS
    )
    for key, value in updates.items():
        if not isinstance(value, bool):
            raise ValidationError(f"Setting '{key}' must be true or false")
        setattr(user, key, value)
    session.commit()
    return user
