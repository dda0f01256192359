"""
kaabhub.constants — Shared Constants
=====================================

Single source of truth for the reputation grant, field allow-lists and
validation limits.  Import from here instead of duplicating in services
and routes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Reputation
# ---------------------------------------------------------------------------
ACCEPTED_ANSWER_REPUTATION = 15

# ---------------------------------------------------------------------------
# Validation limits
# ---------------------------------------------------------------------------
MIN_PASSWORD_LENGTH = 6
MAX_BIO_LENGTH = 500
MAX_TITLE_LENGTH = 300
MAX_TAG_LENGTH = 50

# ---------------------------------------------------------------------------
# PATCH allow-lists: any other key in the body is rejected with 400
# ---------------------------------------------------------------------------
QUESTION_UPDATE_FIELDS: frozenset[str] = frozenset({
    "title", "content", "tags", "category", "course",
})

PROFILE_UPDATE_FIELDS: frozenset[str] = frozenset({
    "name", "bio", "university", "course", "year",
    "location", "field", "profile_picture",
})

NOTIFICATION_PREFERENCE_FIELDS: frozenset[str] = frozenset({
    "email_notifications",
    "push_notifications",
    "answer_notifications",
    "upvote_notifications",
    "mention_notifications",
})

PRIVACY_SETTING_FIELDS: frozenset[str] = frozenset({
    "show_email", "show_university", "show_course", "show_year",
})

# ---------------------------------------------------------------------------
# Question listing
# ---------------------------------------------------------------------------
QUESTION_SORT_KEYS: tuple[str, ...] = ("createdAt", "views", "upvotes")


def room_name(question_id: int) -> str:
    """Socket room for live updates on one question."""
    return f"question-{question_id}"
