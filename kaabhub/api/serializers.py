"""
kaabhub.api.serializers — ORM rows → JSON-ready dicts
=======================================================

Shared by every router.  Call inside the request's session: relationships
are loaded lazily on first access.
"""

from __future__ import annotations

from datetime import date, datetime

from kaabhub.database.models import (
    Answer,
    AnswerComment,
    Mentor,
    Opportunity,
    Question,
    User,
)
from kaabhub.services.vote_service import tally


def _iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value else None


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
def author_dict(u: User | None) -> dict | None:
    """The short author card embedded in questions, answers and comments."""
    if u is None:
        return None
    return {"id": u.id, "name": u.name, "profile_picture": u.profile_picture or ""}


def user_dict(u: User, *, owner: bool = True) -> dict:
    """Full user record.  ``owner=False`` applies the user's privacy settings."""
    data = {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "profile_picture": u.profile_picture or "",
        "bio": u.bio or "",
        "university": u.university,
        "course": u.course,
        "year": u.year,
        "location": u.location,
        "field": u.field,
        "reputation": u.reputation,
        "is_admin": u.is_admin,
        "created_at": _iso(u.created_at),
    }
    if owner:
        data["notification_preferences"] = {
            "email_notifications": u.email_notifications,
            "push_notifications": u.push_notifications,
            "answer_notifications": u.answer_notifications,
            "upvote_notifications": u.upvote_notifications,
            "mention_notifications": u.mention_notifications,
        }
        data["privacy_settings"] = {
            "show_email": u.show_email,
            "show_university": u.show_university,
            "show_course": u.show_course,
            "show_year": u.show_year,
        }
        return data

    if not u.show_email:
        data["email"] = None
    if not u.show_university:
        data["university"] = None
    if not u.show_course:
        data["course"] = None
    if not u.show_year:
        data["year"] = None
    return data


def profile_dict(u: User, *, owner: bool = True) -> dict:
    """User record plus the questions asked and answers given."""
    data = user_dict(u, owner=owner)
    data["questions_asked"] = [question_summary(q) for q in u.questions]
    data["answers_provided"] = [
        {
            "id": a.id,
            "question_id": a.question_id,
            "content": a.content,
            "is_accepted": a.is_accepted,
            "created_at": _iso(a.created_at),
        }
        for a in u.answers
    ]
    return data


# ---------------------------------------------------------------------------
# Votes
# ---------------------------------------------------------------------------
def _vote_fields(votes, viewer_id: int | None) -> dict:
    sets = tally(votes)
    fields = {
        "upvotes": sorted(sets.upvotes),
        "downvotes": sorted(sets.downvotes),
        "score": sets.score,
    }
    if viewer_id is not None:
        direction = sets.direction_of(viewer_id)
        fields["user_vote"] = direction.value if direction else None
    return fields


# ---------------------------------------------------------------------------
# Questions & answers
# ---------------------------------------------------------------------------
def comment_dict(c: AnswerComment) -> dict:
    return {
        "id": c.id,
        "content": c.content,
        "author": author_dict(c.author),
        "created_at": _iso(c.created_at),
    }


def answer_dict(a: Answer, viewer_id: int | None = None) -> dict:
    return {
        "id": a.id,
        "content": a.content,
        "author": author_dict(a.author),
        "question_id": a.question_id,
        "is_accepted": a.is_accepted,
        "comments": [comment_dict(c) for c in a.comments],
        **_vote_fields(a.votes, viewer_id),
        "created_at": _iso(a.created_at),
        "updated_at": _iso(a.updated_at),
    }


def question_summary(q: Question) -> dict:
    return {
        "id": q.id,
        "title": q.title,
        "category": q.category,
        "tags": list(q.tags or []),
        "views": q.views,
        "is_solved": q.is_solved,
        "created_at": _iso(q.created_at),
    }


def question_dict(
    q: Question, viewer_id: int | None = None, *, include_answers: bool = True
) -> dict:
    data = {
        "id": q.id,
        "title": q.title,
        "content": q.content,
        "author": author_dict(q.author),
        "tags": list(q.tags or []),
        "category": q.category,
        "course": q.course,
        **_vote_fields(q.votes, viewer_id),
        "answer_count": len(q.answers),
        "views": q.views,
        "is_solved": q.is_solved,
        "solved_by": q.solved_by_id,
        "created_at": _iso(q.created_at),
        "updated_at": _iso(q.updated_at),
    }
    if include_answers:
        data["answers"] = [answer_dict(a, viewer_id) for a in q.answers]
    return data


# ---------------------------------------------------------------------------
# Opportunities & mentors
# ---------------------------------------------------------------------------
def opportunity_dict(o: Opportunity) -> dict:
    return {
        "id": o.id,
        "title": o.title,
        "description": o.description,
        "category": o.category,
        "location": o.location,
        "field": o.field,
        "deadline": _iso(o.deadline),
        "link": o.link,
        "author": author_dict(o.author),
        "created_at": _iso(o.created_at),
    }


def mentor_dict(m: Mentor) -> dict:
    return {
        "id": m.id,
        "slug": m.slug,
        "name": m.name,
        "skill": m.skill,
        "intro": m.intro,
        "location": m.location,
        "email": m.email,
        "bio": m.bio,
        "skills": list(m.skills or []),
        "testimonials": list(m.testimonials or []),
        "social": dict(m.social or {}),
        "image": m.image,
    }
