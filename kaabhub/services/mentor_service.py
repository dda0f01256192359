"""
kaabhub.services.mentor_service — Mentor Directory
===================================================
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from kaabhub.database.models import Mentor
from kaabhub.errors import NotFoundError


def list_mentors(
    session: Session,
    *,
    skill: str | None = None,
    location: str | None = None,
) -> list[Mentor]:
    """Mentors ordered by name.

    ``skill`` matches (case-insensitively) the headline skill or any entry of
    the mentor's skill list.
    """
    stmt = select(Mentor).order_by(Mentor.name)
    if location:
        stmt = stmt.where(func.lower(Mentor.location) == location.strip().lower())
    mentors = list(session.scalars(stmt).all())

    if skill:
        wanted = skill.strip().lower()
        mentors = [
            m for m in mentors
            if m.skill.lower() == wanted or wanted in (s.lower() for s in m.skills or [])
        ]
    return mentors


def get_mentor(session: Session, slug: str) -> Mentor:
    mentor = session.scalar(select(Mentor).where(Mentor.slug == slug))
    if mentor is None:
        raise NotFoundError("Mentor not found")
    return mentor
