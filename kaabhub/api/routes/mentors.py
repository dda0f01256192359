"""
kaabhub.api.routes.mentors — Mentor directory (read-only)
===========================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kaabhub.api.deps import get_session
from kaabhub.api.serializers import mentor_dict
from kaabhub.services import mentor_service

router = APIRouter(prefix="/mentors", tags=["mentors"])


@router.get("")
def list_mentors(
    skill: str | None = None,
    location: str | None = None,
    session: Session = Depends(get_session),
):
    mentors = mentor_service.list_mentors(session, skill=skill, location=location)
    return [mentor_dict(m) for m in mentors]


@router.get("/{slug}")
def get_mentor(slug: str, session: Session = Depends(get_session)):
    return mentor_dict(mentor_service.get_mentor(session, slug))
