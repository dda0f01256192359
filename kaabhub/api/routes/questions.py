"""
kaabhub.api.routes.questions — Question endpoints
===================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from kaabhub.api.deps import get_current_user, get_optional_user, get_session
from kaabhub.api.rate_limit import rate_limited_user
from kaabhub.api.serializers import question_dict
from kaabhub.database.models import User, VoteDirection
from kaabhub.services import question_service, vote_service

router = APIRouter(prefix="/questions", tags=["questions"])


class QuestionCreate(BaseModel):
    title: str
    content: str
    category: str
    tags: list[str] = Field(default_factory=list)
    course: str | None = None


class QuestionUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    content: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    course: str | None = None


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
@router.get("")
def list_questions(
    category: str | None = None,
    course: str | None = None,
    tag: str | None = None,
    search: str | None = None,
    sort: str = Query("createdAt"),
    viewer: User | None = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    questions = question_service.list_questions(
        session, category=category, course=course, tag=tag, search=search, sort=sort,
    )
    viewer_id = viewer.id if viewer else None
    return [question_dict(q, viewer_id) for q in questions]


@router.get("/tags")
def list_tags(session: Session = Depends(get_session)):
    return {"tags": question_service.tag_counts(session)}


@router.get("/{question_id}")
def get_question(
    question_id: int,
    viewer: User | None = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    """Question detail.  Every call counts as one view."""
    question = question_service.view_question(session, question_id)
    return question_dict(question, viewer.id if viewer else None)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
@router.post("", status_code=201)
def create_question(
    body: QuestionCreate,
    user: User = Depends(rate_limited_user),
    session: Session = Depends(get_session),
):
    question = question_service.create_question(
        session,
        user,
        title=body.title,
        content=body.content,
        category=body.category,
        tags=body.tags,
        course=body.course,
    )
    return question_dict(question, user.id)


@router.patch("/{question_id}")
def update_question(
    question_id: int,
    body: QuestionUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Author-only partial edit.  Only the fields sent are changed."""
    updates = body.model_dump(exclude_unset=True)
    question = question_service.update_question(session, question_id, user, updates)
    return question_dict(question, user.id)


@router.delete("/{question_id}")
def delete_question(
    question_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    question_service.delete_question(session, question_id, user)
    return {"message": "Question deleted successfully"}


# ---------------------------------------------------------------------------
# Votes
# ---------------------------------------------------------------------------
@router.post("/{question_id}/upvote")
def upvote_question(
    question_id: int,
    user: User = Depends(rate_limited_user),
    session: Session = Depends(get_session),
):
    question = vote_service.cast_vote(session, "question", question_id, user.id, VoteDirection.UP)
    return question_dict(question, user.id)


@router.post("/{question_id}/downvote")
def downvote_question(
    question_id: int,
    user: User = Depends(rate_limited_user),
    session: Session = Depends(get_session),
):
    question = vote_service.cast_vote(session, "question", question_id, user.id, VoteDirection.DOWN)
    return question_dict(question, user.id)
