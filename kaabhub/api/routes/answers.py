"""
kaabhub.api.routes.answers — Answer, comment & acceptance endpoints
=====================================================================

Posting and accepting an answer push an event to the question's room after
the response is sent (see :mod:`kaabhub.services.room_hub`).
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kaabhub.api.deps import (
    get_config,
    get_current_user,
    get_hub,
    get_optional_user,
    get_session,
)
from kaabhub.api.rate_limit import rate_limited_user
from kaabhub.api.serializers import answer_dict, question_dict
from kaabhub.config import KaabConfig
from kaabhub.database.models import User, VoteDirection
from kaabhub.services import answer_service, vote_service

router = APIRouter(prefix="/answers", tags=["answers"])


class ContentBody(BaseModel):
    content: str


# ---------------------------------------------------------------------------
# Per-question
# ---------------------------------------------------------------------------
@router.get("/question/{question_id}")
def list_answers(
    question_id: int,
    viewer: User | None = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    answers = answer_service.list_answers(session, question_id)
    viewer_id = viewer.id if viewer else None
    return [answer_dict(a, viewer_id) for a in answers]


@router.post("/question/{question_id}", status_code=201)
def create_answer(
    question_id: int,
    body: ContentBody,
    background: BackgroundTasks,
    user: User = Depends(rate_limited_user),
    session: Session = Depends(get_session),
    hub=Depends(get_hub),
):
    answer = answer_service.create_answer(session, question_id, user, body.content)
    payload = answer_dict(answer, user.id)
    background.add_task(hub.broadcast, question_id, "new-answer", payload)
    return payload


# ---------------------------------------------------------------------------
# Single answer
# ---------------------------------------------------------------------------
@router.patch("/{answer_id}")
def update_answer(
    answer_id: int,
    body: ContentBody,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    answer = answer_service.update_answer(session, answer_id, user, body.content)
    return answer_dict(answer, user.id)


@router.delete("/{answer_id}")
def delete_answer(
    answer_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    answer_service.delete_answer(session, answer_id, user)
    return {"message": "Answer deleted successfully"}


@router.post("/{answer_id}/comments", status_code=201)
def add_comment(
    answer_id: int,
    body: ContentBody,
    user: User = Depends(rate_limited_user),
    session: Session = Depends(get_session),
):
    answer = answer_service.add_comment(session, answer_id, user, body.content)
    return answer_dict(answer, user.id)


@router.post("/{answer_id}/accept")
def accept_answer(
    answer_id: int,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    cfg: KaabConfig = Depends(get_config),
    hub=Depends(get_hub),
):
    """Question author marks this answer as the solution."""
    answer, question = answer_service.accept_answer(
        session, answer_id, user, grant=cfg.accept_reputation
    )
    result = {
        "answer": answer_dict(answer, user.id),
        "question": question_dict(question, user.id, include_answers=False),
    }
    background.add_task(hub.broadcast, question.id, "answer-accepted", result)
    return result


# ---------------------------------------------------------------------------
# Votes
# ---------------------------------------------------------------------------
@router.post("/{answer_id}/upvote")
def upvote_answer(
    answer_id: int,
    user: User = Depends(rate_limited_user),
    session: Session = Depends(get_session),
):
    answer = vote_service.cast_vote(session, "answer", answer_id, user.id, VoteDirection.UP)
    return answer_dict(answer, user.id)


@router.post("/{answer_id}/downvote")
def downvote_answer(
    answer_id: int,
    user: User = Depends(rate_limited_user),
    session: Session = Depends(get_session),
):
    answer = vote_service.cast_vote(session, "answer", answer_id, user.id, VoteDirection.DOWN)
    return answer_dict(answer, user.id)
