"""
kaabhub.services.answer_service — Answers, Comments & Acceptance
=================================================================

Acceptance touches three rows (answer, question, answer author) and runs in
one transaction: the plan from :mod:`kaabhub.engine.acceptance` is applied,
the reputation grant is a SQL-side ``reputation + n``, and a single commit
publishes it all.  Any failure rolls the whole thing back.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from kaabhub.constants import ACCEPTED_ANSWER_REPUTATION
from kaabhub.database.models import Answer, AnswerComment, Question, User
from kaabhub.engine.acceptance import plan_acceptance
from kaabhub.errors import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _with_relations(stmt):
    return stmt.options(
        selectinload(Answer.author),
        selectinload(Answer.votes),
        selectinload(Answer.comments).selectinload(AnswerComment.author),
    )


def _required_content(content: str | None) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Content is required")
    return text


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_answer(session: Session, answer_id: int) -> Answer:
    answer = session.scalar(_with_relations(select(Answer)).where(Answer.id == answer_id))
    if answer is None:
        raise NotFoundError("Answer not found")
    return answer


def list_answers(session: Session, question_id: int) -> list[Answer]:
    """Answers to a question, newest first."""
    if session.get(Question, question_id) is None:
        raise NotFoundError("Question not found")
    return list(session.scalars(
        _with_relations(select(Answer))
        .where(Answer.question_id == question_id)
        .order_by(Answer.created_at.desc(), Answer.id.desc())
    ).all())


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def create_answer(
    session: Session, question_id: int, author: User, content: str
) -> Answer:
    text = _required_content(content)
    if session.get(Question, question_id) is None:
        raise NotFoundError("Question not found")

    answer = Answer(content=text, author_id=author.id, question_id=question_id)
    session.add(answer)
    session.commit()
    logger.info("User %d answered question %d (answer %d)", author.id, question_id, answer.id)
    return get_answer(session, answer.id)


def update_answer(session: Session, answer_id: int, actor: User, content: str) -> Answer:
    answer = get_answer(session, answer_id)
    if answer.author_id != actor.id:
        raise AuthorizationError("Not authorized to edit this answer")
    answer.content = _required_content(content)
    session.commit()
    return get_answer(session, answer_id)


def delete_answer(session: Session, answer_id: int, actor: User) -> None:
    """Delete an answer (author or admin).

    If it was the accepted answer, its question goes back to unsolved.
    Reputation already granted stays.
    """
    answer = get_answer(session, answer_id)
    if answer.author_id != actor.id and not actor.is_admin:
        raise AuthorizationError("Not authorized to delete this answer")

    question = answer.question
    if question is not None and question.solved_by_id == answer.id:
        question.solved_by_id = None
        question.is_solved = False

    session.delete(answer)
    session.commit()
    logger.info("Answer %d deleted by user %d", answer_id, actor.id)


def add_comment(session: Session, answer_id: int, author: User, content: str) -> Answer:
    answer = get_answer(session, answer_id)
    answer.comments.append(
        AnswerComment(content=_required_content(content), author_id=author.id)
    )
    session.commit()
    return get_answer(session, answer_id)


def accept_answer(
    session: Session,
    answer_id: int,
    actor: User,
    grant: int = ACCEPTED_ANSWER_REPUTATION,
) -> tuple[Answer, Question]:
    """Mark *answer_id* as the accepted solution of its question.

    Only the question author may accept.  Returns ``(answer, question)``.

    Raises
    ------
    NotFoundError
        If the answer (or its question) does not exist.
    AuthorizationError
        If *actor* did not ask the question.
    """
    answer = session.get(Answer, answer_id)
    question = session.get(Question, answer.question_id) if answer is not None else None
    if answer is None or question is None:
        raise NotFoundError("Answer or question not found")

    plan = plan_acceptance(
        actor_id=actor.id,
        question_author_id=question.author_id,
        answer_id=answer.id,
        answer_question_id=answer.question_id,
        answer_author_id=answer.author_id,
        question_id=question.id,
        solved_by_id=question.solved_by_id,
        grant=grant,
    )

    if plan.already_accepted:
        return get_answer(session, answer.id), question

    if plan.previous_answer_id is not None:
        previous = session.get(Answer, plan.previous_answer_id)
        if previous is not None:
            previous.is_accepted = False

    answer.is_accepted = True
    question.is_solved = True
    question.solved_by_id = answer.id

    if plan.reputation_grant:
        session.execute(
            update(User)
            .where(User.id == plan.reputation_user_id)
            .values(reputation=User.reputation + plan.reputation_grant)
        )

    session.commit()
    logger.info(
        "Answer %d accepted on question %d (+%d reputation to user %d)",
        answer.id, question.id, plan.reputation_grant, answer.author_id,
    )
    return get_answer(session, answer.id), question
