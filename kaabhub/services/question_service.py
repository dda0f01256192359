"""
kaabhub.services.question_service — Question CRUD, Views & Tags
================================================================

Every mutation commits before returning.  Ownership checks happen here, so
routes stay thin.  The view counter is a single SQL increment, so concurrent
readers never lose each other's views.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from typing import Any

from sqlalchemy import Engine, func, or_, select, update
from sqlalchemy.orm import Session, selectinload

from kaabhub.constants import (
    MAX_TAG_LENGTH,
    MAX_TITLE_LENGTH,
    QUESTION_SORT_KEYS,
    QUESTION_UPDATE_FIELDS,
)
from kaabhub.database.models import (
    Answer,
    Question,
    QuestionVote,
    User,
    VoteDirection,
)
from kaabhub.errors import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _with_relations(stmt):
    return stmt.options(
        selectinload(Question.author),
        selectinload(Question.votes),
        selectinload(Question.answers).selectinload(Answer.author),
        selectinload(Question.answers).selectinload(Answer.votes),
    )


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------
def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Trim, drop blanks and de-duplicate, keeping first-seen order."""
    result: list[str] = []
    for raw in tags or ():
        tag = raw.strip()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValidationError(f"Tags must be at most {MAX_TAG_LENGTH} characters")
        if tag not in result:
            result.append(tag)
    return result


def _required_text(value: str | None, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required")
    return text


def _escape_like(text: str) -> str:
    """Make ``%`` and ``_`` match literally in a LIKE pattern."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _clean_title(value: str | None) -> str:
    title = _required_text(value, "Title")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
    return title


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def list_questions(
    session: Session,
    *,
    category: str | None = None,
    course: str | None = None,
    tag: str | None = None,
    search: str | None = None,
    sort: str = "createdAt",
) -> list[Question]:
    """Filtered question listing.

    ``search`` is a case-insensitive substring match on title and content.
    ``sort`` is one of ``createdAt`` (newest first), ``views`` or
    ``upvotes`` (most first); unknown keys fall back to ``createdAt``.
    """
    stmt = _with_relations(select(Question))

    if category:
        stmt = stmt.where(Question.category == category)
    if course:
        stmt = stmt.where(Question.course == course)
    if search:
        pattern = f"%{_escape_like(search.strip())}%"
        stmt = stmt.where(or_(
            Question.title.ilike(pattern, escape="\\"),
            Question.content.ilike(pattern, escape="\\"),
        ))

    if sort not in QUESTION_SORT_KEYS:
        sort = "createdAt"

    if sort == "views":
        stmt = stmt.order_by(Question.views.desc(), Question.id.desc())
    elif sort == "upvotes":
        upvote_counts = (
            select(QuestionVote.question_id, func.count().label("ups"))
            .where(QuestionVote.direction == VoteDirection.UP.value)
            .group_by(QuestionVote.question_id)
            .subquery()
        )
        stmt = stmt.outerjoin(
            upvote_counts, upvote_counts.c.question_id == Question.id
        ).order_by(func.coalesce(upvote_counts.c.ups, 0).desc(), Question.id.desc())
    else:
        stmt = stmt.order_by(Question.created_at.desc(), Question.id.desc())

    questions = list(session.scalars(stmt).unique().all())

    # Tags live in a JSON column; membership is checked here so the same
    # query works on PostgreSQL and SQLite.
    if tag:
        wanted = tag.strip()
        questions = [q for q in questions if wanted in (q.tags or [])]
    return questions


def get_question(session: Session, question_id: int) -> Question:
    question = session.scalar(
        _with_relations(select(Question)).where(Question.id == question_id)
    )
    if question is None:
        raise NotFoundError("Question not found")
    return question


def view_question(session: Session, question_id: int) -> Question:
    """Count one view and return the question (every read counts)."""
    result = session.execute(
        update(Question)
        .where(Question.id == question_id)
        .values(views=Question.views + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        session.rollback()
        raise NotFoundError("Question not found")
    session.commit()
    return get_question(session, question_id)


def question_exists(engine: Engine, question_id: int) -> bool:
    with Session(engine) as session:
        return session.scalar(
            select(Question.id).where(Question.id == question_id)
        ) is not None


def tag_counts(session: Session) -> list[dict[str, Any]]:
    """Usage count per tag, most used first (ties alphabetical)."""
    counter: Counter[str] = Counter()
    for tags in session.scalars(select(Question.tags)).all():
        counter.update(tags or [])
    return [
        {"tag": tag, "count": count}
        for tag, count in sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))
    ]


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def create_question(
    session: Session,
    author: User,
    *,
    title: str,
    content: str,
    category: str,
    tags: Iterable[str] | None = None,
    course: str | None = None,
) -> Question:
    question = Question(
        title=_clean_title(title),
        content=_required_text(content, "Content"),
        category=_required_text(category, "Category"),
        tags=normalize_tags(tags),
        course=course.strip() if course else None,
        author_id=author.id,
    )
    session.add(question)
    session.commit()
    logger.info("User %d asked question %d", author.id, question.id)
    return get_question(session, question.id)


def update_question(
    session: Session, question_id: int, actor: User, updates: dict[str, Any]
) -> Question:
    """Author-only partial edit.  Keys outside the allow-list → 400."""
    question = get_question(session, question_id)
    if question.author_id != actor.id:
        raise AuthorizationError("Not authorized to edit this question")

    unknown = set(updates) - QUESTION_UPDATE_FIELDS
    if unknown:
        raise ValidationError(f"Invalid updates: {', '.join(sorted(unknown))}")

    if "title" in updates:
        question.title = _clean_title(updates["title"])
    if "content" in updates:
        question.content = _required_text(updates["content"], "Content")
    if "category" in updates:
        question.category = _required_text(updates["category"], "Category")
    if "tags" in updates:
        question.tags = normalize_tags(updates["tags"])
    if "course" in updates:
        course = updates["course"]
        question.course = course.strip() if course else None

    session.commit()
    return get_question(session, question_id)


def delete_question(session: Session, question_id: int, actor: User) -> None:
    """Delete a question with its answers, comments and votes.

    Allowed for the author and for admins.
    """
    question = get_question(session, question_id)
    if question.author_id != actor.id and not actor.is_admin:
        raise AuthorizationError("Not authorized to delete this question")

    session.delete(question)
    session.commit()
    logger.info("Question %d deleted by user %d", question_id, actor.id)
