"""
kaabhub.services.vote_service — Persisted Vote Toggles
=======================================================

Applies :func:`kaabhub.engine.votes.resolve_vote` to the stored vote row of
one (entity, user) pair.  Each user's vote is its own row, so concurrent
votes by different users never overwrite each other.  A same-user double
submit can collide on the primary key; that SAVEPOINT is rolled back and the
toggle is re-resolved once against the row that won.

Voting never changes reputation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Literal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kaabhub.database.models import (
    Answer,
    AnswerVote,
    Question,
    QuestionVote,
    VoteDirection,
)
from kaabhub.engine.votes import VoteAction, VoteSets, resolve_vote
from kaabhub.errors import NotFoundError

logger = logging.getLogger(__name__)

EntityKind = Literal["question", "answer"]

_ENTITIES: dict[str, tuple[type, type, str]] = {
    "question": (Question, QuestionVote, "question_id"),
    "answer": (Answer, AnswerVote, "answer_id"),
}


def tally(votes: Iterable[QuestionVote | AnswerVote]) -> VoteSets:
    """Build the upvote/downvote sets from stored vote rows."""
    sets = VoteSets()
    for vote in votes:
        if vote.direction == VoteDirection.UP.value:
            sets.upvotes.add(vote.user_id)
        else:
            sets.downvotes.add(vote.user_id)
    return sets


def _apply(
    session: Session,
    vote_model: type,
    fk_name: str,
    entity_id: int,
    user_id: int,
    direction: VoteDirection,
) -> VoteAction:
    row = session.get(vote_model, (entity_id, user_id), populate_existing=True)
    current = VoteDirection(row.direction) if row is not None else None
    new_direction, action = resolve_vote(current, direction)

    if action == VoteAction.CAST:
        session.add(vote_model(
            **{fk_name: entity_id},
            user_id=user_id,
            direction=new_direction.value,
        ))
    elif action == VoteAction.FLIP:
        row.direction = new_direction.value
    else:
        session.delete(row)
    session.flush()
    return action


def cast_vote(
    session: Session,
    kind: EntityKind,
    entity_id: int,
    user_id: int,
    direction: VoteDirection,
) -> Question | Answer:
    """Toggle *user_id*'s *direction* vote on a question or answer.

    Returns the entity with its vote rows reloaded.

    Raises
    ------
    NotFoundError
        If the entity does not exist.
    """
    entity_model, vote_model, fk_name = _ENTITIES[kind]
    entity = session.get(entity_model, entity_id)
    if entity is None:
        raise NotFoundError(f"{kind.capitalize()} not found")

    try:
        with session.begin_nested():  # SAVEPOINT
            action = _apply(session, vote_model, fk_name, entity_id, user_id, direction)
    except IntegrityError:
        # A concurrent request by the same user inserted first.
        with session.begin_nested():
            action = _apply(session, vote_model, fk_name, entity_id, user_id, direction)

    session.commit()
    logger.debug(
        "Vote %s: user %d %s on %s %d", action.value, user_id, direction.value, kind, entity_id
    )
    session.refresh(entity)
    return entity
