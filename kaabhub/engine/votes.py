"""
kaabhub.engine.votes — Up/Down Vote Toggle Rules
=================================================

Pure decision logic shared by questions and answers.  No DB I/O.

Rules for a user voting in *direction*:

* already voted the same way   → the vote is withdrawn (toggle-off)
* voted the opposite way       → the vote flips
* no vote yet                  → the vote is cast

Two views of the same rule are exposed:

* :func:`resolve_vote` maps a stored per-user vote to the new one; the
  vote service persists its result as insert / update / delete.
* :func:`apply_vote` applies the rule to explicit upvote/downvote sets,
  which is how the invariant ``upvotes ∩ downvotes = ∅`` is stated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from kaabhub.database.models import VoteDirection

__all__ = [
    "VoteAction",
    "VoteSets",
    "VoteDirection",
    "apply_vote",
    "resolve_vote",
]


class VoteAction(StrEnum):
    """What the storage layer must do with the user's vote row."""
    CAST = "cast"
    FLIP = "flip"
    WITHDRAW = "withdraw"


def resolve_vote(
    current: VoteDirection | None, requested: VoteDirection
) -> tuple[VoteDirection | None, VoteAction]:
    """Return ``(new_direction, action)`` for a user's vote.

    *new_direction* is ``None`` when the user ends up with no vote.
    """
    if current is None:
        return requested, VoteAction.CAST
    if current == requested:
        return None, VoteAction.WITHDRAW
    return requested, VoteAction.FLIP


@dataclass
class VoteSets:
    """Upvote / downvote membership of one entity."""

    upvotes: set[int] = field(default_factory=set)
    downvotes: set[int] = field(default_factory=set)

    def direction_of(self, user_id: int) -> VoteDirection | None:
        if user_id in self.upvotes:
            return VoteDirection.UP
        if user_id in self.downvotes:
            return VoteDirection.DOWN
        return None

    @property
    def score(self) -> int:
        return len(self.upvotes) - len(self.downvotes)


def apply_vote(sets: VoteSets, user_id: int, direction: VoteDirection) -> VoteSets:
    """Toggle *user_id*'s vote on *sets* in place and return it."""
    if direction == VoteDirection.UP:
        same, other = sets.upvotes, sets.downvotes
    else:
        same, other = sets.downvotes, sets.upvotes

    if user_id in same:
        same.discard(user_id)
    else:
        same.add(user_id)
        other.discard(user_id)
    return sets
