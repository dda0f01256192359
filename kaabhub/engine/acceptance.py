"""
kaabhub.engine.acceptance — Answer Acceptance Planning
=======================================================

Pure decision step for "question author accepts an answer".  The answer
service loads the rows, asks :func:`plan_acceptance` what to change, and
applies the plan inside one transaction.

Decisions on the paths the forum never guarded:

* Accepting the answer that is already accepted changes nothing and grants
  no second reputation award.
* Accepting a different answer on a solved question moves the acceptance:
  the previous answer loses its flag and the new author is rewarded.  The
  previous author keeps the reputation already granted (reputation only
  ever grows).
"""

from __future__ import annotations

from dataclasses import dataclass

from kaabhub.errors import AuthorizationError, ValidationError


@dataclass(frozen=True, slots=True)
class AcceptancePlan:
    """What :func:`plan_acceptance` decided."""

    answer_id: int
    already_accepted: bool = False
    previous_answer_id: int | None = None
    reputation_grant: int = 0
    reputation_user_id: int | None = None


def plan_acceptance(
    *,
    actor_id: int,
    question_author_id: int,
    answer_id: int,
    answer_question_id: int,
    answer_author_id: int,
    question_id: int,
    solved_by_id: int | None,
    grant: int,
) -> AcceptancePlan:
    """Decide how an acceptance request changes state.

    Raises
    ------
    AuthorizationError
        If *actor_id* is not the question's author.
    ValidationError
        If the answer does not belong to the question.
    """
    if actor_id != question_author_id:
        raise AuthorizationError("Only the question author can accept an answer")
    if answer_question_id != question_id:
        raise ValidationError("Answer does not belong to this question")

    if solved_by_id == answer_id:
        return AcceptancePlan(answer_id=answer_id, already_accepted=True)

    return AcceptancePlan(
        answer_id=answer_id,
        previous_answer_id=solved_by_id,
        reputation_grant=grant,
        reputation_user_id=answer_author_id,
    )
