"""
tests/test_vote_engine.py — Vote Toggle Rules
==============================================
Pure tests for :mod:`kaabhub.engine.votes`; no database.
"""

from __future__ import annotations

import pytest

from kaabhub.engine.votes import (
    VoteAction,
    VoteDirection,
    VoteSets,
    apply_vote,
    resolve_vote,
)

UP, DOWN = VoteDirection.UP, VoteDirection.DOWN


class TestResolveVote:
    def test_first_vote_is_cast(self):
        assert resolve_vote(None, UP) == (UP, VoteAction.CAST)
        assert resolve_vote(None, DOWN) == (DOWN, VoteAction.CAST)

    def test_same_direction_withdraws(self):
        assert resolve_vote(UP, UP) == (None, VoteAction.WITHDRAW)
        assert resolve_vote(DOWN, DOWN) == (None, VoteAction.WITHDRAW)

    def test_opposite_direction_flips(self):
        assert resolve_vote(DOWN, UP) == (UP, VoteAction.FLIP)
        assert resolve_vote(UP, DOWN) == (DOWN, VoteAction.FLIP)


class TestApplyVote:
    def test_upvote_adds_user(self):
        sets = apply_vote(VoteSets(), 1, UP)
        assert sets.upvotes == {1}
        assert sets.downvotes == set()
        assert sets.score == 1

    def test_upvote_twice_is_toggle_off(self):
        sets = VoteSets()
        apply_vote(sets, 1, UP)
        apply_vote(sets, 1, UP)
        assert sets.upvotes == set()
        assert sets.downvotes == set()

    def test_downvote_after_upvote_moves_user(self):
        sets = VoteSets()
        apply_vote(sets, 1, UP)
        apply_vote(sets, 1, DOWN)
        assert sets.upvotes == set()
        assert sets.downvotes == {1}
        assert sets.direction_of(1) is DOWN

    def test_other_users_untouched(self):
        sets = VoteSets(upvotes={2, 3}, downvotes={4})
        apply_vote(sets, 4, UP)
        assert sets.upvotes == {2, 3, 4}
        assert sets.downvotes == set()
        assert sets.score == 3

    @pytest.mark.parametrize(
        "sequence",
        [
            [UP, DOWN, UP, UP, DOWN],
            [DOWN, DOWN, DOWN],
            [UP, UP, DOWN, UP, DOWN, DOWN],
        ],
    )
    def test_never_in_both_sets(self, sequence):
        sets = VoteSets()
        for direction in sequence:
            apply_vote(sets, 7, direction)
            assert not (sets.upvotes & sets.downvotes)

    @pytest.mark.parametrize("start_up", [set(), {7}])
    def test_same_vote_twice_restores_membership(self, start_up):
        sets = VoteSets(upvotes=set(start_up))
        apply_vote(sets, 7, UP)
        apply_vote(sets, 7, UP)
        assert sets.upvotes == start_up
        assert sets.downvotes == set()

    def test_upvote_twice_from_downvote_ends_with_no_vote(self):
        sets = VoteSets(downvotes={7})
        apply_vote(sets, 7, UP)
        apply_vote(sets, 7, UP)
        assert sets.direction_of(7) is None

    def test_direction_of_non_voter(self):
        assert VoteSets(upvotes={1}).direction_of(2) is None
