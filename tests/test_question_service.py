"""
tests/test_question_service.py — Question CRUD, Views & Tags
=============================================================
"""

from __future__ import annotations

import pytest
from conftest import make_question, make_user
from sqlalchemy import func, select

from kaabhub.database.models import (
    Answer,
    AnswerComment,
    AnswerVote,
    Question,
    QuestionVote,
    VoteDirection,
)
from kaabhub.errors import AuthorizationError, NotFoundError, ValidationError
from kaabhub.services import answer_service, question_service, vote_service


def _count(session, model) -> int:
    return session.scalar(select(func.count()).select_from(model))


class TestCreateQuestion:
    def test_creates_with_defaults(self, db_session):
        author = make_user(db_session, "Asha")
        q = make_question(db_session, author)
        assert q.id is not None
        assert q.author_id == author.id
        assert q.views == 0
        assert q.is_solved is False
        assert q.solved_by_id is None
        assert q.tags == ["python", "lists"]

    def test_tags_are_trimmed_and_deduplicated(self, db_session):
        author = make_user(db_session, "Asha")
        q = make_question(db_session, author, tags=[" python ", "python", "", "web"])
        assert q.tags == ["python", "web"]

    def test_blank_title_rejected(self, db_session):
        author = make_user(db_session, "Asha")
        with pytest.raises(ValidationError, match="Title is required"):
            make_question(db_session, author, title="   ")

    def test_missing_category_rejected(self, db_session):
        author = make_user(db_session, "Asha")
        with pytest.raises(ValidationError, match="Category is required"):
            make_question(db_session, author, category="")


class TestViews:
    def test_each_view_counts(self, db_session):
        author = make_user(db_session, "Asha")
        q = make_question(db_session, author)
        question_service.view_question(db_session, q.id)
        viewed = question_service.view_question(db_session, q.id)
        assert viewed.views == 2

    def test_plain_get_does_not_count(self, db_session):
        author = make_user(db_session, "Asha")
        q = make_question(db_session, author)
        assert question_service.get_question(db_session, q.id).views == 0

    def test_missing_question(self, db_session):
        with pytest.raises(NotFoundError, match="Question not found"):
            question_service.view_question(db_session, 999)

    def test_question_exists(self, db_engine, db_session):
        author = make_user(db_session, "Asha")
        q = make_question(db_session, author)
        assert question_service.question_exists(db_engine, q.id)
        assert not question_service.question_exists(db_engine, q.id + 1)


class TestListQuestions:
    @pytest.fixture
    def seeded(self, db_session):
        author = make_user(db_session, "Asha")
        voter = make_user(db_session, "Bile")
        q1 = make_question(db_session, author, title="Recursion basics", category="Programming",
                           tags=["python"], course="CS101")
        q2 = make_question(db_session, author, title="Cell biology", category="Science",
                           tags=["biology"], content="What does the mitochondria do?")
        q3 = make_question(db_session, author, title="Sorting in Python", category="Programming",
                           tags=["python", "algorithms"])
        vote_service.cast_vote(db_session, "question", q3.id, voter.id, VoteDirection.UP)
        vote_service.cast_vote(db_session, "question", q3.id, author.id, VoteDirection.UP)
        vote_service.cast_vote(db_session, "question", q2.id, voter.id, VoteDirection.UP)
        question_service.view_question(db_session, q1.id)
        question_service.view_question(db_session, q1.id)
        question_service.view_question(db_session, q2.id)
        return q1.id, q2.id, q3.id

    def test_newest_first_by_default(self, db_session, seeded):
        q1, q2, q3 = seeded
        ids = [q.id for q in question_service.list_questions(db_session)]
        assert ids == [q3, q2, q1]

    def test_filter_by_category(self, db_session, seeded):
        q1, _, q3 = seeded
        ids = {q.id for q in question_service.list_questions(db_session, category="Programming")}
        assert ids == {q1, q3}

    def test_filter_by_course(self, db_session, seeded):
        q1, _, _ = seeded
        ids = [q.id for q in question_service.list_questions(db_session, course="CS101")]
        assert ids == [q1]

    def test_filter_by_tag(self, db_session, seeded):
        _, _, q3 = seeded
        ids = [q.id for q in question_service.list_questions(db_session, tag="algorithms")]
        assert ids == [q3]

    def test_search_matches_title_and_content(self, db_session, seeded):
        _, q2, q3 = seeded
        assert [q.id for q in question_service.list_questions(db_session, search="sorting")] == [q3]
        assert [q.id for q in question_service.list_questions(db_session, search="MITOCHONDRIA")] == [q2]

    def test_search_wildcards_match_literally(self, db_session, seeded):
        author = make_user(db_session, "Cawo")
        done = make_question(db_session, author, title="Is 100% coverage worth it?",
                             content="Asking about snake_case test names too.")

        def ids(term):
            return [q.id for q in question_service.list_questions(db_session, search=term)]

        assert ids("100%") == [done.id]
        assert ids("%") == [done.id]
        assert ids("_") == [done.id]
        assert ids("snake_case") == [done.id]
        assert ids("snakeXcase") == []

    def test_sort_by_views(self, db_session, seeded):
        q1, q2, q3 = seeded
        ids = [q.id for q in question_service.list_questions(db_session, sort="views")]
        assert ids == [q1, q2, q3]

    def test_sort_by_upvotes(self, db_session, seeded):
        q1, q2, q3 = seeded
        ids = [q.id for q in question_service.list_questions(db_session, sort="upvotes")]
        assert ids == [q3, q2, q1]

    def test_unknown_sort_falls_back(self, db_session, seeded):
        q1, q2, q3 = seeded
        ids = [q.id for q in question_service.list_questions(db_session, sort="bogus")]
        assert ids == [q3, q2, q1]

    def test_tag_counts(self, db_session, seeded):
        assert question_service.tag_counts(db_session) == [
            {"tag": "python", "count": 2},
            {"tag": "algorithms", "count": 1},
            {"tag": "biology", "count": 1},
        ]


class TestUpdateQuestion:
    def test_author_can_edit(self, db_session):
        author = make_user(db_session, "Asha")
        q = make_question(db_session, author)
        updated = question_service.update_question(
            db_session, q.id, author, {"title": "New title", "tags": ["a", "b"]}
        )
        assert updated.title == "New title"
        assert updated.tags == ["a", "b"]

    def test_other_user_forbidden(self, db_session):
        author = make_user(db_session, "Asha")
        other = make_user(db_session, "Bile")
        q = make_question(db_session, author)
        with pytest.raises(AuthorizationError, match="Not authorized"):
            question_service.update_question(db_session, q.id, other, {"title": "Hijack"})

    def test_unknown_field_rejected(self, db_session):
        author = make_user(db_session, "Asha")
        q = make_question(db_session, author)
        with pytest.raises(ValidationError, match="Invalid updates: views"):
            question_service.update_question(db_session, q.id, author, {"views": 1000})


class TestDeleteQuestion:
    def test_delete_cascades_to_answers_comments_and_votes(self, db_session):
        author = make_user(db_session, "Asha")
        helper = make_user(db_session, "Bile")
        q = make_question(db_session, author)
        answer = answer_service.create_answer(db_session, q.id, helper, "Use reversed().")
        answer_service.add_comment(db_session, answer.id, author, "Thanks!")
        vote_service.cast_vote(db_session, "question", q.id, helper.id, VoteDirection.UP)
        vote_service.cast_vote(db_session, "answer", answer.id, author.id, VoteDirection.UP)

        question_service.delete_question(db_session, q.id, author)

        assert _count(db_session, Question) == 0
        assert _count(db_session, Answer) == 0
        assert _count(db_session, AnswerComment) == 0
        assert _count(db_session, QuestionVote) == 0
        assert _count(db_session, AnswerVote) == 0

    def test_admin_may_delete(self, db_session):
        author = make_user(db_session, "Asha")
        admin = make_user(db_session, "Moderator", is_admin=True)
        q = make_question(db_session, author)
        question_service.delete_question(db_session, q.id, admin)
        assert _count(db_session, Question) == 0

    def test_stranger_may_not_delete(self, db_session):
        author = make_user(db_session, "Asha")
        other = make_user(db_session, "Bile")
        q = make_question(db_session, author)
        with pytest.raises(AuthorizationError):
            question_service.delete_question(db_session, q.id, other)
        assert _count(db_session, Question) == 1
