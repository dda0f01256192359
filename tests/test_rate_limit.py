"""
tests/test_rate_limit.py — Mutation Rate Limiting Tests
========================================================
Content creation and vote casting are throttled per user, returning 429
with a Retry-After header and the usual {"message": ...} payload.
"""

from __future__ import annotations

import dataclasses

import pytest
from conftest import auth, make_question, make_user
from sqlalchemy.orm import Session

from kaabhub.api.rate_limit import MutationRateLimiter
from kaabhub.database.models import RateLimitEvent


# ---------------------------------------------------------------------------
# Unit tests for the MutationRateLimiter core (DB-backed)
# ---------------------------------------------------------------------------
class TestMutationRateLimiter:
    """Test the sliding-window rate limiter in isolation (DB-backed)."""

    @pytest.fixture(autouse=True)
    def _limiter(self, db_engine):
        """Create a fresh DB-backed limiter for each test."""
        self.limiter = MutationRateLimiter(max_requests=5, window_seconds=60, engine=db_engine)
        self.engine = db_engine

    def test_allows_requests_within_limit(self):
        for _ in range(5):
            allowed, _ = self.limiter.check("1")
            assert allowed
            self.limiter.record("1")

    def test_blocks_after_limit_exceeded(self):
        limiter = MutationRateLimiter(max_requests=3, window_seconds=60, engine=self.engine)
        for _ in range(3):
            limiter.record("1")

        allowed, info = limiter.check("1")
        assert not allowed
        assert info["remaining"] == 0
        assert info["reset"] > 0

    def test_separate_users_have_separate_limits(self):
        limiter = MutationRateLimiter(max_requests=2, window_seconds=60, engine=self.engine)
        limiter.record("1")
        limiter.record("1")

        assert not limiter.check("1")[0]
        assert limiter.check("2")[0]

    def test_remaining_count_decreases(self):
        _, info = self.limiter.check("1")
        assert info["remaining"] == 5

        self.limiter.record("1")
        _, info = self.limiter.check("1")
        assert info["remaining"] == 4

    def test_reset_clears_specific_user(self):
        limiter = MutationRateLimiter(max_requests=2, window_seconds=60, engine=self.engine)
        limiter.record("1")
        limiter.record("1")
        limiter.record("2")

        limiter.reset("1")

        assert limiter.check("1")[0]
        _, info2 = limiter.check("2")
        assert info2["remaining"] == 1

    def test_reset_all(self):
        self.limiter.record("1")
        self.limiter.record("2")
        self.limiter.reset()
        with Session(self.engine) as s:
            assert s.query(RateLimitEvent).count() == 0


# ---------------------------------------------------------------------------
# Integration tests with FastAPI TestClient
# ---------------------------------------------------------------------------
class TestRateLimitDependency:
    """Test the rate limiter dependency end-to-end via TestClient."""

    @pytest.fixture
    def limited(self, db_engine, test_config):
        from fastapi.testclient import TestClient

        from kaabhub.api.context import AppContext
        from kaabhub.api.main import create_app

        config = dataclasses.replace(test_config, mutation_rate_limit=3, seed_mentors=False)
        context = AppContext.create(config, engine=db_engine)
        with Session(db_engine) as s:
            first = make_user(s, "Asha")
            second = make_user(s, "Bile")
            qid = make_question(s, first).id
            ids = (first.id, second.id)
        client = TestClient(create_app(context), raise_server_exceptions=False)
        return client, context.limiter, ids, qid

    def test_reads_not_rate_limited(self, limited):
        client, limiter, (user_id, _), qid = limited
        for _ in range(3):
            limiter.record(str(user_id))
        for _ in range(5):
            resp = client.get(f"/api/questions/{qid}", headers=auth(user_id))
            assert resp.status_code == 200

    def test_returns_429_after_limit(self, limited):
        client, limiter, (user_id, _), qid = limited
        for _ in range(3):
            resp = client.post(f"/api/questions/{qid}/upvote", headers=auth(user_id))
            assert resp.status_code == 200

        resp = client.post(f"/api/questions/{qid}/upvote", headers=auth(user_id))
        assert resp.status_code == 429
        assert "Retry-After" in resp.headers
        assert resp.json()["message"].startswith("Rate limit exceeded")

    def test_different_users_have_separate_limits(self, limited):
        client, limiter, (first_id, second_id), qid = limited
        for _ in range(3):
            limiter.record(str(first_id))

        blocked = client.post(f"/api/questions/{qid}/upvote", headers=auth(first_id))
        assert blocked.status_code == 429

        allowed = client.post(f"/api/questions/{qid}/upvote", headers=auth(second_id))
        assert allowed.status_code == 200

    def test_unauthenticated_mutation_is_401_not_429(self, limited):
        client, _, _, qid = limited
        resp = client.post(f"/api/questions/{qid}/upvote")
        assert resp.status_code == 401

    def test_zero_limit_disables_limiter(self, db_engine, test_config):
        from kaabhub.api.context import AppContext

        context = AppContext.create(test_config, engine=db_engine)
        assert context.limiter is None
