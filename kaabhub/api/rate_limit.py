"""
kaabhub.api.rate_limit — Per-User Mutation Rate Limiting
=========================================================

Throttles content creation and vote casting: by default 30 mutations per
60-second sliding window per user (``mutation_rate_limit`` /
``rate_window_seconds`` in config; a limit of 0 disables throttling).

The window is stored in the ``rate_limit_events`` table keyed by user id,
so it survives restarts.  Returns HTTP 429 with a ``Retry-After`` header
when the limit is exceeded.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import Engine, delete, func, select
from sqlalchemy.orm import Session

from kaabhub.api.deps import get_context, get_current_user
from kaabhub.database.models import RateLimitEvent, User

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 30
DEFAULT_WINDOW_SECONDS = 60

_MUTATION_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class MutationRateLimiter:
    """Sliding-window rate limiter keyed by user id."""

    def __init__(
        self,
        max_requests: int = DEFAULT_RATE_LIMIT,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        *,
        engine: Engine,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.engine = engine

    def _normalize_dt(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def _prune(self, session: Session, user_id: str, cutoff: datetime) -> None:
        session.execute(
            delete(RateLimitEvent).where(
                RateLimitEvent.user_id == user_id,
                RateLimitEvent.timestamp < cutoff,
            )
        )

    def check(self, user_id: str) -> tuple[bool, dict[str, Any]]:
        """Check whether *user_id* may perform another mutation.

        Returns (allowed, info) where info contains:
          - remaining: requests remaining in the window
          - reset: seconds until the oldest request expires
          - limit: the max requests per window
        """
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=self.window_seconds)

        with Session(self.engine) as session:
            self._prune(session, user_id, cutoff)
            timestamps = session.scalars(
                select(RateLimitEvent.timestamp)
                .where(RateLimitEvent.user_id == user_id)
                .order_by(RateLimitEvent.timestamp.asc())
            ).all()
            session.commit()

        count = len(timestamps)
        if count >= self.max_requests:
            oldest = self._normalize_dt(timestamps[0])
            reset = (oldest + timedelta(seconds=self.window_seconds) - now).total_seconds()
            return False, {
                "remaining": 0,
                "reset": max(1, int(reset) + 1),
                "limit": self.max_requests,
            }

        return True, {
            "remaining": self.max_requests - count,
            "reset": self.window_seconds,
            "limit": self.max_requests,
        }

    def record(self, user_id: str) -> dict[str, Any]:
        """Record a mutation and return the updated rate-limit info."""
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=self.window_seconds)

        with Session(self.engine) as session:
            self._prune(session, user_id, cutoff)
            session.add(RateLimitEvent(user_id=user_id, timestamp=now))
            session.flush()
            count = session.scalar(
                select(func.count())
                .select_from(RateLimitEvent)
                .where(RateLimitEvent.user_id == user_id)
            ) or 0
            session.commit()

        return {
            "remaining": max(0, self.max_requests - count),
            "reset": self.window_seconds,
            "limit": self.max_requests,
        }

    def reset(self, user_id: str | None = None) -> None:
        """Clear rate limit state. If user_id is None, clear all."""
        with Session(self.engine) as session:
            stmt = delete(RateLimitEvent)
            if user_id is not None:
                stmt = stmt.where(RateLimitEvent.user_id == user_id)
            session.execute(stmt)
            session.commit()


# ---------------------------------------------------------------------------
# FastAPI dependency, chained after get_current_user
# ---------------------------------------------------------------------------
async def rate_limited_user(
    request: Request,
    user: User = Depends(get_current_user),
    context=Depends(get_context),
) -> User:
    """Resolve the acting user *and* count the mutation against their window.

    Use ``Depends(rate_limited_user)`` in place of ``Depends(get_current_user)``
    on endpoints that create content or cast votes.
    """
    limiter: MutationRateLimiter | None = context.limiter
    if limiter is None or request.method not in _MUTATION_METHODS:
        return user

    user_id = str(user.id)
    allowed, info = await asyncio.to_thread(limiter.check, user_id)

    if not allowed:
        logger.warning(
            "Rate limit exceeded for user %s: %d requests per %ds",
            user_id, limiter.max_requests, limiter.window_seconds,
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=(
                f"Rate limit exceeded: {limiter.max_requests}"
                f" actions per {limiter.window_seconds} seconds."
            ),
            headers={"Retry-After": str(info["reset"])},
        )

    await asyncio.to_thread(limiter.record, user_id)
    return user
