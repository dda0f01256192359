"""
kaabhub.api.context — Application Context
==========================================

One object owns the process-wide resources: the database engine, the loaded
config, the question-room hub and the mutation rate limiter.  It is built
once at startup (:meth:`AppContext.create`) and torn down at shutdown
(:meth:`AppContext.close`).  Tests build their own and hand it to
:func:`kaabhub.api.main.create_app`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from sqlalchemy import Engine

from kaabhub.api.rate_limit import MutationRateLimiter
from kaabhub.config import KaabConfig, load_config
from kaabhub.database.engine import create_db_engine, init_db
from kaabhub.database.seed import seed_mentors
from kaabhub.services.room_hub import QuestionRoomHub

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    engine: Engine
    config: KaabConfig
    hub: QuestionRoomHub = field(default_factory=QuestionRoomHub)
    limiter: MutationRateLimiter | None = None

    @classmethod
    def create(
        cls,
        config: KaabConfig | None = None,
        *,
        engine: Engine | None = None,
    ) -> AppContext:
        """Load config, connect, ensure the schema and seed mentors.

        *config* defaults to the file named by ``KAAB_CONFIG``
        (``config.yaml``); *engine* defaults to ``DATABASE_URL``.
        """
        if config is None:
            config = load_config(os.getenv("KAAB_CONFIG", "config.yaml"))
        if engine is None:
            engine = create_db_engine()

        init_db(engine)
        if config.seed_mentors:
            seed_mentors(engine, config.mentors_file)

        limiter = None
        if config.mutation_rate_limit > 0:
            limiter = MutationRateLimiter(
                config.mutation_rate_limit,
                config.rate_window_seconds,
                engine=engine,
            )

        return cls(engine=engine, config=config, limiter=limiter)

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")
