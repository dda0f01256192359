"""
kaabhub.config — YAML Configuration Loader
===========================================

Reads ``config.yaml`` for application tuning (token lifetime, reputation
grant, rate limits, mentor seeding).  Secrets and connection strings stay in
the environment (``DATABASE_URL``, ``JWT_SECRET``).

Usage::

    from kaabhub.config import load_config

    cfg = load_config()            # reads ./config.yaml by default
    print(cfg.community_name)      # "KAAB HUB"
    print(cfg.accept_reputation)   # 15
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from kaabhub.constants import ACCEPTED_ANSWER_REPUTATION


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class KaabConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str

    # API
    api_port: int

    # Auth
    token_ttl_hours: int = 168  # 7 days

    # Reputation
    accept_reputation: int = ACCEPTED_ANSWER_REPUTATION

    # Mutation throttle (0 disables)
    mutation_rate_limit: int = 30
    rate_window_seconds: int = 60

    # Mentor directory
    seed_mentors: bool = True
    mentors_file: str | None = None  # Defaults to the bundled catalogue


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> KaabConfig:
    """Read *path* and return a :class:`KaabConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return KaabConfig(
        community_name=raw["community_name"],
        api_port=int(raw["api_port"]),
        token_ttl_hours=int(raw.get("token_ttl_hours", 168)),
        accept_reputation=int(raw.get("accept_reputation", ACCEPTED_ANSWER_REPUTATION)),
        mutation_rate_limit=int(raw.get("mutation_rate_limit", 30)),
        rate_window_seconds=int(raw.get("rate_window_seconds", 60)),
        seed_mentors=bool(raw.get("seed_mentors", True)),
        mentors_file=raw.get("mentors_file") or None,
    )
