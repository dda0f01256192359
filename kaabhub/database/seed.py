"""
kaabhub.database.seed — Mentor Catalogue Seeder
=================================================

Loads the mentor directory from YAML (the bundled ``kaabhub/data/mentors.yaml``
or a file named in config) into the ``mentors`` table.

Idempotent — only inserts slugs that don't already exist.  Rows edited in the
database afterwards are never overwritten.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from kaabhub.database.models import Mentor

logger = logging.getLogger(__name__)

DEFAULT_MENTORS_FILE = Path(__file__).resolve().parent.parent / "data" / "mentors.yaml"

_MENTOR_FIELDS = (
    "name", "skill", "intro", "location", "email", "bio",
    "skills", "testimonials", "social", "image",
)


def load_mentor_catalogue(path: str | Path | None = None) -> list[dict]:
    """Read the ``mentors:`` list from *path* (defaults to the bundled file)."""
    source = Path(path) if path else DEFAULT_MENTORS_FILE
    with open(source, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    entries = raw.get("mentors") or []
    for entry in entries:
        if "slug" not in entry or "name" not in entry or "skill" not in entry:
            raise KeyError(f"Mentor entry in {source} needs slug, name and skill: {entry!r}")
    return entries


def seed_mentors(engine: Engine, path: str | Path | None = None) -> int:
    """Insert catalogue mentors whose slug is not yet present.

    Returns the number of rows inserted.
    """
    entries = load_mentor_catalogue(path)
    with Session(engine) as session:
        existing = set(session.scalars(select(Mentor.slug)).all())
        inserted = 0
        for entry in entries:
            if entry["slug"] in existing:
                continue
            session.add(Mentor(
                slug=entry["slug"],
                **{k: entry[k] for k in _MENTOR_FIELDS if k in entry},
            ))
            existing.add(entry["slug"])
            inserted += 1
        session.commit()

    if inserted:
        logger.info("Seeded %d mentor profile(s)", inserted)
    return inserted
