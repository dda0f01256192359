"""
tests/test_config.py — YAML Config Loader & Mentor Seeding
============================================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from kaabhub.config import KaabConfig, load_config
from kaabhub.database.models import Mentor
from kaabhub.database.seed import load_mentor_catalogue, seed_mentors


class TestLoadConfig:
    def test_minimal_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text('community_name: "KAAB HUB"\napi_port: 5000\n', encoding="utf-8")

        cfg = load_config(path)
        assert cfg == KaabConfig(community_name="KAAB HUB", api_port=5000)
        assert cfg.accept_reputation == 15
        assert cfg.token_ttl_hours == 168

    def test_overrides(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "community_name: Test\n"
            "api_port: '8080'\n"
            "accept_reputation: 20\n"
            "mutation_rate_limit: 0\n"
            "seed_mentors: false\n",
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.api_port == 8080
        assert cfg.accept_reputation == 20
        assert cfg.mutation_rate_limit == 0
        assert cfg.seed_mentors is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="config.yaml.example"):
            load_config(tmp_path / "absent.yaml")

    def test_missing_required_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("community_name: Test\n", encoding="utf-8")
        with pytest.raises(KeyError):
            load_config(path)


class TestMentorSeed:
    def test_bundled_catalogue(self):
        slugs = [m["slug"] for m in load_mentor_catalogue()]
        assert slugs == ["abdi-hassan", "amina-omar", "mohamed-ali"]

    def test_seed_is_idempotent(self, db_engine):
        assert seed_mentors(db_engine) == 3
        assert seed_mentors(db_engine) == 0
        with Session(db_engine) as s:
            assert len(s.scalars(select(Mentor)).all()) == 3

    def test_seed_keeps_edited_rows(self, db_engine):
        seed_mentors(db_engine)
        with Session(db_engine) as s:
            mentor = s.scalar(select(Mentor).where(Mentor.slug == "amina-omar"))
            mentor.intro = "Edited by an admin"
            s.commit()

        seed_mentors(db_engine)
        with Session(db_engine) as s:
            mentor = s.scalar(select(Mentor).where(Mentor.slug == "amina-omar"))
            assert mentor.intro == "Edited by an admin"

    def test_custom_file_requires_slug(self, tmp_path, db_engine):
        path = tmp_path / "mentors.yaml"
        path.write_text("mentors:\n  - name: No Slug\n    skill: Math\n", encoding="utf-8")
        with pytest.raises(KeyError, match="slug"):
            seed_mentors(db_engine, path)
