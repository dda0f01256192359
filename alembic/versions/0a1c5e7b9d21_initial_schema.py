"""Initial KAAB HUB schema

Revision ID: 0a1c5e7b9d21
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0a1c5e7b9d21"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    cols = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
    ]
    if updated:
        cols.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=True,
            )
        )
    return cols


def upgrade() -> None:
    """Create users, Q&A, vote, opportunity, mentor and rate-limit tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("profile_picture", sa.String(500), nullable=True),
        sa.Column("bio", sa.String(500), nullable=True),
        sa.Column("university", sa.String(150), nullable=True),
        sa.Column("course", sa.String(150), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("field", sa.String(100), nullable=True),
        sa.Column("reputation", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_admin", sa.Boolean(), nullable=True),
        sa.Column("email_notifications", sa.Boolean(), nullable=True),
        sa.Column("push_notifications", sa.Boolean(), nullable=True),
        sa.Column("answer_notifications", sa.Boolean(), nullable=True),
        sa.Column("upvote_notifications", sa.Boolean(), nullable=True),
        sa.Column("mention_notifications", sa.Boolean(), nullable=True),
        sa.Column("show_email", sa.Boolean(), nullable=True),
        sa.Column("show_university", sa.Boolean(), nullable=True),
        sa.Column("show_course", sa.Boolean(), nullable=True),
        sa.Column("show_year", sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_reputation_desc", "users", ["reputation"])

    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("tags", JSONType, nullable=True),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("course", sa.String(150), nullable=True),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_solved", sa.Boolean(), nullable=True),
        sa.Column("solved_by_id", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_questions_category", "questions", ["category"])
    op.create_index("ix_questions_author", "questions", ["author_id"])

    op.create_table(
        "answers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "question_id",
            sa.Integer(),
            sa.ForeignKey("questions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_accepted", sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_answers_question", "answers", ["question_id"])

    op.create_table(
        "answer_comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "answer_id",
            sa.Integer(),
            sa.ForeignKey("answers.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        "question_votes",
        sa.Column(
            "question_id",
            sa.Integer(),
            sa.ForeignKey("questions.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("direction", sa.String(4), nullable=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        "answer_votes",
        sa.Column(
            "answer_id",
            sa.Integer(),
            sa.ForeignKey("answers.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("direction", sa.String(4), nullable=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        "opportunities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("location", sa.String(20), nullable=False),
        sa.Column("field", sa.String(20), nullable=False),
        sa.Column("deadline", sa.Date(), nullable=False),
        sa.Column("link", sa.String(500), nullable=True),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index(
        "ix_opportunities_filters", "opportunities", ["category", "location", "field"]
    )

    op.create_table(
        "mentors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("skill", sa.String(100), nullable=False),
        sa.Column("intro", sa.Text(), nullable=True),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("skills", JSONType, nullable=True),
        sa.Column("testimonials", JSONType, nullable=True),
        sa.Column("social", JSONType, nullable=True),
        sa.Column("image", sa.String(500), nullable=True),
    )

    op.create_table(
        "rate_limit_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_rate_limit_user_ts",
        "rate_limit_events",
        ["user_id", sa.text("timestamp DESC")],
    )
    op.create_index("ix_rate_limit_ts", "rate_limit_events", ["timestamp"])


def downgrade() -> None:
    op.drop_index("ix_rate_limit_ts", table_name="rate_limit_events")
    op.drop_index("ix_rate_limit_user_ts", table_name="rate_limit_events")
    op.drop_table("rate_limit_events")
    op.drop_table("mentors")
    op.drop_index("ix_opportunities_filters", table_name="opportunities")
    op.drop_table("opportunities")
    op.drop_table("answer_votes")
    op.drop_table("question_votes")
    op.drop_table("answer_comments")
    op.drop_index("ix_answers_question", table_name="answers")
    op.drop_table("answers")
    op.drop_index("ix_questions_author", table_name="questions")
    op.drop_index("ix_questions_category", table_name="questions")
    op.drop_table("questions")
    op.drop_index("ix_users_reputation_desc", table_name="users")
    op.drop_table("users")
