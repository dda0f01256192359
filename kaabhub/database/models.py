"""
kaabhub.database.models — SQLAlchemy 2.0 Data Models
=====================================================

Tables:
- users              — Accounts, profile fields, reputation, preferences
- questions          — Asked questions with tags, view counter, solved state
- answers            — Answers owned by a question (cascade-deleted with it)
- answer_comments    — Ordered comments on an answer
- question_votes     — One row per (question, user) carrying the direction
- answer_votes       — One row per (answer, user) carrying the direction
- opportunities      — Scholarship / workshop / event listings
- mentors            — Mentor directory (seeded from the bundled catalogue)
- rate_limit_events  — Sliding-window mutation throttle state

Vote membership is stored as a single row per (entity, user).  The composite
primary key makes "present in both upvotes and downvotes" unrepresentable.
"""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all KAAB HUB ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class VoteDirection(enum.StrEnum):
    UP = "up"
    DOWN = "down"


class OpportunityCategory(enum.StrEnum):
    SCHOLARSHIP = "Scholarship"
    WORKSHOP = "Workshop"
    EVENT = "Event"


class OpportunityLocation(enum.StrEnum):
    MOGADISHU = "Mogadishu"
    HARGEISA = "Hargeisa"
    KISMAYO = "Kismayo"
    BOSASO = "Bosaso"
    BAIDOA = "Baidoa"


class OpportunityField(enum.StrEnum):
    TECHNOLOGY = "Technology"
    EDUCATION = "Education"
    HEALTH = "Health"
    BUSINESS = "Business"
    ENGINEERING = "Engineering"
    ARTS = "Arts"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile
    profile_picture: Mapped[str] = mapped_column(String(500), default="")
    bio: Mapped[str] = mapped_column(String(500), default="")
    university: Mapped[str | None] = mapped_column(String(150), default=None)
    course: Mapped[str | None] = mapped_column(String(150), default=None)
    year: Mapped[int | None] = mapped_column(Integer, default=None)
    location: Mapped[str | None] = mapped_column(String(100), default=None)
    field: Mapped[str | None] = mapped_column(String(100), default=None)

    reputation: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)

    # Notification preferences
    email_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    push_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    answer_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    upvote_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    mention_notifications: Mapped[bool] = mapped_column(Boolean, default=True)

    # Privacy settings
    show_email: Mapped[bool] = mapped_column(Boolean, default=False)
    show_university: Mapped[bool] = mapped_column(Boolean, default=True)
    show_course: Mapped[bool] = mapped_column(Boolean, default=True)
    show_year: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Back-references for display only; users are never deleted
    questions: Mapped[list[Question]] = relationship(
        back_populates="author", order_by="Question.id"
    )
    answers: Mapped[list[Answer]] = relationship(
        back_populates="author", order_by="Answer.id"
    )

    __table_args__ = (
        Index("ix_users_reputation_desc", "reputation"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} rep={self.reputation}>"


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------
class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    tags: Mapped[list[str]] = mapped_column(JSONType, default=list)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    course: Mapped[str | None] = mapped_column(String(150), default=None)
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_solved: Mapped[bool] = mapped_column(Boolean, default=False)
    # Plain column, not a FK: answers already reference questions and the
    # cycle would need ALTER support.  Cleared by answer deletion.
    solved_by_id: Mapped[int | None] = mapped_column(Integer, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    author: Mapped[User] = relationship(back_populates="questions")
    answers: Mapped[list[Answer]] = relationship(
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="Answer.id",
    )
    votes: Mapped[list[QuestionVote]] = relationship(
        back_populates="question", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_questions_category", "category"),
        Index("ix_questions_author", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<Question id={self.id} title={self.title!r} solved={self.is_solved}>"


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------
class Answer(Base):
    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    is_accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    author: Mapped[User] = relationship(back_populates="answers")
    question: Mapped[Question] = relationship(back_populates="answers")
    comments: Mapped[list[AnswerComment]] = relationship(
        back_populates="answer",
        cascade="all, delete-orphan",
        order_by="AnswerComment.id",
    )
    votes: Mapped[list[AnswerVote]] = relationship(
        back_populates="answer", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_answers_question", "question_id"),
    )

    def __repr__(self) -> str:
        return f"<Answer id={self.id} question={self.question_id} accepted={self.is_accepted}>"


class AnswerComment(Base):
    __tablename__ = "answer_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    answer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("answers.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    answer: Mapped[Answer] = relationship(back_populates="comments")
    author: Mapped[User] = relationship()

    def __repr__(self) -> str:
        return f"<AnswerComment id={self.id} answer={self.answer_id}>"


# ---------------------------------------------------------------------------
# Votes: the composite PK allows one vote per user per entity
# ---------------------------------------------------------------------------
class QuestionVote(Base):
    __tablename__ = "question_votes"

    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )
    direction: Mapped[str] = mapped_column(String(4), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    question: Mapped[Question] = relationship(back_populates="votes")

    def __repr__(self) -> str:
        return f"<QuestionVote q={self.question_id} user={self.user_id} {self.direction}>"


class AnswerVote(Base):
    __tablename__ = "answer_votes"

    answer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("answers.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )
    direction: Mapped[str] = mapped_column(String(4), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    answer: Mapped[Answer] = relationship(back_populates="votes")

    def __repr__(self) -> str:
        return f"<AnswerVote a={self.answer_id} user={self.user_id} {self.direction}>"


# ---------------------------------------------------------------------------
# Opportunities (immutable after creation)
# ---------------------------------------------------------------------------
class Opportunity(Base):
    __tablename__ = "opportunities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    location: Mapped[str] = mapped_column(String(20), nullable=False)
    field: Mapped[str] = mapped_column(String(20), nullable=False)
    deadline: Mapped[date] = mapped_column(Date, nullable=False)
    link: Mapped[str | None] = mapped_column(String(500), default=None)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    author: Mapped[User] = relationship()

    __table_args__ = (
        Index("ix_opportunities_filters", "category", "location", "field"),
    )

    def __repr__(self) -> str:
        return f"<Opportunity id={self.id} {self.category} {self.title!r}>"


# ---------------------------------------------------------------------------
# Mentors
# ---------------------------------------------------------------------------
class Mentor(Base):
    __tablename__ = "mentors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    skill: Mapped[str] = mapped_column(String(100), nullable=False)
    intro: Mapped[str] = mapped_column(Text, default="")
    location: Mapped[str | None] = mapped_column(String(100), default=None)
    email: Mapped[str | None] = mapped_column(String(255), default=None)
    bio: Mapped[str] = mapped_column(Text, default="")
    skills: Mapped[list[str]] = mapped_column(JSONType, default=list)
    testimonials: Mapped[list[dict]] = mapped_column(JSONType, default=list)
    social: Mapped[dict] = mapped_column(JSONType, default=dict)
    image: Mapped[str | None] = mapped_column(String(500), default=None)

    def __repr__(self) -> str:
        return f"<Mentor slug={self.slug!r} skill={self.skill!r}>"


# ---------------------------------------------------------------------------
# Mutation rate limiting
# ---------------------------------------------------------------------------
class RateLimitEvent(Base):
    __tablename__ = "rate_limit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_rate_limit_user_ts", "user_id", timestamp.desc()),
        Index("ix_rate_limit_ts", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<RateLimitEvent user={self.user_id!r} ts={self.timestamp}>"
