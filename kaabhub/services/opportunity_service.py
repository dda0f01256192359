"""
kaabhub.services.opportunity_service — Scholarship & Event Listings
====================================================================

Opportunities are created once and never edited.  Category, location and
field are closed vocabularies (see the enums in :mod:`kaabhub.database.models`).
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from kaabhub.database.models import (
    Opportunity,
    OpportunityCategory,
    OpportunityField,
    OpportunityLocation,
    User,
)
from kaabhub.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _enum_value(enum_cls, value: str, label: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{label} must be one of: {allowed}") from None


def create_opportunity(
    session: Session,
    author: User,
    *,
    title: str,
    description: str,
    category: str,
    location: str,
    field: str,
    deadline: date,
    link: str | None = None,
) -> Opportunity:
    """Publish a listing authored by *author*."""
    title = (title or "").strip()
    description = (description or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if not description:
        raise ValidationError("Description is required")

    opportunity = Opportunity(
        title=title,
        description=description,
        category=_enum_value(OpportunityCategory, category, "Category"),
        location=_enum_value(OpportunityLocation, location, "Location"),
        field=_enum_value(OpportunityField, field, "Field"),
        deadline=deadline,
        link=link.strip() if link and link.strip() else None,
        author_id=author.id,
    )
    session.add(opportunity)
    session.commit()
    logger.info("User %d posted opportunity %d (%s)", author.id, opportunity.id, opportunity.category)
    return get_opportunity(session, opportunity.id)


def list_opportunities(
    session: Session,
    *,
    category: str | None = None,
    location: str | None = None,
    field: str | None = None,
) -> list[Opportunity]:
    """Listings matching every given filter, newest first."""
    stmt = select(Opportunity).options(selectinload(Opportunity.author))
    if category:
        stmt = stmt.where(Opportunity.category == category)
    if location:
        stmt = stmt.where(Opportunity.location == location)
    if field:
        stmt = stmt.where(Opportunity.field == field)
    stmt = stmt.order_by(Opportunity.created_at.desc(), Opportunity.id.desc())
    return list(session.scalars(stmt).all())


def get_opportunity(session: Session, opportunity_id: int) -> Opportunity:
    opportunity = session.scalar(
        select(Opportunity)
        .options(selectinload(Opportunity.author))
        .where(Opportunity.id == opportunity_id)
    )
    if opportunity is None:
        raise NotFoundError("Opportunity not found")
    return opportunity
