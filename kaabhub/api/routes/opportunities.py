"""
kaabhub.api.routes.opportunities — Scholarship / workshop / event listings
===========================================================================
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kaabhub.api.deps import get_session
from kaabhub.api.rate_limit import rate_limited_user
from kaabhub.api.serializers import opportunity_dict
from kaabhub.database.models import (
    OpportunityCategory,
    OpportunityField,
    OpportunityLocation,
    User,
)
from kaabhub.services import opportunity_service

router = APIRouter(prefix="/opportunities", tags=["opportunities"])


class OpportunityCreate(BaseModel):
    title: str
    description: str
    category: OpportunityCategory
    location: OpportunityLocation
    field: OpportunityField
    deadline: date
    link: str | None = None


@router.get("")
def list_opportunities(
    category: str | None = None,
    location: str | None = None,
    field: str | None = None,
    session: Session = Depends(get_session),
):
    rows = opportunity_service.list_opportunities(
        session, category=category, location=location, field=field,
    )
    return [opportunity_dict(o) for o in rows]


@router.get("/{opportunity_id}")
def get_opportunity(opportunity_id: int, session: Session = Depends(get_session)):
    return opportunity_dict(opportunity_service.get_opportunity(session, opportunity_id))


@router.post("", status_code=201)
def create_opportunity(
    body: OpportunityCreate,
    user: User = Depends(rate_limited_user),
    session: Session = Depends(get_session),
):
    """Publish a listing.  The author is always the caller."""
    opportunity = opportunity_service.create_opportunity(
        session,
        user,
        title=body.title,
        description=body.description,
        category=body.category.value,
        location=body.location.value,
        field=body.field.value,
        deadline=body.deadline,
        link=body.link,
    )
    return opportunity_dict(opportunity)
