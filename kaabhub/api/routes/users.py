"""
kaabhub.api.routes.users — Profile endpoints
==============================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, StrictBool
from sqlalchemy.orm import Session

from kaabhub.api.deps import get_current_user, get_session
from kaabhub.api.serializers import profile_dict, user_dict
from kaabhub.database.models import User
from kaabhub.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    bio: str | None = None
    university: str | None = None
    course: str | None = None
    year: int | None = Field(default=None, ge=1, le=10)
    location: str | None = None
    field: str | None = None
    profile_picture: str | None = None


class SettingsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email_notifications: StrictBool | None = None
    push_notifications: StrictBool | None = None
    answer_notifications: StrictBool | None = None
    upvote_notifications: StrictBool | None = None
    mention_notifications: StrictBool | None = None
    show_email: StrictBool | None = None
    show_university: StrictBool | None = None
    show_course: StrictBool | None = None
    show_year: StrictBool | None = None


@router.get("/profile")
def get_own_profile(user: User = Depends(get_current_user)):
    return profile_dict(user)


@router.patch("/profile")
def update_own_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Partial update of name, bio, university, course, year, location,
    field or profile_picture.  Any other key is rejected."""
    user = user_service.update_profile(session, user, body.model_dump(exclude_unset=True))
    return user_dict(user)


@router.patch("/settings")
def update_own_settings(
    body: SettingsUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Notification preferences and privacy settings (booleans only)."""
    user = user_service.update_settings(session, user, body.model_dump(exclude_unset=True))
    return user_dict(user)


@router.get("/profile/{user_id}")
def get_profile(
    user_id: int,
    viewer: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Another member's profile, filtered by their privacy settings."""
    user = user_service.get_user(session, user_id)
    return profile_dict(user, owner=user.id == viewer.id)
