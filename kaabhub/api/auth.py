"""
kaabhub.api.auth — Registration, login & JWT issuance
=======================================================
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from kaabhub.api.deps import get_config, get_current_user, get_session, issue_token
from kaabhub.api.serializers import user_dict
from kaabhub.config import KaabConfig
from kaabhub.database.models import User
from kaabhub.services import user_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["auth"])


class RegisterBody(BaseModel):
    name: str
    email: str
    password: str
    university: str | None = None
    course: str | None = None
    year: int | None = Field(default=None, ge=1, le=10)


class LoginBody(BaseModel):
    email: str
    password: str


@router.post("/register", status_code=201)
def register(
    body: RegisterBody,
    session: Session = Depends(get_session),
    cfg: KaabConfig = Depends(get_config),
):
    """Create an account and sign the caller in."""
    user = user_service.register_user(
        session,
        name=body.name,
        email=body.email,
        password=body.password,
        university=body.university,
        course=body.course,
        year=body.year,
    )
    return {"user": user_dict(user), "token": issue_token(user.id, cfg.token_ttl_hours)}


@router.post("/login")
def login(
    body: LoginBody,
    session: Session = Depends(get_session),
    cfg: KaabConfig = Depends(get_config),
):
    """Exchange email + password for a bearer token."""
    user = user_service.authenticate(session, body.email, body.password)
    logger.info("User %d logged in", user.id)
    return {"user": user_dict(user), "token": issue_token(user.id, cfg.token_ttl_hours)}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    """Return the authenticated user's own record."""
    return user_dict(user)
