"""Profile picker and session endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from .dependencies import get_session_manager
from .profile_session import ProfileSessionManager, ProfileSummary, SessionState

router = APIRouter(prefix="/api", tags=["profiles"])
logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)


class ProfileListPayload(BaseModel):
    profiles: List[ProfileSummary]
    show_profile_creation: bool


@router.get("/session", response_model=SessionState)
def get_session(manager: ProfileSessionManager = Depends(get_session_manager)) -> SessionState:
    return manager.state()


@router.get("/profiles", response_model=ProfileListPayload)
def list_profiles(manager: ProfileSessionManager = Depends(get_session_manager)) -> ProfileListPayload:
    profiles = manager.list_profiles()
    return ProfileListPayload(profiles=profiles, show_profile_creation=not profiles)


@router.post("/profiles/login", response_model=SessionState)
def login(
    request: LoginRequest,
    manager: ProfileSessionManager = Depends(get_session_manager),
) -> SessionState:
    try:
        manager.login(request.name)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return manager.state()


@router.post("/profiles/logout", response_model=SessionState)
def logout(manager: ProfileSessionManager = Depends(get_session_manager)) -> SessionState:
    manager.logout()
    return manager.state()


@router.delete("/profiles/{name}", response_model=SessionState)
def delete_profile(
    name: str,
    manager: ProfileSessionManager = Depends(get_session_manager),
) -> SessionState:
    try:
        deleted = manager.delete_profile(name)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Profile '{name}' was not found.",
        )
    logger.info("Deleted profile %s", name)
    return manager.state()
