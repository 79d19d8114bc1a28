# -*- coding: utf-8 -*-
"""Profile — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth.security import get_current_user
from .models import ProfileSaveRequest, UserProfile
from .storage import save_profile

router = APIRouter(prefix="/api", tags=["Profile"])


@router.post("/profile", response_model=UserProfile, summary="Save the onboarding profile")
def save_user_profile(request: ProfileSaveRequest, user: dict = Depends(get_current_user)):
    payload = request.profile.model_dump(by_alias=True, mode="json")
    return save_profile(user["id"], payload)
