# -*- coding: utf-8 -*-
"""Profile — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Onboarding survey answers. Unknown survey keys are kept as-is."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    condition: str = Field(..., min_length=1, description="e.g. 'IBS', 'GERD', 'gastritis'")
    dietary_goal: Optional[str] = Field(None, alias="dietaryGoal")
    age: Optional[int] = Field(None, ge=0, le=130)
    allergies: List[str] = Field(default_factory=list)
    disliked_foods: List[str] = Field(default_factory=list, alias="dislikedFoods")
    notes: Optional[str] = None


class ProfileSaveRequest(BaseModel):
    profile: UserProfile
