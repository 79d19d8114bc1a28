# -*- coding: utf-8 -*-
"""Auth — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..profile.models import UserProfile
from ..symptoms.models import SymptomEntry


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class MessageResponse(BaseModel):
    message: str


class UserData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    profile: Optional[UserProfile] = None
    has_api_key: bool = Field(False, alias="hasApiKey")


class MeResponse(BaseModel):
    user: UserData
    symptoms: List[SymptomEntry] = Field(default_factory=list)


class LoginResponse(MeResponse):
    token: str
