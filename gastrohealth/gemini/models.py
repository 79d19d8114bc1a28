# -*- coding: utf-8 -*-
"""Gemini proxy — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..profile.models import UserProfile
from ..symptoms.models import SymptomEntry


class FoodImage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mime_type: str = Field(..., alias="mimeType", pattern=r"^image/(jpeg|jpg|png|webp|heic)$")
    data: str = Field(..., min_length=16, description="Raw base64 without data-url prefix")


class MealPlanRequest(BaseModel):
    profile: UserProfile
    symptoms: List[SymptomEntry] = Field(default_factory=list)


class FoodCheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profile: UserProfile
    food_name: str = Field(..., alias="foodName", min_length=1, max_length=200)
    food_image: Optional[FoodImage] = Field(None, alias="foodImage")


class AnalyzeTriggersRequest(BaseModel):
    profile: UserProfile
    symptoms: List[SymptomEntry] = Field(default_factory=list)


class RecipeRequest(BaseModel):
    profile: UserProfile
    request: str = Field(..., min_length=1, max_length=500)


class Meal(BaseModel):
    model_config = ConfigDict(extra="allow")

    meal: str = Field(..., description="breakfast | lunch | dinner | snack")
    dish: str
    notes: Optional[str] = None


class MealPlanDay(BaseModel):
    model_config = ConfigDict(extra="allow")

    day: str
    meals: List[Meal] = Field(default_factory=list)


class MealPlan(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str = "Meal plan"
    summary: str = ""
    days: List[MealPlanDay] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)


class FoodVerdict(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    AVOID = "avoid"


class FoodCheckResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    food_name: str = Field(..., alias="foodName")
    verdict: FoodVerdict = FoodVerdict.CAUTION
    reason: str = ""
    alternatives: List[str] = Field(default_factory=list)


class TriggerAnalysis(BaseModel):
    analysis: str


class Recipe(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    description: str = ""
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    prep_time: Optional[str] = Field(None, alias="prepTime")
    notes: Optional[str] = None
