# -*- coding: utf-8 -*-
"""Gemini proxy — API endpoints.

Every route forwards the caller's profile (and symptom log where relevant) to
Gemini with the caller's own API key. Upstream failures map to 502; a 401/403
from Google must never leak through, since clients treat those as a dead
session.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from ..api_keys.storage import get_api_key
from ..auth.security import get_current_user
from ..config import settings
from . import prompts
from .client import GeminiError, generate_json
from .models import (
    AnalyzeTriggersRequest,
    FoodCheckRequest,
    FoodCheckResult,
    FoodImage,
    MealPlan,
    MealPlanRequest,
    Recipe,
    RecipeRequest,
    TriggerAnalysis,
)
from .parsing import normalize_analysis, normalize_food_check, normalize_meal_plan, normalize_recipe

router = APIRouter(prefix="/api/gemini", tags=["Gemini"])

M = TypeVar("M", bound=BaseModel)


def _require_api_key(user: Dict[str, Any]) -> str:
    api_key = get_api_key(user["id"])
    if not api_key:
        raise HTTPException(status_code=400, detail="Gemini API key not configured")
    return api_key


def _check_image_or_400(image: FoodImage, max_bytes: int) -> Dict[str, str]:
    try:
        data = base64.b64decode(image.data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid base64 image: {exc}") from exc
    if len(data) > max_bytes:
        raise HTTPException(status_code=400, detail=f"Image too large: {len(data)} bytes > {max_bytes}")
    return {"mimeType": image.mime_type, "data": image.data}


def _ask(
    user: Dict[str, Any],
    model: Type[M],
    normalize: Callable[[Dict[str, Any]], Dict[str, Any]],
    *,
    prompt: str,
    image: Optional[Dict[str, str]] = None,
) -> M:
    api_key = _require_api_key(user)
    try:
        parsed = generate_json(
            api_key=api_key,
            system_prompt=prompts.SYSTEM_PROMPT,
            prompt=prompt,
            image=image,
        )
    except GeminiError as exc:
        raise HTTPException(status_code=502, detail=f"Gemini call failed: {exc}") from exc
    except ValueError as exc:
        raise HTTPException(status_code=502, detail=f"Gemini output error: {exc}") from exc

    try:
        return model.model_validate(normalize(parsed))
    except ValidationError as exc:
        raise HTTPException(status_code=502, detail="Gemini returned an unexpected format") from exc


def _dump(obj: BaseModel) -> Dict[str, Any]:
    return obj.model_dump(by_alias=True, mode="json", exclude_none=True)


@router.post("/meal-plan", response_model=MealPlan, summary="Generate a meal plan")
def meal_plan(request: MealPlanRequest, user: dict = Depends(get_current_user)):
    prompt = prompts.meal_plan_prompt(_dump(request.profile), [_dump(s) for s in request.symptoms])
    return _ask(user, MealPlan, normalize_meal_plan, prompt=prompt)


@router.post("/check-food", response_model=FoodCheckResult, summary="Check whether a food is suitable")
def check_food(request: FoodCheckRequest, user: dict = Depends(get_current_user)):
    image = None
    if request.food_image is not None:
        image = _check_image_or_400(request.food_image, max_bytes=settings.max_image_bytes)
    prompt = prompts.food_check_prompt(_dump(request.profile), request.food_name, has_image=image is not None)
    return _ask(
        user,
        FoodCheckResult,
        lambda parsed: normalize_food_check(parsed, food_name=request.food_name),
        prompt=prompt,
        image=image,
    )


@router.post("/analyze-triggers", response_model=TriggerAnalysis, summary="Analyze symptom triggers")
def analyze_triggers(request: AnalyzeTriggersRequest, user: dict = Depends(get_current_user)):
    prompt = prompts.analyze_triggers_prompt(_dump(request.profile), [_dump(s) for s in request.symptoms])
    return _ask(user, TriggerAnalysis, normalize_analysis, prompt=prompt)


@router.post("/suggest-recipe", response_model=Recipe, summary="Suggest a recipe")
def suggest_recipe(request: RecipeRequest, user: dict = Depends(get_current_user)):
    prompt = prompts.recipe_prompt(_dump(request.profile), request.request)
    return _ask(user, Recipe, normalize_recipe, prompt=prompt)
