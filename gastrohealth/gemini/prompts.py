# -*- coding: utf-8 -*-
"""Gemini — prompt builders."""

from __future__ import annotations

import json
from typing import Any, Dict, List

SYSTEM_PROMPT = (
    "You are a dietitian assistant for people living with gastrointestinal conditions. "
    "Return STRICT JSON only, with no markdown and no code fences. "
    "Use double quotes and no trailing commas. "
    "Give practical food guidance; never diagnose and recommend seeing a doctor for severe symptoms."
)


def _context(profile: Dict[str, Any], symptoms: List[Dict[str, Any]] | None = None) -> str:
    lines = ["User profile (JSON):", json.dumps(profile, ensure_ascii=False)]
    if symptoms is not None:
        # The most recent entries carry most of the signal.
        lines += ["Symptom log, oldest first (JSON):", json.dumps(symptoms[-30:], ensure_ascii=False)]
    return "\n".join(lines)


def meal_plan_prompt(profile: Dict[str, Any], symptoms: List[Dict[str, Any]]) -> str:
    return (
        f"{_context(profile, symptoms)}\n\n"
        "Task: create a 7-day meal plan that avoids this user's likely trigger foods.\n"
        "Output JSON schema:\n"
        '{"title": "string", "summary": "string", '
        '"days": [{"day": "string", "meals": [{"meal": "breakfast|lunch|dinner|snack", "dish": "string", "notes": "string|null"}]}], '
        '"tips": ["string"]}'
    )


def food_check_prompt(profile: Dict[str, Any], food_name: str, has_image: bool) -> str:
    image_hint = " A photo of the food is attached." if has_image else ""
    return (
        f"{_context(profile)}\n\n"
        f"Task: is '{food_name}' suitable for this user?{image_hint}\n"
        "Output JSON schema:\n"
        '{"foodName": "string", "verdict": "safe|caution|avoid", "reason": "string", "alternatives": ["string"]}'
    )


def analyze_triggers_prompt(profile: Dict[str, Any], symptoms: List[Dict[str, Any]]) -> str:
    return (
        f"{_context(profile, symptoms)}\n\n"
        "Task: find foods or habits that correlate with the logged symptoms and explain the pattern. "
        "If the log is too short to conclude anything, say so.\n"
        'Output JSON schema: {"analysis": "string (markdown allowed inside the string)"}'
    )


def recipe_prompt(profile: Dict[str, Any], request: str) -> str:
    return (
        f"{_context(profile)}\n\n"
        f"Task: suggest one recipe for this request: {request}\n"
        "Output JSON schema:\n"
        '{"name": "string", "description": "string", "ingredients": ["string"], '
        '"instructions": ["string"], "prepTime": "string|null", "notes": "string|null"}'
    )
