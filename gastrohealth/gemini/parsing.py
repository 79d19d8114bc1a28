# -*- coding: utf-8 -*-
"""Gemini — recover JSON objects from model text and coerce them to our models.

Gemini is asked for JSON-only output, but replies still arrive wrapped in code
fences, followed by prose, or with loose punctuation. Parsing is lenient; the
normalizers then map common key aliases onto the field names the models use.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip())


def _remove_trailing_commas(text: str) -> str:
    """Drop commas that directly precede '}' or ']' outside string literals."""
    out: list[str] = []
    in_str = False
    escaped = False
    for i, ch in enumerate(text):
        if in_str:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            continue
        if ch == "\"":
            in_str = True
        elif ch == ",":
            rest = text[i + 1 :].lstrip()
            if rest[:1] in ("}", "]"):
                continue
        out.append(ch)
    return "".join(out)


def _iter_json_object_candidates(text: str) -> list[str]:
    """Balanced top-level {...} spans, scanning past braces inside strings."""
    cleaned = _strip_fences(text)
    candidates: list[str] = []
    in_str = False
    escaped = False
    depth = 0
    start: int | None = None
    for i, ch in enumerate(cleaned):
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            continue
        if ch == "\"":
            in_str = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start is not None:
                candidates.append(cleaned[start : i + 1])
                start = None
    return candidates


def _sanitize_json_like(text: str) -> str:
    cleaned = text.replace("“", "\"").replace("”", "\"").replace("‘", "'").replace("’", "'")
    cleaned = _remove_trailing_commas(cleaned)
    cleaned = re.sub(r"\bNaN\b", "null", cleaned)
    cleaned = re.sub(r"-?\bInfinity\b", "null", cleaned)
    return cleaned


def parse_model_output_json(content: str) -> Dict[str, Any]:
    """Return the first JSON object found in *content*; ValueError if none parses."""
    last_error: Exception | None = None
    for candidate in _iter_json_object_candidates(content):
        for attempt in (candidate, _sanitize_json_like(candidate)):
            try:
                parsed = json.loads(attempt)
            except ValueError as exc:
                last_error = exc
                continue
            if isinstance(parsed, dict):
                return parsed
    if last_error is None:
        raise ValueError("Model output does not contain a JSON object")
    raise ValueError(f"Failed to parse model JSON: {last_error}") from last_error


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = value.strip() if isinstance(value, str) else str(value).strip()
    return s or None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        # Numbered or bulleted prose lists come back as one string.
        lines = [re.sub(r"^\s*(?:[-*•]|\d+[.)])\s*", "", line) for line in value.splitlines()]
        return [line.strip() for line in lines if line.strip()]
    if isinstance(value, list):
        out: List[str] = []
        for item in value:
            if isinstance(item, dict):
                item = _pick(item, "text", "step", "name", "item", "description")
            s = _as_str(item)
            if s:
                out.append(s)
        return out
    s = _as_str(value)
    return [s] if s else []


def _extra(data: Dict[str, Any], known: set[str]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


def normalize_meal_plan(parsed: Dict[str, Any]) -> Dict[str, Any]:
    days_raw = _pick(parsed, "days", "plan", "mealPlan", "meal_plan") or []
    days: List[Dict[str, Any]] = []
    if isinstance(days_raw, list):
        for idx, day in enumerate(days_raw, start=1):
            if not isinstance(day, dict):
                continue
            meals: List[Dict[str, Any]] = []
            for meal in _pick(day, "meals", "items") or []:
                if not isinstance(meal, dict):
                    continue
                dish = _as_str(_pick(meal, "dish", "name", "food", "description"))
                if not dish:
                    continue
                meals.append(
                    {
                        "meal": _as_str(_pick(meal, "meal", "mealType", "type", "time")) or "meal",
                        "dish": dish,
                        "notes": _as_str(_pick(meal, "notes", "note", "reason")),
                    }
                )
            days.append({"day": _as_str(_pick(day, "day", "name", "date")) or f"Day {idx}", "meals": meals})

    known = {"title", "summary", "overview", "days", "plan", "mealPlan", "meal_plan", "tips", "advice"}
    return {
        "title": _as_str(parsed.get("title")) or "Meal plan",
        "summary": _as_str(_pick(parsed, "summary", "overview")) or "",
        "days": days,
        "tips": _as_str_list(_pick(parsed, "tips", "advice")),
        **_extra(parsed, known),
    }


# Checked in order: negative phrasings must win over the words they contain.
_VERDICT_ALIASES = (
    ("avoid", ("avoid", "unsafe", "not safe", "not recommended", "harmful")),
    ("caution", ("caution", "moderat", "limit", "careful", "depends")),
    ("safe", ("safe", "recommended", "good", "fine")),
)


def _normalize_verdict(value: Any) -> str:
    s = (_as_str(value) or "").lower()
    for verdict, aliases in _VERDICT_ALIASES:
        if any(alias in s for alias in aliases):
            return verdict
    return "caution"


def normalize_food_check(parsed: Dict[str, Any], *, food_name: str) -> Dict[str, Any]:
    known = {"foodName", "food_name", "food", "verdict", "safety", "status", "rating", "reason", "explanation", "alternatives", "substitutes"}
    return {
        "foodName": _as_str(_pick(parsed, "foodName", "food_name", "food")) or food_name,
        "verdict": _normalize_verdict(_pick(parsed, "verdict", "safety", "status", "rating")),
        "reason": _as_str(_pick(parsed, "reason", "explanation")) or "",
        "alternatives": _as_str_list(_pick(parsed, "alternatives", "substitutes")),
        **_extra(parsed, known),
    }


def normalize_analysis(parsed: Dict[str, Any]) -> Dict[str, Any]:
    analysis = _pick(parsed, "analysis", "report", "summary")
    if isinstance(analysis, (dict, list)):
        analysis = json.dumps(analysis, ensure_ascii=False)
    return {"analysis": _as_str(analysis) or ""}


def normalize_recipe(parsed: Dict[str, Any]) -> Dict[str, Any]:
    recipe = parsed.get("recipe") if isinstance(parsed.get("recipe"), dict) else parsed
    known = {"name", "title", "description", "ingredients", "instructions", "steps", "prepTime", "prep_time", "time", "notes"}
    return {
        "name": _as_str(_pick(recipe, "name", "title")) or "Recipe",
        "description": _as_str(recipe.get("description")) or "",
        "ingredients": _as_str_list(recipe.get("ingredients")),
        "instructions": _as_str_list(_pick(recipe, "instructions", "steps")),
        "prepTime": _as_str(_pick(recipe, "prepTime", "prep_time", "time")),
        "notes": _as_str(recipe.get("notes")),
        **_extra(recipe, known),
    }
