# -*- coding: utf-8 -*-
"""Gemini — generateContent call over the public REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .parsing import parse_model_output_json

logger = logging.getLogger(__name__)


class GeminiError(RuntimeError):
    """Gemini could not be reached or refused the request."""


@dataclass(frozen=True)
class GeminiSettings:
    base_url: str
    model: str
    timeout: float
    temperature: float


def resolve_gemini_settings() -> GeminiSettings:
    return GeminiSettings(
        base_url=settings.gemini_base_url.rstrip("/"),
        model=settings.gemini_model,
        timeout=settings.gemini_timeout,
        temperature=settings.gemini_temperature,
    )


def _extract_text_from_gemini_response(data: object) -> str:
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list):
        return ""
    for candidate in candidates:
        content = candidate.get("content") if isinstance(candidate, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            continue
        text = "".join(p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))
        if text.strip():
            return text
    return ""


def _extract_error_from_gemini_response(resp: httpx.Response) -> str:
    """Google API errors look like {"error": {"code", "message", "status"}}."""
    try:
        data = resp.json()
    except ValueError:
        return f"Gemini HTTP {resp.status_code}"
    err = data.get("error") if isinstance(data, dict) else None
    if isinstance(err, dict):
        message = str(err.get("message") or "").strip()
        status = str(err.get("status") or "").strip() or "GeminiError"
        if message:
            return f"{status} ({resp.status_code}): {message}"
    return f"Gemini HTTP {resp.status_code}"


def _blocked_reason(data: object) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    feedback = data.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        return str(feedback["blockReason"])
    return None


def generate_json(
    *,
    api_key: str,
    system_prompt: str,
    prompt: str,
    image: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Ask Gemini for a JSON object.

    *image* is ``{"mimeType": ..., "data": <base64>}`` and is sent inline
    after the text prompt. Raises GeminiError for transport/provider failures
    and ValueError when the reply holds no parseable JSON object.
    """
    cfg = resolve_gemini_settings()
    url = f"{cfg.base_url}/models/{cfg.model}:generateContent"

    parts: List[Dict[str, Any]] = [{"text": prompt}]
    if image:
        parts.append({"inlineData": {"mimeType": image["mimeType"], "data": image["data"]}})
    payload: Dict[str, Any] = {
        "systemInstruction": {"parts": [{"text": system_prompt}]},
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {
            "temperature": cfg.temperature,
            "responseMimeType": "application/json",
        },
    }
    headers = {
        "Content-Type": "application/json",
        "x-goog-api-key": api_key,
    }

    try:
        with httpx.Client(timeout=cfg.timeout, follow_redirects=True) as client:
            resp = client.post(url, headers=headers, json=payload)
    except httpx.HTTPError as exc:
        logger.warning("Gemini unreachable: %s", exc)
        raise GeminiError(f"Gemini unreachable: {exc}") from exc

    if resp.status_code >= 400:
        message = _extract_error_from_gemini_response(resp)
        logger.warning("Gemini call failed: %s", message)
        raise GeminiError(message)

    try:
        data = resp.json()
    except ValueError as exc:
        raise GeminiError("Gemini returned a non-JSON response") from exc

    content = _extract_text_from_gemini_response(data)
    if not content:
        reason = _blocked_reason(data)
        if reason:
            raise GeminiError(f"Gemini blocked the request: {reason}")
        raise ValueError("Gemini returned an empty answer")

    try:
        return parse_model_output_json(content)
    except ValueError:
        logger.warning("Gemini output parse failed: %s", content.replace("\n", " ")[:200])
        raise
