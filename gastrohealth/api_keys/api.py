# -*- coding: utf-8 -*-
"""API keys — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth.models import MessageResponse
from ..auth.security import get_current_user
from .models import ApiKeySaveRequest
from .storage import save_api_key

router = APIRouter(prefix="/api", tags=["API Keys"])


@router.post("/api-key", response_model=MessageResponse, summary="Store the caller's Gemini API key")
def save_key(request: ApiKeySaveRequest, user: dict = Depends(get_current_user)):
    save_api_key(user_id=user["id"], api_key=request.api_key)
    return MessageResponse(message="API key saved.")
