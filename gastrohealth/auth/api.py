# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from ..api_keys.storage import has_api_key
from ..profile.storage import get_profile
from ..symptoms.storage import list_symptoms
from .models import LoginRequest, LoginResponse, MeResponse, MessageResponse, RegisterRequest, UserData
from .security import create_access_token, get_current_user, hash_password, verify_password
from .storage import create_user, get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


def _snapshot(user: Dict[str, Any]) -> Dict[str, Any]:
    """User data plus the full symptom log, as returned by login and /me."""
    return {
        "user": UserData(
            email=user["email"],
            profile=get_profile(user["id"]),
            has_api_key=has_api_key(user["id"]),
        ),
        "symptoms": list_symptoms(user["id"]),
    }


@router.post("/register", response_model=MessageResponse, summary="Register a new user")
def register(request: RegisterRequest):
    if get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = create_user(email=request.email, password_hash=hash_password(request.password))
    logger.info("Registered user %s", user["id"])
    return MessageResponse(message="Registration successful. Please log in.")


@router.post("/login", response_model=LoginResponse, summary="Login")
def login(request: LoginRequest):
    user = get_user_by_email(request.email)
    if not user or not verify_password(request.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(user_id=user["id"], email=user["email"])
    return LoginResponse(token=token, **_snapshot(user))


@router.get("/me", response_model=MeResponse, summary="Get current user and symptom log")
def me(user: dict = Depends(get_current_user)):
    return MeResponse(**_snapshot(user))
