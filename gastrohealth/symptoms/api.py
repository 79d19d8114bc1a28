# -*- coding: utf-8 -*-
"""Symptoms — API endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ..auth.security import get_current_user
from .models import SymptomCreateRequest, SymptomEntry
from .storage import append_symptom

router = APIRouter(prefix="/api", tags=["Symptoms"])


@router.post("/symptoms", response_model=List[SymptomEntry], summary="Append a symptom entry")
def add_symptom(request: SymptomCreateRequest, user: dict = Depends(get_current_user)):
    # Client-supplied ids are ignored; the server owns entry identity.
    entry = request.symptom.model_dump(by_alias=True, mode="json", exclude={"id"})
    return append_symptom(user["id"], entry)
