# -*- coding: utf-8 -*-
"""Symptoms — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SymptomEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(None, description="Assigned by the server")
    date: Optional[str] = Field(None, description="ISO8601 timestamp; server fills it when missing")
    symptom: str = Field(..., min_length=1, description="e.g. 'bloating', 'heartburn'")
    severity: int = Field(5, ge=1, le=10)
    foods: List[str] = Field(default_factory=list, description="Foods eaten before the episode")
    notes: Optional[str] = None


class SymptomCreateRequest(BaseModel):
    symptom: SymptomEntry
