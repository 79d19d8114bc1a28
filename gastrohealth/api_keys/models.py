# -*- coding: utf-8 -*-
"""API keys — models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ApiKeySaveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    api_key: str = Field(..., alias="apiKey", min_length=1, max_length=256)
