"""Response models for the thoughts API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class BranchesResponse(BaseModel):
    branches: dict[str, int] = Field(default_factory=dict, description="Branch id -> thoughts recorded on it")


class HistoryResponse(BaseModel):
    thoughts: list[dict[str, Any]] = Field(default_factory=list)
    count: int = 0
