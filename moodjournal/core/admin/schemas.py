"""Admin console request schemas."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class UserListQuery(BaseModel):
    search: Optional[str] = Field(default=None, max_length=255)
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=100)


class AIUsageQuery(BaseModel):
    user_id: Optional[int] = None
    provider: Optional[str] = Field(default=None, max_length=32)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=50, ge=1, le=100)


class AIUsageCreate(BaseModel):
    provider: str = Field(min_length=1, max_length=32)
    endpoint: str = Field(min_length=1, max_length=128)
    user_id: Optional[int] = None
    prompt_tokens: Optional[int] = Field(default=None, ge=0)
    response_tokens: Optional[int] = Field(default=None, ge=0)
    total_tokens: Optional[int] = Field(default=None, ge=0)
    success: bool = True
    error_message: Optional[str] = None
    response_time_ms: Optional[int] = Field(default=None, ge=0)
