"""Journal request/response schemas."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

TAG_MAX_LENGTH = 50


class JournalEntryUpsert(BaseModel):
    """Create or replace the entry for one journal day (today when omitted)."""

    mood_score: int = Field(ge=1, le=5)
    note: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    entry_date: Optional[date] = None

    @field_validator("note")
    @classmethod
    def strip_note(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        cleaned = []
        for tag in v:
            tag = (tag or "").strip()
            if not tag:
                continue
            if len(tag) > TAG_MAX_LENGTH:
                raise ValueError(f"tag longer than {TAG_MAX_LENGTH} characters")
            cleaned.append(tag)
        return list(dict.fromkeys(cleaned))


class JournalEntryListFilter(BaseModel):
    month: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}$")
    year: Optional[int] = Field(default=None, ge=1970, le=9999)
    limit: int = Field(default=31, ge=1, le=366)
    offset: int = Field(default=0, ge=0)


class DateRangeQuery(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def ordered(self) -> "DateRangeQuery":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class JournalEntryResponse(BaseModel):
    id: int
    entry_date: date
    mood_score: int
    mood_label: str
    note: Optional[str]
    tags: List[str]
    created_at: str
    updated_at: str
