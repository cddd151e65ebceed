from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional

# category value -> display label
MEMO_CATEGORIES = {
    "personal": "Personal",
    "work": "Work",
    "study": "Study",
    "idea": "Idea",
    "other": "Other",
}
ALL_CATEGORIES = "all"  # filter sentinel, never stored


class MemoForm(BaseModel):
    """What the user submits when creating or editing a memo."""
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    category: str
    tags: List[str] = Field(default_factory=list)
    summary: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("category")
    @classmethod
    def _known_category(cls, v: str) -> str:
        if v not in MEMO_CATEGORIES:
            raise ValueError(f"unknown category {v!r}")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, v):
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            return v
        return [t.strip() for t in v if isinstance(t, str) and t.strip()]


class Memo(BaseModel):
    """A memo as the store returns it."""
    model_config = ConfigDict(from_attributes=True, frozen=True)
    id: str
    title: str
    content: str
    category: str
    tags: List[str] = Field(default_factory=list)
    summary: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("summary")
    @classmethod
    def _blank_summary_is_absent(cls, v: Optional[str]) -> Optional[str]:
        return v if v and v.strip() else None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


class MemoList(BaseModel):
    items: List[Memo]


class SummaryAssign(BaseModel):
    summary: str = Field(min_length=1)
