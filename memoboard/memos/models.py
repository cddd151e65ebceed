from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from memoboard.shared.db import Base
import uuid, json

def _id32() -> str:
    return uuid.uuid4().hex  # 32 chars

def _now() -> datetime:
    return datetime.now(timezone.utc)

class Memo(Base):
    __tablename__ = "memos"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(String(32), index=True)
    # store tags as JSON text for SQLite; service will dump/load list[str]
    tags_json: Mapped[str] = mapped_column(Text, default="[]")
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    @property
    def tags(self) -> list[str]:
        try:
            return json.loads(self.tags_json or "[]")
        except ValueError:
            return []

    @tags.setter
    def tags(self, val: list[str]):
        self.tags_json = json.dumps(val or [], ensure_ascii=False)
