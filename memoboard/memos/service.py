import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError

from memoboard.memos.models import Memo
from memoboard.memos.schemas import MemoForm
from memoboard.shared.errors import StoreError

logger = logging.getLogger(__name__)


def _utc(ts: datetime) -> datetime:
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts

def _next_updated_at(prev: datetime | None) -> datetime:
    """Now, or one microsecond past `prev` when the clock has not moved."""
    now = datetime.now(timezone.utc)
    if prev is not None and now <= _utc(prev):
        return _utc(prev) + timedelta(microseconds=1)
    return now

def _commit(db: Session, what: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("store commit failed (%s): %s", what, e)
        raise StoreError(f"failed to {what}") from e


def list_memos(db: Session) -> list[Memo]:
    stmt = select(Memo).order_by(desc(Memo.created_at), desc(Memo.id))
    try:
        return list(db.scalars(stmt).all())
    except SQLAlchemyError as e:
        raise StoreError("failed to list memos") from e

def get_memo(db: Session, memo_id: str) -> Memo | None:
    try:
        return db.get(Memo, memo_id)
    except SQLAlchemyError as e:
        raise StoreError(f"failed to load memo {memo_id}") from e

def create_memo(db: Session, form: MemoForm) -> Memo:
    now = datetime.now(timezone.utc)
    memo = Memo(
        title=form.title,
        content=form.content,
        category=form.category,
        summary=(form.summary or "").strip() or None,
        created_at=now,
        updated_at=now,
    )
    memo.tags = form.tags
    db.add(memo)
    _commit(db, "create memo")
    db.refresh(memo)
    return memo

def update_memo(db: Session, memo_id: str, form: MemoForm) -> Memo | None:
    memo = get_memo(db, memo_id)
    if not memo:
        return None
    memo.title = form.title
    memo.content = form.content
    memo.category = form.category
    memo.tags = form.tags
    if form.summary is not None:
        memo.summary = form.summary.strip() or None
    memo.updated_at = _next_updated_at(memo.updated_at)
    _commit(db, f"update memo {memo_id}")
    db.refresh(memo)
    return memo

def delete_memo(db: Session, memo_id: str) -> bool:
    memo = get_memo(db, memo_id)
    if not memo:
        return False
    db.delete(memo)
    _commit(db, f"delete memo {memo_id}")
    return True

def set_summary(db: Session, memo_id: str, summary: str) -> Memo | None:
    memo = get_memo(db, memo_id)
    if not memo:
        return None
    memo.summary = summary
    memo.updated_at = _next_updated_at(memo.updated_at)
    _commit(db, f"store summary for memo {memo_id}")
    db.refresh(memo)
    return memo
