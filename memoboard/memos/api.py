# memoboard/memos/api.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from memoboard.shared.db import get_db
from memoboard.shared.errors import StoreError
from memoboard.shared.http import err
from memoboard.memos.schemas import Memo, MemoForm, MemoList, SummaryAssign
from memoboard.memos.service import (
    list_memos,
    get_memo,
    create_memo,
    update_memo,
    delete_memo,
    set_summary,
)

router = APIRouter(prefix="/memos", tags=["Memos"])


@router.get("", response_model=MemoList)
def list_all(db: Session = Depends(get_db)):
    try:
        return {"items": list_memos(db)}
    except StoreError as e:
        return err(str(e), code="store_failed", status=500)

@router.get("/{memo_id}", response_model=Memo)
def get_one(memo_id: str, db: Session = Depends(get_db)):
    memo = get_memo(db, memo_id)
    if not memo:
        raise HTTPException(404, "Memo not found")
    return memo

@router.post("", response_model=Memo, status_code=201)
def create(payload: MemoForm, db: Session = Depends(get_db)):
    try:
        return create_memo(db, payload)
    except StoreError as e:
        return err(str(e), code="store_failed", status=500)

@router.put("/{memo_id}", response_model=Memo)
def update(memo_id: str, payload: MemoForm, db: Session = Depends(get_db)):
    try:
        memo = update_memo(db, memo_id, payload)
    except StoreError as e:
        return err(str(e), code="store_failed", status=500)
    if not memo:
        raise HTTPException(404, "Memo not found")
    return memo

@router.delete("/{memo_id}", status_code=204)
def delete(memo_id: str, db: Session = Depends(get_db)):
    try:
        found = delete_memo(db, memo_id)
    except StoreError as e:
        return err(str(e), code="store_failed", status=500)
    if not found:
        raise HTTPException(404, "Memo not found")
    return

@router.put("/{memo_id}/summary", response_model=Memo)
def assign_summary(memo_id: str, payload: SummaryAssign, db: Session = Depends(get_db)):
    try:
        summary = payload.summary.strip()
        if not summary:
            return err("Summary must not be blank")
        memo = set_summary(db, memo_id, summary)
    except StoreError as e:
        return err(str(e), code="store_failed", status=500)
    if not memo:
        raise HTTPException(404, "Memo not found")
    return memo
