# memoboard/summary/api.py
import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.orm import Session

from memoboard.shared.db import get_db
from memoboard.shared.errors import MemoNotFoundError, SummaryError, SummaryUnconfiguredError, StoreError
from memoboard.shared.http import err
from memoboard.memos.schemas import Memo
from memoboard.summary.provider import get_summarizer
from memoboard.summary.service import SingleFlight, generate_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/memos", tags=["Summary"])

# one registry per process; lives as long as the router module
flights = SingleFlight()

def get_flights() -> SingleFlight:
    return flights

class SummaryIn(BaseModel):
    content: str = Field(min_length=1)
    memo_id: str = Field(alias="memoId", min_length=1)

class SummaryOut(BaseModel):
    summary: str
    memo: Memo
    cached: bool

def _invalid_message(e: ValueError) -> str:
    fields = [x["loc"][0] for x in e.errors() if x.get("loc")] if isinstance(e, ValidationError) else []
    if fields and "content" not in fields:
        return "Memo ID is required"
    return "Content is required"

@router.post("/summary", response_model=SummaryOut)
async def api_summary(
    request: Request,
    db: Session = Depends(get_db),
    summarizer=Depends(get_summarizer),
    registry: SingleFlight = Depends(get_flights),
):
    try:
        inb = SummaryIn.model_validate(await request.json())
    except ValueError as e:
        # malformed JSON lands here too (JSONDecodeError is a ValueError)
        return err(_invalid_message(e), code="invalid_input", status=400)

    try:
        out = await generate_summary(db, inb.memo_id, inb.content, summarizer, registry)
    except MemoNotFoundError:
        return err("Memo not found", code="not_found", status=404)
    except SummaryUnconfiguredError as e:
        return err(str(e), code="unconfigured", status=500)
    except (SummaryError, StoreError) as e:
        logger.error("failed to generate summary for memo %s: %s", inb.memo_id, e)
        return err("Failed to generate summary", code="summary_failed", status=500)
    except Exception:
        logger.exception("unexpected failure summarizing memo %s", inb.memo_id)
        return err("Failed to generate summary", code="summary_failed", status=500)
    return SummaryOut(summary=out.summary, memo=out.memo, cached=out.cached)
