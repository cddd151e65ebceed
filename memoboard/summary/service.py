"""
Server side of summary generation.

A memo gets at most one persisted summary: a stored non-empty summary is
returned as-is (``cached=True``) and the provider is only called when the
record has none. Concurrent first requests for the same memo inside one
process share a single provider call through :class:`SingleFlight`; requests
served by different processes are not coordinated and the last write wins.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from sqlalchemy.orm import Session

from memoboard.memos.schemas import Memo
from memoboard.memos.service import get_memo, set_summary
from memoboard.shared.errors import MemoNotFoundError

logger = logging.getLogger(__name__)


class Summarizer(Protocol):
    async def summarize(self, text: str) -> str: ...


@dataclass(frozen=True)
class SummaryOutcome:
    summary: str
    memo: Memo
    cached: bool


class SingleFlight:
    """Collapses concurrent calls for the same key into one underlying call."""

    def __init__(self):
        self._inflight: dict[str, asyncio.Future] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._inflight

    async def run(self, key: str, call: Callable[[], Awaitable[Memo]]) -> tuple[Memo, bool]:
        """Return ``(result, joined)``; ``joined`` is True when another caller did the work."""
        pending = self._inflight.get(key)
        if pending is not None:
            logger.info("joining in-flight summary for memo %s", key)
            return await asyncio.shield(pending), True

        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[key] = fut
        try:
            result = await call()
        except asyncio.CancelledError:
            fut.cancel()
            raise
        except Exception as e:
            fut.set_exception(e)
            fut.exception()  # retrieved here; joiners still see it raised
            raise
        else:
            fut.set_result(result)
            return result, False
        finally:
            self._inflight.pop(key, None)


async def generate_summary(
    db: Session,
    memo_id: str,
    content: str,
    summarizer: Summarizer,
    flights: SingleFlight,
) -> SummaryOutcome:
    existing = get_memo(db, memo_id)
    if existing is None:
        raise MemoNotFoundError(f"Memo {memo_id} not found")

    if existing.summary and existing.summary.strip():
        logger.info("summary cache hit for memo %s", memo_id)
        return SummaryOutcome(existing.summary, Memo.model_validate(existing), cached=True)

    async def compute() -> Memo:
        summary = (await summarizer.summarize(content)).strip()
        updated = set_summary(db, memo_id, summary)
        if updated is None:
            # deleted while the provider was working
            raise MemoNotFoundError(f"Memo {memo_id} not found")
        logger.info("stored fresh summary for memo %s", memo_id)
        return Memo.model_validate(updated)

    memo, joined = await flights.run(memo_id, compute)
    return SummaryOutcome(memo.summary or "", memo, cached=joined)
