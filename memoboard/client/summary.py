"""
Summary cache controller for the memo that is currently open.

Only one memo is open at a time, so the controller tracks a single
``(current_id, state)`` pair instead of one state machine per memo::

    NO_SUMMARY -> SUMMARY_LOADING -> SUMMARY_READY
                                  -> SUMMARY_ERROR

Lookups go memo.summary -> session cache -> summary endpoint. The endpoint
itself returns a stored summary when the record has one, so the provider runs
at most once per persisted memo.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Protocol

from memoboard.client.gateway import SummaryResult
from memoboard.memos.schemas import Memo
from memoboard.shared.errors import MemoboardError

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Something went wrong while loading the summary."


class SummaryState(str, Enum):
    NO_SUMMARY = "no_summary"
    SUMMARY_LOADING = "summary_loading"
    SUMMARY_READY = "summary_ready"
    SUMMARY_ERROR = "summary_error"


class SummarySource(Protocol):
    async def request_summary(self, content: str, memo_id: str) -> SummaryResult: ...


class ConfirmedMemoSink(Protocol):
    def apply_confirmed(self, memo: Memo) -> None: ...


class SessionSummaryCache:
    """Volatile memo id -> summary map; lives exactly as long as its owner."""

    def __init__(self):
        self._items: dict[str, str] = {}

    def get(self, memo_id: str) -> str | None:
        return self._items.get(memo_id)

    def put(self, memo_id: str, summary: str) -> None:
        if summary and summary.strip():
            self._items[memo_id] = summary

    def discard(self, memo_id: str) -> None:
        self._items.pop(memo_id, None)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, memo_id: object) -> bool:
        return memo_id in self._items

    def __len__(self) -> int:
        return len(self._items)


class SummaryController:
    def __init__(
        self,
        source: SummarySource,
        board: ConfirmedMemoSink | None = None,
        cache: SessionSummaryCache | None = None,
    ):
        self._source = source
        self._board = board
        self.cache = cache if cache is not None else SessionSummaryCache()
        self._current_id: str | None = None
        self._state = SummaryState.NO_SUMMARY
        self._summary: str | None = None
        self._error: str | None = None
        self._attempt = 0

    @property
    def current_id(self) -> str | None:
        return self._current_id

    @property
    def state(self) -> SummaryState:
        return self._state

    @property
    def summary(self) -> str | None:
        return self._summary

    @property
    def error(self) -> str | None:
        return self._error

    def _set(self, state: SummaryState, summary: str | None = None, error: str | None = None) -> None:
        self._state = state
        self._summary = summary
        self._error = error

    def _fail(self, attempt: int) -> None:
        if attempt == self._attempt:
            self._set(SummaryState.SUMMARY_ERROR, error=ERROR_MESSAGE)

    def close(self) -> None:
        """The viewer was closed: forget display state so the next open starts over."""
        self._attempt += 1  # in-flight responses no longer own the display
        self._set(SummaryState.NO_SUMMARY)

    async def open(self, memo: Memo) -> str | None:
        """Show the summary of `memo`, fetching it only when nothing is known locally."""
        if memo.id == self._current_id and self._state is not SummaryState.NO_SUMMARY:
            return self._summary

        self._current_id = memo.id
        known = memo.summary if memo.summary and memo.summary.strip() else self.cache.get(memo.id)
        if known:
            self._set(SummaryState.SUMMARY_READY, summary=known)
            return known

        self._attempt += 1
        attempt = self._attempt
        self._set(SummaryState.SUMMARY_LOADING)
        try:
            result = await self._source.request_summary(memo.content, memo.id)
        except MemoboardError as e:
            logger.warning("summary for memo %s failed: %s", memo.id, e)
            self._fail(attempt)
            return None
        except asyncio.CancelledError:
            if attempt == self._attempt:
                self._set(SummaryState.NO_SUMMARY)
            raise
        except Exception:
            logger.exception("unexpected failure loading summary for memo %s", memo.id)
            self._fail(attempt)
            raise

        if result.memo is not None and self._board is not None:
            self._board.apply_confirmed(result.memo)
        if not result.summary:
            logger.warning("summary for memo %s came back empty", memo.id)
            self._fail(attempt)
            return None

        self.cache.put(memo.id, result.summary)
        logger.info("summary for memo %s ready (cached=%s)", memo.id, result.cached)
        if attempt == self._attempt:
            self._set(SummaryState.SUMMARY_READY, summary=result.summary)
        return result.summary
