"""
Optimistic mutation engine for the memo list.

The board keeps two lists:

* ``canonical`` - what the store last confirmed (refreshed after every mutation)
* ``optimistic`` - ``canonical`` folded through the still in-flight intents

``optimistic`` is never edited directly. Every state transition (submit,
settle, refresh) rebuilds it with :func:`fold`, so a failed mutation simply
disappears from the view once its intent is settled and the store is re-read.

All local changes happen synchronously between awaits; the only suspension
points are the store calls themselves.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Protocol, Union

from pydantic import ValidationError

from memoboard.client.projection import MemoFilters, MemoStats, project
from memoboard.memos.schemas import Memo, MemoForm
from memoboard.shared.errors import MemoboardError, MemoNotFoundError, MemoValidationError

logger = logging.getLogger(__name__)

TEMP_PREFIX = "temp-"


def temp_id() -> str:
    return f"{TEMP_PREFIX}{uuid.uuid4().hex}"


def is_temp_id(memo_id: str) -> bool:
    return memo_id.startswith(TEMP_PREFIX)


@dataclass(frozen=True)
class CreateIntent:
    memo: Memo


@dataclass(frozen=True)
class UpdateIntent:
    memo: Memo


@dataclass(frozen=True)
class DeleteIntent:
    memo_id: str


MutationIntent = Union[CreateIntent, UpdateIntent, DeleteIntent]


def apply_intent(state: list[Memo], intent: MutationIntent) -> list[Memo]:
    if isinstance(intent, CreateIntent):
        return [intent.memo, *state]
    if isinstance(intent, UpdateIntent):
        return [intent.memo if m.id == intent.memo.id else m for m in state]
    if isinstance(intent, DeleteIntent):
        return [m for m in state if m.id != intent.memo_id]
    raise TypeError(f"unknown mutation intent: {intent!r}")


def fold(canonical: Iterable[Memo], pending: Iterable[MutationIntent]) -> list[Memo]:
    """Apply pending intents to canonical state in submission order."""
    state = list(canonical)
    for intent in pending:
        state = apply_intent(state, intent)
    return state


def _dedupe(memos: Iterable[Memo]) -> list[Memo]:
    seen: set[str] = set()
    out = []
    for memo in memos:
        if memo.id not in seen:
            seen.add(memo.id)
            out.append(memo)
    return out


def _now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_form(form: MemoForm | dict[str, Any]) -> MemoForm:
    if isinstance(form, MemoForm):
        return form
    try:
        return MemoForm.model_validate(form)
    except ValidationError as e:
        raise MemoValidationError(str(e)) from e


class MemoStore(Protocol):
    async def list(self) -> list[Memo]: ...
    async def create(self, form: MemoForm) -> Memo: ...
    async def update(self, memo_id: str, form: MemoForm) -> Memo: ...
    async def delete(self, memo_id: str) -> None: ...


Listener = Callable[["MemoBoard"], None]


class MemoBoard:
    """Memo list with optimistic create/update/delete against a remote store."""

    def __init__(self, store: MemoStore, initial: Iterable[Memo] = ()):
        self._store = store
        self._canonical: list[Memo] = _dedupe(initial)
        self._pending: list[MutationIntent] = []
        self._optimistic: list[Memo] = list(self._canonical)
        self._filters = MemoFilters()
        self._listeners: list[Listener] = []
        self._refresh_seq = 0
        self._refreshing = 0

    # -- state ---------------------------------------------------------------

    @property
    def canonical(self) -> list[Memo]:
        return list(self._canonical)

    @property
    def optimistic(self) -> list[Memo]:
        return list(self._optimistic)

    @property
    def pending(self) -> tuple[MutationIntent, ...]:
        return tuple(self._pending)

    @property
    def loading(self) -> bool:
        return bool(self._pending) or self._refreshing > 0

    @property
    def search_query(self) -> str:
        return self._filters.query

    @property
    def selected_category(self) -> str:
        return self._filters.category

    @property
    def memos(self) -> list[Memo]:
        """The optimistic view after category filter and search."""
        visible, _ = project(self._optimistic, self._canonical, self._filters)
        return visible

    @property
    def stats(self) -> MemoStats:
        _, stats = project(self._optimistic, self._canonical, self._filters)
        return stats

    def get_by_id(self, memo_id: str) -> Memo | None:
        return next((m for m in self._canonical if m.id == memo_id), None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` after every view recomputation; returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def search(self, query: str) -> None:
        self._filters = MemoFilters(query=query, category=self._filters.category)
        self._notify()

    def filter_by_category(self, category: str) -> None:
        self._filters = MemoFilters(query=self._filters.query, category=category)
        self._notify()

    # -- transitions ---------------------------------------------------------

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _recompute(self) -> None:
        self._optimistic = fold(self._canonical, self._pending)
        self._notify()

    def _submit(self, intent: MutationIntent) -> None:
        self._pending.append(intent)
        self._recompute()

    def _settle(self, intent: MutationIntent, commit: Callable[[], None] | None = None) -> None:
        """Drop `intent` and apply `commit` to canonical state in one step."""
        self._pending = [p for p in self._pending if p is not intent]
        if commit is not None:
            commit()
        self._recompute()

    def _upsert(self, memo: Memo) -> None:
        if any(m.id == memo.id for m in self._canonical):
            self._canonical = [memo if m.id == memo.id else m for m in self._canonical]
        else:
            self._canonical = [memo, *self._canonical]

    def _replace(self, memo: Memo) -> None:
        self._canonical = [memo if m.id == memo.id else m for m in self._canonical]

    def _remove(self, memo_id: str) -> None:
        self._canonical = [m for m in self._canonical if m.id != memo_id]

    def apply_confirmed(self, memo: Memo) -> None:
        """Take a store-confirmed copy of an existing memo (e.g. one that just got its summary)."""
        if self.get_by_id(memo.id) is None:
            return
        # a list() already in flight was read before this confirmation
        self._refresh_seq += 1
        self._replace(memo)
        self._recompute()

    async def refresh(self) -> list[Memo]:
        """Reload canonical state from the store. Responses older than the latest request are dropped."""
        self._refresh_seq += 1
        seq = self._refresh_seq
        self._refreshing += 1
        try:
            fresh = await self._store.list()
        finally:
            self._refreshing -= 1
        if seq != self._refresh_seq:
            logger.debug("dropping stale refresh #%d (latest is #%d)", seq, self._refresh_seq)
            return self.canonical
        fresh = _dedupe(fresh)
        if any(isinstance(p, CreateIntent) for p in self._pending):
            # a new id may belong to a create whose response is still on its way;
            # hold new ids back until that create settles and refreshes again
            known = {m.id for m in self._canonical}
            held = [m.id for m in fresh if m.id not in known]
            if held:
                logger.debug("holding back %d new memo(s) while creates are in flight", len(held))
                fresh = [m for m in fresh if m.id in known]
        self._canonical = fresh
        self._recompute()
        return self.canonical

    async def _reconcile(self) -> None:
        try:
            await self.refresh()
        except MemoboardError:
            logger.exception("refresh after mutation failed; keeping local canonical state")

    async def _run(
        self,
        intent: MutationIntent,
        call: Callable[[], Awaitable[Any]],
        commit: Callable[[Any], None],
        what: str,
    ) -> Any:
        self._submit(intent)
        try:
            result = await call()
        except asyncio.CancelledError:
            self._settle(intent)
            raise
        except Exception as e:
            logger.warning("%s failed: %s", what, e)
            self._settle(intent)
            await self._reconcile()
            raise
        self._settle(intent, lambda: commit(result))
        await self._reconcile()
        return result

    # -- mutations -----------------------------------------------------------

    async def create(self, form: MemoForm | dict[str, Any]) -> Memo:
        form = coerce_form(form)
        now = _now()
        speculative = Memo(
            id=temp_id(),
            title=form.title,
            content=form.content,
            category=form.category,
            tags=list(form.tags),
            summary=form.summary,
            created_at=now,
            updated_at=now,
        )
        return await self._run(
            CreateIntent(speculative),
            lambda: self._store.create(form),
            self._upsert,
            f"create memo {speculative.id}",
        )

    async def update(self, memo_id: str, form: MemoForm | dict[str, Any]) -> Memo:
        form = coerce_form(form)
        existing = self.get_by_id(memo_id)
        if existing is None:
            raise MemoNotFoundError(f"Memo {memo_id} not found")
        # build on what the user currently sees, which may itself be speculative
        base = next((m for m in self._optimistic if m.id == memo_id), existing)
        changes: dict[str, Any] = {
            "title": form.title,
            "content": form.content,
            "category": form.category,
            "tags": list(form.tags),
            "updated_at": _now(),
        }
        if form.summary is not None:
            changes["summary"] = form.summary.strip() or None
        speculative = base.model_copy(update=changes)
        return await self._run(
            UpdateIntent(speculative),
            lambda: self._store.update(memo_id, form),
            self._replace,
            f"update memo {memo_id}",
        )

    async def delete(self, memo_id: str) -> None:
        await self._run(
            DeleteIntent(memo_id),
            lambda: self._store.delete(memo_id),
            lambda _: self._remove(memo_id),
            f"delete memo {memo_id}",
        )
