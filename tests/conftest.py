"""
Shared pytest fixtures.

The application runs against an in-memory SQLite database and a counting
fake summarizer, both injected through FastAPI dependency overrides.
"""
import asyncio
import os
from datetime import datetime, timedelta, timezone
from itertools import count

os.environ.setdefault("DB_URL", "sqlite://")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from memoboard.main import app
from memoboard.memos.schemas import Memo, MemoForm
from memoboard.shared.db import Base, get_db
from memoboard.shared.errors import MemoNotFoundError, StoreError
from memoboard.summary.api import get_flights
from memoboard.summary.provider import get_summarizer
from memoboard.summary.service import SingleFlight

# import models so they register with Base.metadata
from memoboard.memos import models as memos_models  # noqa: F401


class FakeSummarizer:
    """Counts calls; can be held on a gate or made to fail."""

    def __init__(self, reply: str = "Shopping list: milk and eggs."):
        self.reply = reply
        self.calls: list[str] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def summarize(self, text: str) -> str:
        self.calls.append(text)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply


class FakeStore:
    """
    In-memory stand-in for the remote store used by engine tests.

    `gates[op]` holds a list of events; each call of `op` waits on the next one.
    Ops listed in `fail` raise StoreError after their gate opens.
    """

    def __init__(self, memos=(), log: list | None = None):
        self.rows: dict[str, Memo] = {m.id: m for m in memos}
        self.fail: set[str] = set()
        self.gates: dict[str, list[asyncio.Event]] = {}
        self.calls: list[str] = []
        self.log = log if log is not None else []
        self.next_ids: list[str] = []
        self._ids = count(1)
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(days=1)

    def hold(self, op: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates.setdefault(op, []).append(gate)
        return gate

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _ordered(self) -> list[Memo]:
        return sorted(self.rows.values(), key=lambda m: m.created_at, reverse=True)

    async def _enter(self, op: str) -> None:
        self.calls.append(op)
        self.log.append(op)
        gates = self.gates.get(op)
        if gates:
            await gates.pop(0).wait()
        if op in self.fail:
            raise StoreError(f"{op} failed")

    async def list(self) -> list[Memo]:
        snapshot = self._ordered()
        await self._enter("list")
        return snapshot

    async def create(self, form: MemoForm) -> Memo:
        await self._enter("create")
        now = self._tick()
        memo_id = self.next_ids.pop(0) if self.next_ids else f"m{next(self._ids)}"
        memo = Memo(
            id=memo_id,
            title=form.title,
            content=form.content,
            category=form.category,
            tags=form.tags,
            summary=form.summary,
            created_at=now,
            updated_at=now,
        )
        self.rows[memo.id] = memo
        return memo

    async def update(self, memo_id: str, form: MemoForm) -> Memo:
        await self._enter("update")
        if memo_id not in self.rows:
            raise MemoNotFoundError(memo_id)
        changes = {
            "title": form.title,
            "content": form.content,
            "category": form.category,
            "tags": form.tags,
            "updated_at": self._tick(),
        }
        if form.summary is not None:
            changes["summary"] = form.summary
        memo = self.rows[memo_id].model_copy(update=changes)
        self.rows[memo_id] = memo
        return memo

    async def delete(self, memo_id: str) -> None:
        await self._enter("delete")
        if self.rows.pop(memo_id, None) is None:
            raise MemoNotFoundError(memo_id)


def make_memo(memo_id: str, title: str = "Untitled", *, category: str = "work", content: str = "",
              tags=(), summary=None, day: int = 1) -> Memo:
    ts = datetime(2026, 1, day, 9, 0, tzinfo=timezone.utc)
    return Memo(
        id=memo_id,
        title=title,
        content=content or f"{title} body",
        category=category,
        tags=list(tags),
        summary=summary,
        created_at=ts,
        updated_at=ts,
    )


@pytest.fixture
def db_sessionmaker():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def db_session(db_sessionmaker):
    db = db_sessionmaker()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def summarizer():
    return FakeSummarizer()


@pytest.fixture
def flights():
    return SingleFlight()


@pytest.fixture
def app_overrides(db_sessionmaker, summarizer, flights):
    def _get_db():
        db = db_sessionmaker()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_summarizer] = lambda: summarizer
    app.dependency_overrides[get_flights] = lambda: flights
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_overrides):
    return TestClient(app_overrides)


@pytest.fixture
def asgi_transport(app_overrides):
    return httpx.ASGITransport(app=app_overrides)
