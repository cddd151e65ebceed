"""
HTTP gateways the client side talks through.

``HttpMemoStore`` is the remote store: it maps the ``/memos`` endpoints onto
``list/get/create/update/delete/set_summary`` and turns transport failures and
error statuses into the shared exception classes. ``SummaryClient`` calls the
summary endpoint.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from memoboard.memos.schemas import Memo, MemoForm
from memoboard.shared.config import settings
from memoboard.shared.errors import (
    MemoNotFoundError,
    MemoValidationError,
    ProviderError,
    StoreError,
    SummaryUnconfiguredError,
)

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> tuple[str, str | None]:
    """(message, code) from an error response; code is set for `err()`-style bodies."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}", None
    detail = data.get("detail") if isinstance(data, dict) else data
    if isinstance(detail, dict) and isinstance(detail.get("error"), dict):
        error = detail["error"]
        return str(error.get("message") or ""), error.get("code")
    return str(detail), None


def _error_message(response: httpx.Response) -> str:
    return _error_detail(response)[0]


class _Gateway:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.STORE_URL,
            timeout=timeout or settings.STORE_TIMEOUT,
            transport=transport,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()


class HttpMemoStore(_Gateway):
    """Remote store gateway over the ``/memos`` endpoints."""

    async def _send(self, method: str, url: str, json: Any = None) -> httpx.Response:
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise StoreError(f"{method} {url} failed: {e}") from e
        if response.status_code == 404:
            raise MemoNotFoundError(_error_message(response))
        if response.status_code in (400, 422):
            raise MemoValidationError(_error_message(response))
        if response.is_error:
            raise StoreError(f"{method} {url} returned {response.status_code}: {_error_message(response)}")
        return response

    @staticmethod
    def _memo(payload: Any) -> Memo:
        try:
            return Memo.model_validate(payload)
        except ValidationError as e:
            raise StoreError(f"store returned a malformed memo: {e}") from e

    async def list(self) -> list[Memo]:
        response = await self._send("GET", "/memos")
        return [self._memo(item) for item in response.json().get("items", [])]

    async def get(self, memo_id: str) -> Memo | None:
        try:
            response = await self._send("GET", f"/memos/{memo_id}")
        except MemoNotFoundError:
            return None
        return self._memo(response.json())

    async def create(self, form: MemoForm) -> Memo:
        response = await self._send("POST", "/memos", json=form.model_dump())
        return self._memo(response.json())

    async def update(self, memo_id: str, form: MemoForm) -> Memo:
        response = await self._send("PUT", f"/memos/{memo_id}", json=form.model_dump())
        return self._memo(response.json())

    async def delete(self, memo_id: str) -> None:
        await self._send("DELETE", f"/memos/{memo_id}")

    async def set_summary(self, memo_id: str, summary: str) -> Memo:
        response = await self._send("PUT", f"/memos/{memo_id}/summary", json={"summary": summary})
        return self._memo(response.json())


@dataclass(frozen=True)
class SummaryResult:
    summary: str
    memo: Memo | None
    cached: bool


class SummaryClient(_Gateway):
    """Client for ``POST /api/memos/summary``."""

    async def request_summary(self, content: str, memo_id: str) -> SummaryResult:
        try:
            response = await self._client.post(
                "/api/memos/summary", json={"content": content, "memoId": memo_id}
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"summary request failed: {e}") from e

        if response.status_code == 400:
            raise MemoValidationError(_error_message(response))
        if response.status_code == 404:
            raise MemoNotFoundError(_error_message(response))
        if response.is_error:
            if _error_detail(response)[1] == "unconfigured":
                raise SummaryUnconfiguredError(_error_message(response))
            raise ProviderError(_error_message(response))

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"summary endpoint returned a non-JSON body: {e}") from e
        if not isinstance(data, dict):
            raise ProviderError(f"summary endpoint returned an unexpected body: {data!r}")
        memo = data.get("memo")
        try:
            confirmed = Memo.model_validate(memo) if memo else None
        except ValidationError as e:
            raise ProviderError(f"summary endpoint returned a malformed memo: {e}") from e
        return SummaryResult(
            summary=str(data.get("summary") or "").strip(),
            memo=confirmed,
            cached=bool(data.get("cached")),
        )
