"""Summarization gateway: one short sentence per memo from an OpenAI-compatible chat API."""
import logging

from openai import AsyncOpenAI, OpenAIError

from memoboard.shared.config import settings
from memoboard.shared.errors import ProviderError, SummaryUnconfiguredError

logger = logging.getLogger(__name__)

INSTRUCTION = (
    "Summarize the following memo in one concise sentence of at most {max_chars} characters. "
    "Keep only the key point and answer in the same language as the memo.\n\n"
    "Memo:\n{content}\n\nSummary:"
)


class OpenAISummarizer:
    """
    Summarization provider using the OpenAI chat completions API.

    Requires OPENAI_API_KEY; without it `summarize` raises SummaryUnconfiguredError
    so the caller can tell a missing setup apart from a failing provider.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        max_chars: int | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.SUMMARY_MODEL
        self.max_tokens = max_tokens or settings.SUMMARY_MAX_TOKENS
        self.temperature = settings.SUMMARY_TEMPERATURE if temperature is None else temperature
        self.max_chars = max_chars or settings.SUMMARY_MAX_CHARS
        self._client: AsyncOpenAI | None = None
        if self.api_key:
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=base_url or settings.OPENAI_BASE_URL)

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def summarize(self, text: str) -> str:
        if self._client is None:
            raise SummaryUnconfiguredError("summarization provider is not configured")

        prompt = INSTRUCTION.format(max_chars=self.max_chars, content=text)
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.exception("summarization request failed")
            raise ProviderError(f"summarization provider failed: {e}") from e

        choice = response.choices[0] if response.choices else None
        summary = ((choice.message.content if choice else None) or "").strip()
        if not summary:
            raise ProviderError("summarization provider returned an empty summary")
        return summary


# FastAPI dep; tests override it with a fake
_default: OpenAISummarizer | None = None

def get_summarizer() -> OpenAISummarizer:
    global _default
    if _default is None:
        _default = OpenAISummarizer()
    return _default
