"""Exception hierarchy shared by the store, the summary service and the client.

Every failure raised by memoboard derives from :class:`MemoboardError`, so a
caller can catch one base class and still tell the categories apart.
"""


class MemoboardError(Exception):
    """Base exception for memoboard failures."""


class MemoValidationError(MemoboardError):
    """Raised when required memo fields are missing or invalid."""


class MemoNotFoundError(MemoboardError):
    """Raised when a memo identifier is unknown to the store."""


class StoreError(MemoboardError):
    """Raised when the remote store fails to persist or load memos."""


class SummaryError(MemoboardError):
    """Base class for summary generation failures."""


class SummaryUnconfiguredError(SummaryError):
    """Raised when no summarization provider credentials are configured."""


class ProviderError(SummaryError):
    """Raised when the summarization provider call fails."""
