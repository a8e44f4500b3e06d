from __future__ import annotations


class LLMError(RuntimeError):
    """Base failure raised by every language-model adapter.

    Adapters translate transport and provider failures into this hierarchy so
    callers can branch on the type instead of inspecting message text.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LLMRateLimitError(LLMError):
    """Provider signalled capacity or quota exhaustion (429, overloaded)."""


class LLMTimeoutError(LLMError):
    """The call did not resolve within its time budget."""


class LLMResponseError(LLMError):
    """The provider answered, but the payload is missing or malformed."""


# Status codes that mean "come back later" rather than "this request is wrong".
CAPACITY_STATUS_CODES = frozenset({429, 503})


def error_for_status(provider: str, status_code: int, body: str) -> LLMError:
    """Map a non-200 provider response onto the typed error hierarchy."""
    message = f"{provider} request failed with status={status_code}: {body[:500]}"
    if status_code in CAPACITY_STATUS_CODES:
        return LLMRateLimitError(message, status_code=status_code)
    if status_code in {408, 504}:
        return LLMTimeoutError(message, status_code=status_code)
    return LLMError(message, status_code=status_code)
