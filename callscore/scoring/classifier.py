from __future__ import annotations

import asyncio
from enum import Enum

import httpx

from callscore.llm.errors import LLMError, LLMRateLimitError, LLMTimeoutError


class ErrorKind(str, Enum):
    RATE_LIMITED = "RateLimited"
    OTHER = "Other"


# Closed marker set for failures raised outside the typed adapter boundary.
RATE_LIMIT_MARKERS = (
    "429",
    "quota",
    "resource has been exhausted",
    "too many requests",
    "rate limit",
)


def classify(error: BaseException) -> ErrorKind:
    """Decide whether a failure is transient capacity exhaustion.

    Only `RATE_LIMITED` failures are worth retrying or handing to the fallback
    oracle. Typed adapter errors are trusted over their message text.
    """
    if isinstance(error, (LLMRateLimitError, LLMTimeoutError)):
        return ErrorKind.RATE_LIMITED
    if isinstance(error, LLMError):
        return ErrorKind.OTHER
    if isinstance(error, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorKind.RATE_LIMITED

    message = str(error).lower()
    if any(marker in message for marker in RATE_LIMIT_MARKERS):
        return ErrorKind.RATE_LIMITED
    return ErrorKind.OTHER


def is_rate_limited(error: BaseException) -> bool:
    return classify(error) is ErrorKind.RATE_LIMITED
