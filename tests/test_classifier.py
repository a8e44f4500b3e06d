from __future__ import annotations

import asyncio

import httpx
import pytest

from callscore.llm.errors import (
    LLMError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    error_for_status,
)
from callscore.scoring.classifier import ErrorKind, classify
from callscore.utils.json_guard import JSONValidationError


@pytest.mark.parametrize(
    "error",
    [
        LLMRateLimitError("slow down", status_code=429),
        LLMTimeoutError("took too long"),
        asyncio.TimeoutError(),
        httpx.ReadTimeout("read timed out"),
        RuntimeError("429 quota exceeded"),
        RuntimeError("Resource has been exhausted (e.g. check quota)."),
        Exception("Too Many Requests"),
        ValueError("rate limit reached for model"),
    ],
)
def test_capacity_failures_are_rate_limited(error: BaseException) -> None:
    assert classify(error) is ErrorKind.RATE_LIMITED


@pytest.mark.parametrize(
    "error",
    [
        LLMError("401 unauthorized", status_code=401),
        LLMResponseError("missing choices"),
        JSONValidationError("Missing keys: ['summary']"),
        KeyError("metricScores"),
        RuntimeError("invalid API key"),
    ],
)
def test_other_failures_are_not_retried(error: BaseException) -> None:
    assert classify(error) is ErrorKind.OTHER


def test_typed_error_wins_over_message_markers() -> None:
    # An auth failure whose body happens to mention quota stays non-retryable.
    assert classify(LLMError("403: quota project not set", status_code=403)) is ErrorKind.OTHER


@pytest.mark.parametrize(
    ("status_code", "expected"),
    [(429, LLMRateLimitError), (503, LLMRateLimitError), (504, LLMTimeoutError), (400, LLMError)],
)
def test_error_for_status_maps_codes(status_code: int, expected: type[LLMError]) -> None:
    error = error_for_status("OpenAI", status_code, "body")
    assert type(error) is expected
    assert error.status_code == status_code
