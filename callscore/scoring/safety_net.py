"""Outer boundary of the scoring pipeline.

`recover` is the only place where failures are absorbed; `assemble` is the
only place where the transcript fields are attached to a report.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from callscore.scoring.errors import AnalysisError
from callscore.scoring.models import (
    AnalysisReport,
    CallCategory,
    ConversionReadiness,
    DeepAnalysis,
    MetricScore,
    categorise,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ACCURACY_PRETRANSCRIBED = "N/A (pre-transcribed)"
ACCURACY_SYSTEM_ERROR = "System Error"
MISSING_TRANSCRIPT = "[No transcript provided]"
FAILURE_PREVIEW_CHARS = 100
FAILURE_DETAIL_CHARS = 500


class Outcome(str, Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"
    ERROR = "error"


async def recover(
    operation: Callable[[], Awaitable[T]],
    on_failure: Callable[[Exception], T],
) -> T:
    """Run `operation`, converting any failure into `on_failure(exc)`.

    Never raises for `Exception` subclasses. Task cancellation is not an
    `Exception` and still propagates to the caller.
    """
    try:
        return await operation()
    except AnalysisError as exc:
        logger.warning("Scoring pipeline failed kind=%s error=%s", exc.kind, exc)
        return on_failure(exc)
    except Exception as exc:  # noqa: BLE001 - total-function boundary
        logger.exception("Scoring pipeline crashed kind=%s", failure_kind(exc))
        return on_failure(exc)


def failure_kind(exc: BaseException) -> str:
    if isinstance(exc, AnalysisError):
        return exc.kind
    return "SystemError"


def render_failure(exc: BaseException, limit: int | None = None) -> str:
    """Human-readable failure text, labelled with its taxonomy kind."""
    message = str(exc).strip() or type(exc).__name__
    rendered = f"{failure_kind(exc)}: {message}"
    if limit is not None and len(rendered) > limit:
        return rendered[:limit] + "..."
    return rendered


def error_analysis(exc: BaseException) -> DeepAnalysis:
    """Terminal placeholder analysis for an unrecovered failure."""
    detail = render_failure(exc, limit=FAILURE_DETAIL_CHARS)
    preview = render_failure(exc, limit=FAILURE_PREVIEW_CHARS)
    return DeepAnalysis(
        overall_score=0.0,
        call_categorisation=CallCategory.ERROR.value,
        summary=(
            f"A critical system error occurred during scoring: {detail}. "
            "This can happen if the analysis engines are temporarily unavailable "
            "or the request could not be processed."
        ),
        strengths=["N/A due to system error"],
        areas_for_improvement=[f"Investigate and resolve the scoring error: {preview}"],
        red_flags=[f"System-level error during scoring: {preview}"],
        metric_scores=[MetricScore(metric="System Error", score=1, feedback=f"A critical error occurred: {detail}")],
        improvement_situations=[],
        suggested_disposition="Error",
        conversion_readiness=ConversionReadiness.LOW,
    )


def assemble(outcome: Outcome, analysis: DeepAnalysis, transcript: object) -> AnalysisReport:
    """Build the caller-facing report and attach the original transcript."""
    if outcome is Outcome.ERROR:
        category = CallCategory.ERROR
        score = 0.0
        accuracy = ACCURACY_SYSTEM_ERROR
    elif outcome is Outcome.DEGRADED:
        category = CallCategory(analysis.call_categorisation)
        score = analysis.overall_score
        accuracy = ACCURACY_PRETRANSCRIBED
    else:
        # The oracle's own label is discarded so category always tracks score.
        score = analysis.overall_score
        category = categorise(score)
        accuracy = ACCURACY_PRETRANSCRIBED

    return AnalysisReport(
        overall_score=score,
        call_categorisation=category,
        summary=analysis.summary,
        strengths=list(analysis.strengths),
        areas_for_improvement=list(analysis.areas_for_improvement),
        red_flags=list(analysis.red_flags),
        metric_scores=list(analysis.metric_scores),
        improvement_situations=list(analysis.improvement_situations),
        suggested_disposition=analysis.suggested_disposition,
        conversion_readiness=analysis.conversion_readiness,
        transcript=transcript if isinstance(transcript, str) and transcript else MISSING_TRANSCRIPT,
        transcript_accuracy=accuracy,
    )
