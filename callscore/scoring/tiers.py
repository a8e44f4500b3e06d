from __future__ import annotations

import asyncio
import logging

from callscore.scoring.classifier import is_rate_limited
from callscore.scoring.errors import FallbackFailure, OracleFailure
from callscore.scoring.events import Observer, PipelineEvent, emit, log_event
from callscore.scoring.models import (
    AnalysisRequest,
    ConversionReadiness,
    DeepAnalysis,
    DegradedSummary,
    MetricScore,
    categorise_coarse,
)
from callscore.scoring.oracle import StructuredOracle
from callscore.scoring.prompts import (
    DEEP_ANALYSIS_SYSTEM_PROMPT,
    FALLBACK_SYSTEM_PROMPT,
    deep_analysis_prompt,
    fallback_prompt,
)
from callscore.utils.retry import RetryPolicy, Sleep, retry_async

logger = logging.getLogger(__name__)

DEGRADED_SUMMARY_PREFIX = (
    "[Degraded analysis: the primary analysis engine was unavailable, "
    "so this is a summary-only assessment.] "
)
DEGRADED_METRIC_NAME = "Degraded Summary Analysis"
DEGRADED_DISPOSITION = "Review Manually"


class PrimaryTier:
    """Retrying caller of the high-fidelity oracle.

    Returns the deep analysis on success and `None` when every attempt failed
    on capacity exhaustion. Any other failure is raised as `OracleFailure`
    straight away, without further attempts.
    """

    def __init__(
        self,
        oracle: StructuredOracle,
        policy: RetryPolicy | None = None,
        retry_oracle: StructuredOracle | None = None,
        sleep: Sleep = asyncio.sleep,
        observer: Observer = log_event,
    ) -> None:
        self.oracle = oracle
        self.policy = policy or RetryPolicy()
        self.retry_oracle = retry_oracle
        self.sleep = sleep
        self.observer = observer

    async def run(self, request: AnalysisRequest, transcript: str) -> DeepAnalysis | None:
        user_prompt = deep_analysis_prompt(request, transcript)

        async def attempt_once(attempt: int) -> DeepAnalysis:
            oracle = self._oracle_for(attempt)
            emit(
                self.observer,
                PipelineEvent("primary", "attempt_started", attempt=attempt, detail=oracle.model_name),
            )
            try:
                return await oracle.generate(DEEP_ANALYSIS_SYSTEM_PROMPT, user_prompt, DeepAnalysis)
            except Exception as exc:
                emit(
                    self.observer,
                    PipelineEvent("primary", "attempt_failed", attempt=attempt, detail=str(exc)[:200]),
                )
                raise

        def on_retry(attempt: int, exc: Exception, delay: float) -> None:
            emit(self.observer, PipelineEvent("primary", "backoff", attempt=attempt, delay_seconds=delay))

        try:
            analysis = await retry_async(
                attempt_once,
                policy=self.policy,
                should_retry=is_rate_limited,
                sleep=self.sleep,
                on_retry=on_retry,
            )
        except Exception as exc:
            if is_rate_limited(exc):
                emit(
                    self.observer,
                    PipelineEvent("primary", "exhausted", attempt=self.policy.max_attempts, detail=str(exc)[:200]),
                )
                return None
            raise OracleFailure(f"Primary analysis failed: {exc}") from exc

        emit(self.observer, PipelineEvent("primary", "succeeded"))
        return analysis

    def _oracle_for(self, attempt: int) -> StructuredOracle:
        if attempt > 1 and self.retry_oracle is not None:
            return self.retry_oracle
        return self.oracle


class FallbackTier:
    """Single-shot caller of the reduced-fidelity oracle."""

    def __init__(self, oracle: StructuredOracle, observer: Observer = log_event) -> None:
        self.oracle = oracle
        self.observer = observer

    async def run(self, request: AnalysisRequest, transcript: str) -> DeepAnalysis:
        emit(self.observer, PipelineEvent("fallback", "attempt_started", attempt=1, detail=self.oracle.model_name))
        try:
            degraded = await self.oracle.generate(
                FALLBACK_SYSTEM_PROMPT,
                fallback_prompt(request, transcript),
                DegradedSummary,
            )
        except Exception as exc:
            emit(self.observer, PipelineEvent("fallback", "failed", detail=str(exc)[:200]))
            raise FallbackFailure(f"Fallback analysis failed: {exc}") from exc

        if not degraded.summary.strip():
            emit(self.observer, PipelineEvent("fallback", "failed", detail="empty summary"))
            raise FallbackFailure("Fallback analysis returned an empty summary")

        emit(self.observer, PipelineEvent("fallback", "succeeded"))
        return expand_degraded(degraded)


def expand_degraded(degraded: DegradedSummary) -> DeepAnalysis:
    """Lift a summary-only result into the full analysis shape."""
    category = categorise_coarse(degraded.overall_score)
    return DeepAnalysis(
        overall_score=degraded.overall_score,
        call_categorisation=category.value,
        summary=DEGRADED_SUMMARY_PREFIX + degraded.summary.strip(),
        strengths=list(degraded.strengths),
        areas_for_improvement=list(degraded.areas_for_improvement),
        red_flags=[],
        metric_scores=[
            MetricScore(
                metric=DEGRADED_METRIC_NAME,
                score=degraded.overall_score,
                feedback=(
                    "Only a summary-level assessment was possible; "
                    "per-metric rubric scoring was not performed."
                ),
            )
        ],
        improvement_situations=[],
        suggested_disposition=DEGRADED_DISPOSITION,
        conversion_readiness=ConversionReadiness.LOW,
    )
