from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from callscore.config import settings
from callscore.llm.factory import build_fallback_llm, build_primary_llm, build_primary_retry_llm
from callscore.scoring.errors import PipelineDeadlineExceeded, RequestValidationError
from callscore.scoring.events import Observer, PipelineEvent, emit, log_event
from callscore.scoring.models import AnalysisReport, AnalysisRequest, DeepAnalysis
from callscore.scoring.oracle import StructuredOracle
from callscore.scoring.preprocess import truncate
from callscore.scoring.safety_net import Outcome, assemble, error_analysis, failure_kind, recover
from callscore.scoring.tiers import FallbackTier, PrimaryTier
from callscore.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

RequestInput = AnalysisRequest | Mapping[str, Any]


def validate_request(payload: RequestInput) -> AnalysisRequest:
    """Coerce caller input into an `AnalysisRequest` or raise `RequestValidationError`."""
    if isinstance(payload, AnalysisRequest):
        return payload
    if not isinstance(payload, Mapping):
        raise RequestValidationError(
            f"Invalid input for call scoring: expected an object, got {type(payload).__name__}"
        )
    try:
        return AnalysisRequest.model_validate(dict(payload))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'request'}: {error['msg']}"
            for error in exc.errors()
        )
        raise RequestValidationError(f"Invalid input for call scoring: {problems}") from exc


def raw_transcript(payload: object) -> object:
    """Original transcript text as supplied by the caller, before validation."""
    if isinstance(payload, AnalysisRequest):
        return payload.transcript_override
    if isinstance(payload, Mapping):
        return payload.get("transcriptOverride", payload.get("transcript_override"))
    return None


class CallScorer:
    """Total-function entry point: every call returns a complete `AnalysisReport`.

    Sequence per request:
    1. Validate the request (no oracle call on failure).
    2. Bound transcript size.
    3. Primary tier with bounded retry on capacity exhaustion.
    4. Fallback tier when the primary tier ran out of attempts.
    5. Assemble the report; failures anywhere become an Error report.
    """

    def __init__(
        self,
        primary: PrimaryTier,
        fallback: FallbackTier,
        max_transcript_chars: int = 30000,
        deadline_seconds: float | None = None,
        observer: Observer = log_event,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.max_transcript_chars = max_transcript_chars
        self.deadline_seconds = deadline_seconds or None
        self.observer = observer

    async def score(self, payload: RequestInput) -> AnalysisReport:
        started_at = perf_counter()
        outcome, analysis = await recover(lambda: self._analyze(payload), self._on_failure)
        report = assemble(outcome, analysis, raw_transcript(payload))
        emit(
            self.observer,
            PipelineEvent("assemble", outcome.value, detail=report.call_categorisation.value),
        )
        logger.info(
            "Call scoring done outcome=%s category=%s score=%.2f elapsed_sec=%.2f",
            outcome.value,
            report.call_categorisation.value,
            report.overall_score,
            perf_counter() - started_at,
        )
        return report

    async def _analyze(self, payload: RequestInput) -> tuple[Outcome, DeepAnalysis]:
        if self.deadline_seconds is None:
            return await self._run_tiers(payload)
        try:
            return await asyncio.wait_for(self._run_tiers(payload), timeout=self.deadline_seconds)
        except asyncio.TimeoutError as exc:
            raise PipelineDeadlineExceeded(
                f"Scoring did not finish within {self.deadline_seconds}s"
            ) from exc

    async def _run_tiers(self, payload: RequestInput) -> tuple[Outcome, DeepAnalysis]:
        request = validate_request(payload)
        emit(self.observer, PipelineEvent("validate", "succeeded", detail=request.product.value))

        transcript = truncate(request.transcript_override, self.max_transcript_chars)
        if len(transcript) < len(request.transcript_override):
            logger.info(
                "Transcript truncated original_chars=%s kept_chars=%s",
                len(request.transcript_override),
                len(transcript),
            )

        analysis = await self.primary.run(request, transcript)
        if analysis is not None:
            return Outcome.SUCCESS, analysis
        return Outcome.DEGRADED, await self.fallback.run(request, transcript)

    def _on_failure(self, exc: Exception) -> tuple[Outcome, DeepAnalysis]:
        emit(self.observer, PipelineEvent("assemble", "failed", detail=failure_kind(exc)))
        return Outcome.ERROR, error_analysis(exc)


def build_call_scorer(observer: Observer = log_event) -> CallScorer:
    """Compose a `CallScorer` from environment settings."""
    primary_oracle = StructuredOracle(
        build_primary_llm(),
        timeout_seconds=settings.oracle_timeout_seconds,
        repair_retries=settings.json_repair_retries,
    )
    retry_llm = build_primary_retry_llm()
    retry_oracle = (
        StructuredOracle(
            retry_llm,
            timeout_seconds=settings.oracle_timeout_seconds,
            repair_retries=settings.json_repair_retries,
        )
        if retry_llm is not None
        else None
    )
    fallback_oracle = StructuredOracle(
        build_fallback_llm(),
        timeout_seconds=settings.oracle_timeout_seconds,
        repair_retries=settings.json_repair_retries,
    )
    policy = RetryPolicy(
        max_attempts=settings.retry_max_attempts,
        base_delay_seconds=settings.retry_base_delay_seconds,
        backoff_multiplier=settings.retry_backoff_multiplier,
    )
    return CallScorer(
        primary=PrimaryTier(primary_oracle, policy=policy, retry_oracle=retry_oracle, observer=observer),
        fallback=FallbackTier(fallback_oracle, observer=observer),
        max_transcript_chars=settings.max_transcript_chars,
        deadline_seconds=settings.pipeline_deadline_seconds,
        observer=observer,
    )
