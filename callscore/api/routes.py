from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, HTTPException, Query, status

from callscore.api.schemas import HealthResponse, JobRequest, JobResponse
from callscore.config import settings
from callscore.orchestrator.jobs import CallScoringOrchestrator, JobSubmission, ScoringJob
from callscore.scoring.models import AnalysisReport
from callscore.scoring.scorer import CallScorer

logger = logging.getLogger(__name__)


def _job_response(job: ScoringJob) -> JobResponse:
    return JobResponse(
        job_id=job.job_id,
        status=job.status.value,
        product=job.submission.product,
        agent_name=job.submission.agent_name,
        error=job.error,
        report=job.report,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


def build_router(scorer: CallScorer, orchestrator: CallScoringOrchestrator) -> APIRouter:
    """Create route handlers bound to runtime dependencies.

    We inject the scorer and orchestrator from `main.py` so handlers stay easy to test.
    """
    router = APIRouter()

    @router.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", app_name=settings.app_name)

    @router.post("/score-call", response_model=AnalysisReport)
    async def score_call(payload: dict[str, Any] = Body(...)) -> AnalysisReport:
        """Score one transcript synchronously.

        Failures are reported inside the body (`callCategorisation == "Error"`),
        never as HTTP errors, so the payload is validated by the pipeline itself.
        """
        logger.info("Received /score-call request product=%s", payload.get("product"))
        report = await scorer.score(payload)
        logger.info(
            "Completed /score-call product=%s category=%s",
            payload.get("product"),
            report.call_categorisation.value,
        )
        return report

    @router.post("/jobs", response_model=JobResponse, status_code=status.HTTP_202_ACCEPTED)
    async def submit_job(payload: JobRequest, background_tasks: BackgroundTasks) -> JobResponse:
        """Queue a transcribe-then-score job and return its identifier."""
        job = await orchestrator.submit(
            JobSubmission(
                product=payload.product,
                transcript=payload.transcript,
                agent_name=payload.agent_name,
                product_context=payload.product_context,
                audio_url=payload.audio_url,
            )
        )
        logger.info("Queued scoring job job_id=%s product=%s", job.job_id, payload.product)
        background_tasks.add_task(orchestrator.run, job.job_id)
        return _job_response(job)

    @router.get("/jobs/{job_id}", response_model=JobResponse)
    async def get_job(job_id: str) -> JobResponse:
        job = await orchestrator.store.get(job_id)
        if job is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="job not found")
        return _job_response(job)

    @router.get("/jobs", response_model=list[JobResponse])
    async def recent_jobs(limit: int = Query(default=20, ge=1, le=200)) -> list[JobResponse]:
        """Return the most recent jobs, newest first."""
        jobs = await orchestrator.store.recent(limit=limit)
        return [_job_response(job) for job in jobs]

    return router
