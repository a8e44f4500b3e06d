from __future__ import annotations

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from time import perf_counter

from callscore.scoring.models import AnalysisReport, CallCategory
from callscore.scoring.scorer import CallScorer

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    QUEUED = "Queued"
    TRANSCRIBING = "Transcribing"
    SCORING = "Scoring"
    COMPLETE = "Complete"
    FAILED = "Failed"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETE, JobStatus.FAILED})


@dataclass(frozen=True)
class JobSubmission:
    """Caller input for one transcribe-then-score job."""

    product: str
    transcript: str = ""
    agent_name: str | None = None
    product_context: str | None = None
    audio_url: str | None = None


@dataclass
class ScoringJob:
    job_id: str
    submission: JobSubmission
    status: JobStatus = JobStatus.QUEUED
    report: AnalysisReport | None = None
    error: str | None = None
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class BaseTranscriber(ABC):
    """Speech-to-text collaborator. Transcription itself lives outside this service."""

    @abstractmethod
    async def transcribe(self, submission: JobSubmission) -> str:
        raise NotImplementedError


class PassthroughTranscriber(BaseTranscriber):
    """Use the transcript supplied with the job as-is."""

    async def transcribe(self, submission: JobSubmission) -> str:
        if submission.transcript.strip():
            return submission.transcript
        if submission.audio_url:
            raise RuntimeError("Audio transcription is not configured; submit a transcript instead")
        return submission.transcript


class JobStore:
    """In-process status sink for job phases. Contents are lost on restart.

    Only finished jobs are evicted once `max_jobs` is exceeded; queued and
    running jobs are kept until they reach a terminal status.
    """

    def __init__(self, max_jobs: int = 1000) -> None:
        self.max_jobs = max_jobs
        self._jobs: dict[str, ScoringJob] = {}
        self._lock = asyncio.Lock()

    async def create(self, submission: JobSubmission) -> ScoringJob:
        job = ScoringJob(job_id=uuid.uuid4().hex, submission=submission)
        async with self._lock:
            self._jobs[job.job_id] = job
            self._evict_finished()
        return replace(job)

    def _evict_finished(self) -> None:
        overflow = len(self._jobs) - self.max_jobs
        if overflow <= 0:
            return
        finished = [job_id for job_id, job in self._jobs.items() if job.status in TERMINAL_STATUSES]
        for job_id in finished[:overflow]:
            del self._jobs[job_id]

    async def update(
        self,
        job_id: str,
        status: JobStatus,
        report: AnalysisReport | None = None,
        error: str | None = None,
    ) -> ScoringJob:
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise KeyError(job_id)
            job.status = status
            if report is not None:
                job.report = report
            if error is not None:
                job.error = error
            job.updated_at = datetime.now(timezone.utc).isoformat()
            updated = replace(job)
            if status in TERMINAL_STATUSES:
                self._evict_finished()
            return updated

    async def get(self, job_id: str) -> ScoringJob | None:
        async with self._lock:
            job = self._jobs.get(job_id)
            return replace(job) if job is not None else None

    async def recent(self, limit: int = 20) -> list[ScoringJob]:
        async with self._lock:
            jobs = list(self._jobs.values())[-max(1, int(limit)):]
        return [replace(job) for job in reversed(jobs)]


class CallScoringOrchestrator:
    """Sequence transcribe -> score and publish each phase to the job store."""

    def __init__(self, scorer: CallScorer, store: JobStore, transcriber: BaseTranscriber | None = None) -> None:
        self.scorer = scorer
        self.store = store
        self.transcriber = transcriber or PassthroughTranscriber()

    async def submit(self, submission: JobSubmission) -> ScoringJob:
        return await self.store.create(submission)

    async def run(self, job_id: str) -> ScoringJob | None:
        """Drive one queued job to `Complete` or `Failed`.

        Returns `None` when the job is no longer in the store.
        """
        job = await self.store.get(job_id)
        if job is None:
            logger.warning("Job not found, skipping run job_id=%s", job_id)
            return None
        started_at = perf_counter()
        submission = job.submission

        await self.store.update(job_id, JobStatus.TRANSCRIBING)
        logger.info("Job step: transcribe start job_id=%s", job_id)
        try:
            transcript = await self.transcriber.transcribe(submission)
        except Exception as exc:
            logger.exception("Job transcription failed job_id=%s", job_id)
            return await self.store.update(job_id, JobStatus.FAILED, error=f"Transcription failed: {exc}")

        await self.store.update(job_id, JobStatus.SCORING)
        logger.info("Job step: score start job_id=%s transcript_chars=%s", job_id, len(transcript))
        report = await self.scorer.score(
            {
                "product": submission.product,
                "agentName": submission.agent_name,
                "transcriptOverride": transcript,
                "productContext": submission.product_context,
            }
        )

        if report.call_categorisation is CallCategory.ERROR:
            final = await self.store.update(job_id, JobStatus.FAILED, report=report, error=report.summary)
        else:
            final = await self.store.update(job_id, JobStatus.COMPLETE, report=report)
        logger.info(
            "Job done job_id=%s status=%s elapsed_sec=%.2f",
            job_id,
            final.status.value,
            perf_counter() - started_at,
        )
        return final
