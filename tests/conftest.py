from __future__ import annotations

import json
from collections.abc import Callable

import pytest

from callscore.llm.base import BaseLLM
from callscore.scoring.events import PipelineEvent
from callscore.scoring.oracle import StructuredOracle
from callscore.scoring.scorer import CallScorer
from callscore.scoring.tiers import FallbackTier, PrimaryTier
from callscore.utils.retry import RetryPolicy

TRANSCRIPT = (
    "AGENT: Good morning, this is Priya from ET Prime. Do you have two minutes?\n"
    "USER: Sure, go ahead.\n"
    "AGENT: We have an annual plan with premium stock reports. Shall I activate it today?\n"
)

DEEP_ANALYSIS = {
    "overallScore": 4.6,
    "callCategorisation": "Average",
    "summary": "Confident opening and a clear close.",
    "strengths": ["Opening", "Close"],
    "areasForImprovement": ["Discovery"],
    "redFlags": [],
    "metricScores": [{"metric": "Introduction Quality", "score": 5, "feedback": "Strong."}],
    "improvementSituations": [
        {
            "timeInCall": "[0s - 10s]",
            "context": "Opening",
            "userDialogue": "Sure, go ahead.",
            "agentResponse": "We have an annual plan...",
            "suggestedResponse": "Ask about reading habits first.",
        }
    ],
    "suggestedDisposition": "Sale",
    "conversionReadiness": "high",
}

DEGRADED_SUMMARY = {
    "summary": "Short pitch with a direct close.",
    "strengths": ["Direct"],
    "areasForImprovement": ["Discovery"],
    "overallScore": 3.7,
}


class ScriptedLLM(BaseLLM):
    """Replay a fixed script of responses; exceptions in the script are raised."""

    def __init__(self, script: list[object], model_name: str = "scripted") -> None:
        self.script = list(script)
        self.model_name = model_name
        self.calls: list[tuple[str, str]] = []

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if not self.script:
            raise AssertionError("ScriptedLLM called more times than scripted")
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, dict):
            return json.dumps(item)
        return str(item)


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def make_llm() -> type[ScriptedLLM]:
    return ScriptedLLM


@pytest.fixture
def deep_analysis() -> dict[str, object]:
    return json.loads(json.dumps(DEEP_ANALYSIS))


@pytest.fixture
def degraded_summary() -> dict[str, object]:
    return dict(DEGRADED_SUMMARY)


@pytest.fixture
def transcript() -> str:
    return TRANSCRIPT


@pytest.fixture
def payload(transcript: str) -> dict[str, object]:
    return {"product": "ET", "agentName": "Priya", "transcriptOverride": transcript}


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def events() -> list[PipelineEvent]:
    return []


@pytest.fixture
def build_scorer(
    sleep_recorder: SleepRecorder, events: list[PipelineEvent]
) -> Callable[..., CallScorer]:
    """Factory for scorers wired to scripted LLMs and a recording sleep."""

    def _build(
        primary: BaseLLM,
        fallback: BaseLLM,
        retry: BaseLLM | None = None,
        policy: RetryPolicy | None = None,
        max_transcript_chars: int = 30000,
        deadline_seconds: float | None = None,
        oracle_timeout_seconds: float | None = 5.0,
    ) -> CallScorer:
        def oracle(llm: BaseLLM) -> StructuredOracle:
            return StructuredOracle(llm, timeout_seconds=oracle_timeout_seconds)

        return CallScorer(
            primary=PrimaryTier(
                oracle(primary),
                policy=policy or RetryPolicy(max_attempts=2, base_delay_seconds=1.5),
                retry_oracle=oracle(retry) if retry is not None else None,
                sleep=sleep_recorder,
                observer=events.append,
            ),
            fallback=FallbackTier(oracle(fallback), observer=events.append),
            max_transcript_chars=max_transcript_chars,
            deadline_seconds=deadline_seconds,
            observer=events.append,
        )

    return _build
