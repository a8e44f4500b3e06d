from __future__ import annotations

import pytest
from pydantic import ValidationError

from callscore.scoring.models import (
    AnalysisRequest,
    CallCategory,
    ConversionReadiness,
    DeepAnalysis,
    DegradedSummary,
    categorise,
    categorise_coarse,
    clamp_score,
    required_keys,
)


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (5.0, CallCategory.EXCELLENT),
        (4.5, CallCategory.EXCELLENT),
        (4.49, CallCategory.GOOD),
        (3.5, CallCategory.GOOD),
        (2.5, CallCategory.AVERAGE),
        (1.5, CallCategory.NEEDS_IMPROVEMENT),
        (1.49, CallCategory.POOR),
        (0.0, CallCategory.POOR),
    ],
)
def test_categorise_thresholds(score: float, expected: CallCategory) -> None:
    assert categorise(score) is expected


@pytest.mark.parametrize(
    ("score", "expected"),
    [(5.0, CallCategory.GOOD), (3.5, CallCategory.GOOD), (2.5, CallCategory.AVERAGE), (2.4, CallCategory.POOR)],
)
def test_coarse_categorise_uses_three_buckets(score: float, expected: CallCategory) -> None:
    assert categorise_coarse(score) is expected


@pytest.mark.parametrize(("raw", "expected"), [(7, 5.0), (-2, 0.0), ("3.5", 3.5), ("n/a", 0.0), (None, 0.0)])
def test_clamp_score(raw: object, expected: float) -> None:
    assert clamp_score(raw) == expected


def test_request_accepts_camel_case_and_rejects_short_transcript() -> None:
    request = AnalysisRequest.model_validate(
        {"product": "TOI", "transcriptOverride": "AGENT: hello there, sir"}
    )
    assert request.agent_name is None
    with pytest.raises(ValidationError):
        AnalysisRequest.model_validate({"product": "TOI", "transcriptOverride": "   short    "})
    with pytest.raises(ValidationError):
        AnalysisRequest.model_validate({"product": "XYZ", "transcriptOverride": "long enough transcript"})


def test_deep_analysis_normalizes_oracle_output() -> None:
    analysis = DeepAnalysis.model_validate(
        {
            "overallScore": 9,
            "summary": "ok",
            "metricScores": [{"metric": "Pitch", "score": -1}],
            "conversionReadiness": "very high",
        }
    )
    assert analysis.overall_score == 5.0
    assert analysis.metric_scores[0].score == 0.0
    assert analysis.conversion_readiness is ConversionReadiness.LOW
    assert analysis.improvement_situations == []


def test_required_keys_use_wire_names() -> None:
    assert required_keys(DegradedSummary) == ["summary", "overallScore"]
    assert set(required_keys(DeepAnalysis)) == {"overallScore", "summary", "metricScores"}
