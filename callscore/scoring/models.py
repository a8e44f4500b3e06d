from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MIN_TRANSCRIPT_CHARS = 10
MAX_SCORE = 5.0


class Product(str, Enum):
    ET = "ET"
    TOI = "TOI"


class CallCategory(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    AVERAGE = "Average"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    POOR = "Poor"
    ERROR = "Error"


class ConversionReadiness(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def clamp_score(value: object) -> float:
    """Coerce a model-provided score into the allowed range [0, 5]."""
    try:
        score = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if score != score:  # NaN
        return 0.0
    return max(0.0, min(MAX_SCORE, score))


def categorise(score: float) -> CallCategory:
    """Five-bucket categorisation used for full-fidelity reports."""
    if score >= 4.5:
        return CallCategory.EXCELLENT
    if score >= 3.5:
        return CallCategory.GOOD
    if score >= 2.5:
        return CallCategory.AVERAGE
    if score >= 1.5:
        return CallCategory.NEEDS_IMPROVEMENT
    return CallCategory.POOR


def categorise_coarse(score: float) -> CallCategory:
    """Three-bucket categorisation used for degraded, summary-only reports."""
    if score >= 3.5:
        return CallCategory.GOOD
    if score >= 2.5:
        return CallCategory.AVERAGE
    return CallCategory.POOR


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class _OracleModel(_CamelModel):
    """Schema filled by an oracle; explicit nulls fall back to field defaults."""

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: object) -> object:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class AnalysisRequest(_CamelModel):
    """One call-scoring invocation. Immutable once validated."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    product: Product
    agent_name: str | None = Field(default=None, alias="agentName")
    transcript_override: str = Field(alias="transcriptOverride")
    product_context: str | None = Field(default=None, alias="productContext")

    @field_validator("transcript_override")
    @classmethod
    def transcript_long_enough(cls, value: str) -> str:
        if len(value.strip()) < MIN_TRANSCRIPT_CHARS:
            raise ValueError(
                f"transcript must contain at least {MIN_TRANSCRIPT_CHARS} characters"
            )
        return value


class MetricScore(_OracleModel):
    metric: str
    score: float = 0.0
    feedback: str = ""

    @field_validator("score", mode="before")
    @classmethod
    def clamp_metric_score(cls, value: object) -> float:
        return clamp_score(value)


class ImprovementSituation(_OracleModel):
    time_in_call: str = Field(default="", alias="timeInCall")
    context: str = ""
    user_dialogue: str = Field(default="", alias="userDialogue")
    agent_response: str = Field(default="", alias="agentResponse")
    suggested_response: str = Field(default="", alias="suggestedResponse")


class DeepAnalysis(_OracleModel):
    """Schema requested from the primary oracle.

    Identical to `AnalysisReport` minus the transcript fields, which the
    assembler attaches. `call_categorisation` is accepted but recomputed.
    """

    overall_score: float = Field(alias="overallScore")
    call_categorisation: str = Field(default="", alias="callCategorisation")
    summary: str
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list, alias="areasForImprovement")
    red_flags: list[str] = Field(default_factory=list, alias="redFlags")
    metric_scores: list[MetricScore] = Field(alias="metricScores")
    improvement_situations: list[ImprovementSituation] = Field(
        default_factory=list, alias="improvementSituations"
    )
    suggested_disposition: str = Field(default="Not Specified", alias="suggestedDisposition")
    conversion_readiness: ConversionReadiness = Field(
        default=ConversionReadiness.LOW, alias="conversionReadiness"
    )

    @field_validator("call_categorisation", mode="before")
    @classmethod
    def label_as_text(cls, value: object) -> str:
        return value if isinstance(value, str) else str(value)

    @field_validator("overall_score", mode="before")
    @classmethod
    def clamp_overall_score(cls, value: object) -> float:
        return clamp_score(value)

    @field_validator("conversion_readiness", mode="before")
    @classmethod
    def normalize_readiness(cls, value: object) -> object:
        if isinstance(value, ConversionReadiness):
            return value
        normalized = str(value).strip().capitalize()
        known = {item.value for item in ConversionReadiness}
        return normalized if normalized in known else ConversionReadiness.LOW.value


class DegradedSummary(_OracleModel):
    """Reduced schema requested from the fallback oracle."""

    summary: str
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list, alias="areasForImprovement")
    overall_score: float = Field(alias="overallScore")

    @field_validator("overall_score", mode="before")
    @classmethod
    def clamp_overall_score(cls, value: object) -> float:
        return clamp_score(value)


class AnalysisReport(_CamelModel):
    """Report returned to every caller, on every path."""

    overall_score: float = Field(ge=0.0, le=MAX_SCORE, alias="overallScore")
    call_categorisation: CallCategory = Field(alias="callCategorisation")
    summary: str
    strengths: list[str]
    areas_for_improvement: list[str] = Field(alias="areasForImprovement")
    red_flags: list[str] = Field(alias="redFlags")
    metric_scores: list[MetricScore] = Field(alias="metricScores")
    improvement_situations: list[ImprovementSituation] = Field(alias="improvementSituations")
    suggested_disposition: str = Field(alias="suggestedDisposition")
    conversion_readiness: ConversionReadiness = Field(alias="conversionReadiness")
    transcript: str
    transcript_accuracy: str = Field(alias="transcriptAccuracy")


def required_keys(schema: type[BaseModel]) -> list[str]:
    """Wire names of the fields a schema cannot default."""
    return [
        field.alias or name
        for name, field in schema.model_fields.items()
        if field.is_required()
    ]
