from __future__ import annotations


class AnalysisError(Exception):
    """Base class for failures raised inside the scoring pipeline."""

    kind = "SystemError"


class RequestValidationError(AnalysisError, ValueError):
    """The request was rejected before any oracle call."""

    kind = "ValidationError"


class OracleFailure(AnalysisError):
    """The primary oracle failed in a way waiting will not fix."""

    kind = "OracleOther"


class FallbackFailure(AnalysisError):
    """The fallback oracle produced no usable summary."""

    kind = "FallbackFailure"


class PipelineDeadlineExceeded(AnalysisError):
    kind = "DeadlineExceeded"
