from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineEvent:
    """One progress notification from a scoring run.

    `stage` is one of: validate, primary, fallback, assemble.
    """

    stage: str
    name: str
    attempt: int | None = None
    delay_seconds: float | None = None
    detail: str = ""


Observer = Callable[[PipelineEvent], None]


def log_event(event: PipelineEvent) -> None:
    """Default observer: write the event to the module logger."""
    level = logging.WARNING if event.name in {"attempt_failed", "exhausted", "failed"} else logging.INFO
    logger.log(
        level,
        "Scoring event stage=%s name=%s attempt=%s delay_sec=%s detail=%s",
        event.stage,
        event.name,
        event.attempt,
        event.delay_seconds,
        event.detail,
    )


def emit(observer: Observer, event: PipelineEvent) -> None:
    """Deliver an event without letting a faulty observer change the result."""
    try:
        observer(event)
    except Exception:  # noqa: BLE001 - observers are side channels
        logger.exception("Pipeline observer failed stage=%s name=%s", event.stage, event.name)
