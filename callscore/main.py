from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from callscore.api.routes import build_router
from callscore.config import settings
from callscore.orchestrator.jobs import CallScoringOrchestrator, JobStore
from callscore.scoring.scorer import build_call_scorer


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    """Compose application dependencies and register routes."""
    configure_logging()
    app = FastAPI(title=settings.app_name)
    scorer = build_call_scorer()
    store = JobStore()
    orchestrator = CallScoringOrchestrator(scorer=scorer, store=store)

    app.include_router(build_router(scorer, orchestrator))
    return app


def run() -> None:
    uvicorn.run("callscore.main:create_app", host=settings.host, port=settings.port, factory=True)
