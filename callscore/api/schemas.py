from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from callscore.scoring.models import AnalysisReport


class JobRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product: str
    agent_name: str | None = Field(default=None, alias="agentName")
    transcript: str = Field(default="", description="Pre-transcribed call text")
    product_context: str | None = Field(default=None, alias="productContext")
    audio_url: str | None = Field(default=None, alias="audioUrl")


class JobResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    status: str
    product: str
    agent_name: str | None = Field(default=None, alias="agentName")
    error: str | None = None
    report: AnalysisReport | None = None
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class HealthResponse(BaseModel):
    status: str
    app_name: str
