from __future__ import annotations

import asyncio
from typing import TypeVar

from pydantic import BaseModel

from callscore.llm.base import BaseLLM
from callscore.llm.errors import LLMTimeoutError
from callscore.scoring.models import required_keys
from callscore.utils.json_guard import parse_model_with_repair

M = TypeVar("M", bound=BaseModel)


class StructuredOracle:
    """Pair a text LLM with schema validation and a hard per-call time budget."""

    def __init__(
        self,
        llm: BaseLLM,
        timeout_seconds: float | None = 120.0,
        repair_retries: int = 0,
    ) -> None:
        self.llm = llm
        self.timeout_seconds = timeout_seconds
        self.repair_retries = repair_retries

    @property
    def model_name(self) -> str:
        return getattr(self.llm, "model_name", type(self.llm).__name__)

    async def generate(self, system_prompt: str, user_prompt: str, schema: type[M]) -> M:
        """Generate and validate one structured response.

        The timeout covers the initial call and any JSON repair calls.
        """
        try:
            return await asyncio.wait_for(
                self._generate(system_prompt, user_prompt, schema),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise LLMTimeoutError(
                f"Oracle model={self.model_name} did not answer within {self.timeout_seconds}s"
            ) from exc

    async def _generate(self, system_prompt: str, user_prompt: str, schema: type[M]) -> M:
        raw = await self.llm.generate(system_prompt, user_prompt)
        return await parse_model_with_repair(
            llm=self.llm,
            raw_text=raw,
            schema=schema,
            required_keys=required_keys(schema),
            max_repair_retries=self.repair_retries,
        )
