from __future__ import annotations

from abc import ABC, abstractmethod


class BaseLLM(ABC):
    """Common async interface for all language-model adapters.

    Implementations raise `callscore.llm.errors.LLMError` subclasses on failure.
    """

    model_name: str = "unknown"

    @abstractmethod
    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        """Generate a text response for the provided system/user prompts."""
        raise NotImplementedError
