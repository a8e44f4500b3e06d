from __future__ import annotations

from callscore.config import settings

from .base import BaseLLM
from .mock_adapter import MockAdapter
from .ollama_adapter import OllamaAdapter
from .openai_adapter import OpenAIAdapter


def build_llm(provider: str, model_name: str, max_tokens: int, temp: float) -> BaseLLM:
    """Select and instantiate one LLM adapter.

    Keeping provider selection centralized avoids provider-specific conditionals
    in the scoring tiers.
    """
    if provider == "ollama":
        return OllamaAdapter(
            model_name=model_name,
            base_url=settings.ollama_base_url,
            max_tokens=max_tokens,
            temp=temp,
            timeout_seconds=settings.oracle_timeout_seconds,
        )
    if provider == "mock":
        if not settings.allow_mock_llm:
            raise ValueError(
                "LLM provider 'mock' is disabled. Set ALLOW_MOCK_LLM=true for tests/dev only."
            )
        return MockAdapter()
    if provider == "openai":
        return OpenAIAdapter(
            api_key=settings.openai_api_key,
            model_name=model_name,
            base_url=settings.openai_base_url,
            max_tokens=max_tokens,
            temp=temp,
            timeout_seconds=settings.oracle_timeout_seconds,
        )
    raise ValueError(f"Unsupported LLM provider '{provider}'. Use 'ollama', 'openai', or 'mock'.")


def build_primary_llm() -> BaseLLM:
    return build_llm(
        settings.primary_llm_provider,
        settings.primary_model_name,
        settings.primary_max_tokens,
        settings.primary_temperature,
    )


def build_primary_retry_llm() -> BaseLLM | None:
    """Adapter used for primary attempts after the first, when configured."""
    if not settings.primary_retry_model_name:
        return None
    return build_llm(
        settings.primary_llm_provider,
        settings.primary_retry_model_name,
        settings.primary_max_tokens,
        settings.primary_temperature,
    )


def build_fallback_llm() -> BaseLLM:
    return build_llm(
        settings.fallback_llm_provider,
        settings.fallback_model_name,
        settings.fallback_max_tokens,
        settings.fallback_temperature,
    )
