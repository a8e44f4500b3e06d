from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Centralized runtime configuration for the API, oracle adapters, and scoring pipeline."""

    app_name: str = os.getenv("APP_NAME", "callscore")
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    # Primary "deep" oracle.
    primary_llm_provider: str = os.getenv("PRIMARY_LLM_PROVIDER", "openai").strip().lower()
    primary_model_name: str = os.getenv("PRIMARY_MODEL_NAME", "gpt-4o")
    primary_retry_model_name: str = os.getenv("PRIMARY_RETRY_MODEL_NAME", "").strip()
    primary_max_tokens: int = int(os.getenv("PRIMARY_MAX_TOKENS", "8192"))
    primary_temperature: float = float(os.getenv("PRIMARY_TEMPERATURE", "0.2"))

    # Fallback "backup" oracle.
    fallback_llm_provider: str = os.getenv("FALLBACK_LLM_PROVIDER", "openai").strip().lower()
    fallback_model_name: str = os.getenv("FALLBACK_MODEL_NAME", "gpt-4o-mini")
    fallback_max_tokens: int = int(os.getenv("FALLBACK_MAX_TOKENS", "1024"))
    fallback_temperature: float = float(os.getenv("FALLBACK_TEMPERATURE", "0.25"))

    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://127.0.0.1:11434")
    oracle_timeout_seconds: float = float(os.getenv("ORACLE_TIMEOUT_SECONDS", "120"))
    json_repair_retries: int = int(os.getenv("JSON_REPAIR_RETRIES", "0"))
    allow_mock_llm: bool = _env_flag("ALLOW_MOCK_LLM")

    max_transcript_chars: int = int(os.getenv("MAX_TRANSCRIPT_CHARS", "30000"))
    retry_max_attempts: int = int(os.getenv("RETRY_MAX_ATTEMPTS", "2"))
    retry_base_delay_seconds: float = float(os.getenv("RETRY_BASE_DELAY_SECONDS", "1.5"))
    retry_backoff_multiplier: float = float(os.getenv("RETRY_BACKOFF_MULTIPLIER", "2.0"))
    # 0 disables the overall wall-clock bound on retries + fallback.
    pipeline_deadline_seconds: float = float(os.getenv("PIPELINE_DEADLINE_SECONDS", "0"))


settings = Settings()
