from __future__ import annotations

import httpx

from .base import BaseLLM
from .errors import LLMError, LLMResponseError, LLMTimeoutError, error_for_status


class OllamaAdapter(BaseLLM):
    """Call local/remote Ollama `/api/generate` with JSON output enforced."""

    def __init__(
        self,
        model_name: str,
        base_url: str = "http://127.0.0.1:11434",
        max_tokens: int = 4096,
        temp: float = 0.2,
        timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.max_tokens = max_tokens
        self.temp = temp
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        """Generate text using Ollama and return stripped response content."""
        payload = {
            "model": self.model_name,
            "system": system_prompt.strip(),
            "prompt": user_prompt.strip(),
            "stream": False,
            "format": "json",
            "options": {
                "num_predict": self.max_tokens,
                "temperature": self.temp,
            },
        }
        endpoint = f"{self.base_url}/api/generate"
        timeout = httpx.Timeout(self.timeout_seconds)

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.post(endpoint, json=payload)
        except httpx.TimeoutException as exc:
            raise LLMTimeoutError(f"Ollama generate timed out model={self.model_name}") from exc
        except httpx.HTTPError as exc:
            raise LLMError(f"Ollama generate transport failure: {exc}") from exc

        if response.status_code != 200:
            raise error_for_status("Ollama generate", response.status_code, response.text)

        body = response.json()
        output = body.get("response")
        if not isinstance(output, str):
            raise LLMResponseError("Ollama response missing string field 'response'")
        return output.strip()
