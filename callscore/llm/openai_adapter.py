from __future__ import annotations

import httpx

from .base import BaseLLM
from .errors import LLMError, LLMResponseError, LLMTimeoutError, error_for_status


class OpenAIAdapter(BaseLLM):
    """Call OpenAI-compatible chat endpoint in JSON mode and normalize text output."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        max_tokens: int = 4096,
        temp: float = 0.2,
        timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key.strip():
            raise ValueError("OPENAI_API_KEY is required when an oracle provider is 'openai'")
        self.api_key = api_key.strip()
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.max_tokens = max_tokens
        self.temp = temp
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def generate(self, system_prompt: str, user_prompt: str) -> str:  # noqa: C901
        """Generate text via chat completions and return extracted content."""
        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system_prompt.strip()},
                {"role": "user", "content": user_prompt.strip()},
            ],
            "temperature": self.temp,
            "max_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
        }
        endpoint = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        timeout = httpx.Timeout(self.timeout_seconds)

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.post(endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise LLMTimeoutError(f"OpenAI chat/completions timed out model={self.model_name}") from exc
        except httpx.HTTPError as exc:
            raise LLMError(f"OpenAI chat/completions transport failure: {exc}") from exc

        if response.status_code != 200:
            raise error_for_status("OpenAI chat/completions", response.status_code, response.text)

        body = response.json()
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices:
            raise LLMResponseError("OpenAI response missing 'choices'")

        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise LLMResponseError("OpenAI response missing first choice 'message'")

        content = message.get("content")
        if isinstance(content, str):
            return content.strip()
        if isinstance(content, list):
            text_chunks: list[str] = []
            for part in content:
                if isinstance(part, dict) and part.get("type") == "text":
                    text_value = part.get("text")
                    if isinstance(text_value, str):
                        text_chunks.append(text_value)
            joined = "\n".join(text_chunks).strip()
            if joined:
                return joined

        raise LLMResponseError("OpenAI response missing string 'message.content'")
