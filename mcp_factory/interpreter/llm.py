from __future__ import annotations
import httpx
from dataclasses import dataclass
from mcp_factory.core.config import settings
from mcp_factory.core.errors import InterpretError


@dataclass
class AnthropicClient:
    api_key: str
    model: str = settings.anthropic_model
    api_base: str = settings.anthropic_api_base
    max_tokens: int = settings.anthropic_max_tokens
    timeout: float = settings.llm_timeout

    def _headers(self) -> dict:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }

    async def complete(self, prompt: str) -> str:
        """Send a single user message and return the concatenated text blocks."""
        url = f"{self.api_base}/v1/messages"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                r = await client.post(
                    url,
                    headers=self._headers(),
                    json={
                        "model": self.model,
                        "max_tokens": self.max_tokens,
                        "messages": [{"role": "user", "content": prompt}],
                    },
                )
                r.raise_for_status()
            except httpx.HTTPError as e:
                raise InterpretError(f"LLM request failed: {e}") from e
            data = r.json()
        return "".join(
            block.get("text", "") for block in data.get("content", []) if block.get("type") == "text"
        )
