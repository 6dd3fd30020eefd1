"""
LM Studio backend using the OpenAI-compatible chat completions endpoint.
"""

import asyncio
import aiohttp
from typing import Optional
from loguru import logger

from .base import AIBackend, AIResponse, ResponseError
from ..lmstudio.probe import is_server_reachable, models_url


class LMStudioBackend(AIBackend):
    """LM Studio AI backend implementation."""

    def __init__(
        self,
        api_url: str,
        model: str,
        api_key: str = "lm-studio",
        temperature: float = 0.3,
        timeout: int = 120,
    ):
        super().__init__(api_url, model, timeout)
        self.api_key = api_key
        self.temperature = temperature
        self.backend_type = "lmstudio"

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def call_api(self, prompt: str, system_prompt: Optional[str] = None) -> AIResponse:
        """Call the chat completions API."""
        self._log_request(prompt)

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "stream": False,
        }

        async with aiohttp.ClientSession() as session:
            try:
                async with session.post(
                    f"{self.api_url}/chat/completions",
                    json=payload,
                    headers=self._headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    response.raise_for_status()
                    data = await response.json()

            except aiohttp.ClientError as e:
                logger.error(f"LM Studio API error: {e}")
                raise
            except asyncio.TimeoutError:
                logger.error(f"LM Studio API timeout after {self.timeout}s")
                raise

        logger.debug(f"Raw LM Studio response: {data}")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not content:
            raise ResponseError("Invalid API response: missing completion content")

        usage = data.get("usage") or {}
        return AIResponse(
            content=content.strip(),
            model=data.get("model", self.model),
            tokens_used=usage.get("total_tokens"),
            backend_type=self.backend_type,
            raw_response=data
        )

    async def health_check(self) -> bool:
        """Check if LM Studio answers on the model listing endpoint."""
        return await is_server_reachable(self.api_url, self.api_key)

    async def list_models(self) -> list[str]:
        """List models the server exposes."""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    models_url(self.api_url),
                    headers=self._headers,
                    timeout=aiohttp.ClientTimeout(total=10)
                ) as response:
                    response.raise_for_status()
                    data = await response.json()

            return [m.get("id", "") for m in data.get("data", []) if m.get("id")]

        except Exception as e:
            logger.error(f"Failed to list LM Studio models: {e}")
            return []
