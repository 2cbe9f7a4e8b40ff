"""Async httpx client wrapper for the Ollama HTTP API."""

from __future__ import annotations

import logging

import httpx

from agent_router.errors import CollaboratorError
from agent_router.llm.config import LlmSettings

logger = logging.getLogger(__name__)


class OllamaClient:
    def __init__(self, settings: LlmSettings, *, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(
            base_url=settings.ollama_url,
            timeout=settings.request_timeout,
        )

    @property
    def settings(self) -> LlmSettings:
        return self._settings

    async def close(self) -> None:
        await self._client.aclose()

    async def is_running(self) -> bool:
        try:
            resp = await self._client.get("/api/tags")
        except httpx.HTTPError:
            return False
        return resp.status_code == 200

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float,
        num_predict: int,
        think: bool = False,
    ) -> str:
        """Run a non-streaming completion and return the response text."""
        payload: dict = {
            "model": self._settings.effective_model_name,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": temperature, "num_predict": num_predict},
        }
        if think:
            payload["think"] = True

        try:
            resp = await self._client.post("/api/generate", json=payload)
        except httpx.HTTPError as e:
            raise CollaboratorError(f"Failed to send request to Ollama: {e}") from e
        if resp.status_code != 200:
            raise CollaboratorError(f"Ollama request failed: HTTP {resp.status_code}")

        try:
            data = resp.json()
            text = data["response"]
        except (ValueError, KeyError, TypeError) as e:
            raise CollaboratorError("Failed to parse Ollama response") from e

        if thinking := data.get("thinking"):
            logger.debug(f"LLM thinking trace: {thinking!r}")
        return text
