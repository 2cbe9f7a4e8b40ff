"""Semantic tag identification and direct agent classification via Ollama."""

from __future__ import annotations

import logging
from typing import Protocol

from agent_router.llm.client import OllamaClient
from agent_router.llm.prompts import (
    build_classification_prompt,
    build_tagging_prompt,
    parse_choice_list,
    parse_tag_list,
)
from agent_router.models import ClassificationInput
from agent_router.registry.models import LlmTagConfig, UserConfig

logger = logging.getLogger(__name__)

TAGGING_TEMPERATURE = 0.1
CLASSIFICATION_TEMPERATURE = 0.3


class TagIdentifier(Protocol):
    async def identify_tags(
        self, request: ClassificationInput, tag_config: LlmTagConfig
    ) -> list[str]: ...


class DirectClassifier(Protocol):
    async def classify(
        self, request: ClassificationInput, user_config: UserConfig
    ) -> list[str]: ...


def _num_predict(thinking: bool) -> int:
    return 500 if thinking else 100


class OllamaTagIdentifier:
    """Asks the model which configured tags apply to a request."""

    def __init__(self, client: OllamaClient) -> None:
        self._client = client

    async def identify_tags(
        self, request: ClassificationInput, tag_config: LlmTagConfig
    ) -> list[str]:
        if not tag_config.tags:
            return []
        settings = self._client.settings
        thinking = settings.should_use_thinking()
        configured = settings.temperature
        temperature = TAGGING_TEMPERATURE if configured is None else configured
        response = await self._client.generate(
            build_tagging_prompt(request, tag_config),
            temperature=temperature,
            num_predict=_num_predict(thinking),
            think=thinking,
        )
        logger.info(f"LLM raw tagging response: {response!r}")
        tags = parse_tag_list(response, tag_config)
        logger.info(f"Parsed tags: {tags}")
        return tags


class OllamaDirectClassifier:
    """Asks the model to pick agents directly; only configured names are kept."""

    def __init__(self, client: OllamaClient) -> None:
        self._client = client

    async def classify(self, request: ClassificationInput, user_config: UserConfig) -> list[str]:
        if not user_config.agents:
            return []
        settings = self._client.settings
        thinking = settings.should_use_thinking()
        configured = settings.temperature
        temperature = CLASSIFICATION_TEMPERATURE if configured is None else configured
        response = await self._client.generate(
            build_classification_prompt(request, user_config),
            temperature=temperature,
            num_predict=_num_predict(thinking),
            think=thinking,
        )
        logger.info(f"LLM raw classification response: {response!r}")
        return parse_choice_list(response, [a.name for a in user_config.agents])
