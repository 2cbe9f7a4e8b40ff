"""Tagging-service collaborators backed by a local Ollama server."""

from agent_router.llm.client import OllamaClient
from agent_router.llm.config import LlmSettings, ModelSource, load_llm_settings
from agent_router.llm.tagging import (
    DirectClassifier,
    OllamaDirectClassifier,
    OllamaTagIdentifier,
    TagIdentifier,
)

__all__ = [
    "DirectClassifier",
    "LlmSettings",
    "ModelSource",
    "OllamaClient",
    "OllamaDirectClassifier",
    "OllamaTagIdentifier",
    "TagIdentifier",
    "load_llm_settings",
]
