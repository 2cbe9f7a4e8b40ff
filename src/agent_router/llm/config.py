"""Settings for the Ollama-backed tagging service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_MODEL_NAME = "ggml-org/SmolLM3-3B-GGUF"
HF_PREFIX = "hf.co/"

# Model families that accept Ollama's `think` parameter.
THINKING_CAPABLE_MODELS = (
    "deepseek-r1",
    "qwen3",
    "qwen2.5",
    "cogito",
    "exaone-deep",
    "qwq",
    "marco-o1",
    "aya-expanse",
)


class ModelSource(StrEnum):
    OLLAMA = "ollama"
    HUGGINGFACE = "huggingface"


@dataclass
class LlmSettings:
    ollama_url: str = DEFAULT_OLLAMA_URL
    model_name: str = DEFAULT_MODEL_NAME
    model_source: ModelSource = ModelSource.HUGGINGFACE
    thinking_mode: bool = True
    temperature: float | None = None
    request_timeout: float = 60.0

    @property
    def effective_model_name(self) -> str:
        """Model name as sent to Ollama (HuggingFace models get the hf.co/ prefix)."""
        if self.model_source == ModelSource.HUGGINGFACE:
            return f"{HF_PREFIX}{self.model_name}"
        return self.model_name

    def supports_thinking(self) -> bool:
        lowered = self.model_name.lower()
        return any(m in lowered for m in THINKING_CAPABLE_MODELS)

    def should_use_thinking(self) -> bool:
        return self.thinking_mode and self.supports_thinking()


def load_llm_settings() -> LlmSettings:
    """Build settings from OLLAMA_URL, MODEL_NAME, MODEL_SOURCE, THINKING_MODE, TEMPERATURE."""
    settings = LlmSettings()

    if url := os.environ.get("OLLAMA_URL"):
        settings.ollama_url = url
    if not settings.ollama_url.startswith(("http://localhost", "http://127.0.0.1")):
        logger.warning(
            f"OLLAMA_URL is not localhost: {settings.ollama_url}. "
            "Only use remote Ollama instances you trust."
        )

    model_name = os.environ.get("MODEL_NAME", DEFAULT_MODEL_NAME)
    source_env = os.environ.get("MODEL_SOURCE", "").lower()
    if model_name.startswith(HF_PREFIX):
        model_name = model_name[len(HF_PREFIX) :]
        settings.model_source = ModelSource.HUGGINGFACE
    elif source_env == "huggingface":
        settings.model_source = ModelSource.HUGGINGFACE
    elif "/" in model_name and ":" not in model_name:
        # org/repo without a tag is a HuggingFace repository
        settings.model_source = ModelSource.HUGGINGFACE
    else:
        settings.model_source = ModelSource.OLLAMA
    settings.model_name = model_name

    if thinking := os.environ.get("THINKING_MODE"):
        settings.thinking_mode = thinking.lower() != "false" and thinking != "0"

    if temperature := os.environ.get("TEMPERATURE"):
        try:
            settings.temperature = min(max(float(temperature), 0.0), 1.0)
        except ValueError:
            logger.warning(f"Ignoring invalid TEMPERATURE value: {temperature}")

    return settings
