"""Loading and resolution of the agent, rules and tag configuration documents."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError

from agent_router.errors import ConfigError
from agent_router.models import ClassificationInput
from agent_router.registry.models import LlmTagConfig, UserConfig
from agent_router.rule_engine.models import RulesConfig

logger = logging.getLogger(__name__)

DEFAULT_AGENTS_CONFIG = "./config/agents.json"
DEFAULT_RULES_CONFIG = "./config/rules.json"
DEFAULT_LLM_TAGS_CONFIG = "./config/llm-tags.json"

AGENTS_CONFIG_ENV = "AGENTS_CONFIG_PATH"
RULES_CONFIG_ENV = "RULES_CONFIG_PATH"
LLM_TAGS_CONFIG_ENV = "LLM_TAGS_CONFIG_PATH"

MAX_CONFIG_FILE_SIZE = 1_048_576  # 1 MiB

_M = TypeVar("_M", UserConfig, RulesConfig, LlmTagConfig)


def validate_config_path(path: str | Path) -> Path:
    """Resolve a config path and check extension and size.

    Symlinks and ``..`` components are resolved first, so the checks apply to
    the file actually read.
    """
    if isinstance(path, str) and not path.strip():
        raise ConfigError("Config path cannot be empty")
    try:
        resolved = Path(path).resolve(strict=True)
    except (OSError, RuntimeError, ValueError) as e:
        raise ConfigError(f"Failed to resolve path: {path}") from e

    if resolved.suffix != ".json":
        raise ConfigError("Config files must have .json extension")

    try:
        size = resolved.stat().st_size
    except OSError as e:
        raise ConfigError(f"Failed to read file metadata: {resolved}") from e
    if size > MAX_CONFIG_FILE_SIZE:
        raise ConfigError(
            f"Config file too large: {size} bytes (max: {MAX_CONFIG_FILE_SIZE} bytes)"
        )
    return resolved


def _load(path: str | Path, model: type[_M], label: str) -> _M:
    resolved = validate_config_path(path)
    try:
        text = resolved.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read {label} config from {resolved}") from e
    try:
        config = model.model_validate_json(text)
    except ValidationError as e:
        raise ConfigError(f"Failed to parse {label} config from {resolved}: {e}") from e
    try:
        config.validate_content()
    except ValueError as e:
        raise ConfigError(f"Invalid {label} config in {resolved}: {e}") from e
    return config


def load_user_config(path: str | Path) -> UserConfig:
    return _load(path, UserConfig, "agent")


def load_rules_config(path: str | Path) -> RulesConfig:
    return _load(path, RulesConfig, "rules")


def load_llm_tag_config(path: str | Path) -> LlmTagConfig:
    return _load(path, LlmTagConfig, "LLM tag")


def _default_path(explicit: str | Path | None, env_var: str, default: str) -> str | Path:
    """Precedence: explicit argument, then environment variable, then default."""
    if explicit is not None:
        return explicit
    if env_path := os.environ.get(env_var):
        logger.info(f"Using {env_var} from environment: {env_path}")
        return env_path
    return default


@dataclass(frozen=True)
class ResolvedConfig:
    """The three configuration documents used for one classification."""

    user: UserConfig
    rules: RulesConfig
    tags: LlmTagConfig

    @classmethod
    def load(
        cls,
        *,
        agents_path: str | Path | None = None,
        rules_path: str | Path | None = None,
        tags_path: str | Path | None = None,
    ) -> ResolvedConfig:
        """Load all three documents, falling back to env vars and defaults."""
        config = cls(
            user=load_user_config(
                _default_path(agents_path, AGENTS_CONFIG_ENV, DEFAULT_AGENTS_CONFIG)
            ),
            rules=load_rules_config(
                _default_path(rules_path, RULES_CONFIG_ENV, DEFAULT_RULES_CONFIG)
            ),
            tags=load_llm_tag_config(
                _default_path(tags_path, LLM_TAGS_CONFIG_ENV, DEFAULT_LLM_TAGS_CONFIG)
            ),
        )
        logger.info(
            f"Configs loaded: {len(config.user.agents)} agents, "
            f"{len(config.tags.tags)} tags, {len(config.rules.rules)} rules"
        )
        return config

    def for_request(self, request: ClassificationInput) -> ResolvedConfig:
        """Apply a request's override paths.

        Overrides are loaded fresh and scoped to the returned value; this
        instance is left untouched.
        """
        overrides = (request.agent_config_path, request.rules_config_path, request.llm_tags_path)
        if all(path is None for path in overrides):
            return self

        user = self.user
        rules = self.rules
        tags = self.tags
        if request.agent_config_path is not None:
            logger.info(f"Loading agent config from request path: {request.agent_config_path}")
            user = load_user_config(request.agent_config_path)
        if request.rules_config_path is not None:
            logger.info(f"Loading rules config from request path: {request.rules_config_path}")
            rules = load_rules_config(request.rules_config_path)
        if request.llm_tags_path is not None:
            logger.info(f"Loading LLM tag config from request path: {request.llm_tags_path}")
            tags = load_llm_tag_config(request.llm_tags_path)
        return ResolvedConfig(user=user, rules=rules, tags=tags)
