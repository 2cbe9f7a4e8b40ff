"""Agent directory and semantic tag definitions."""

from agent_router.registry.models import (
    AgentDefinition,
    LlmTagConfig,
    LlmTagDefinition,
    UserConfig,
)

__all__ = [
    "AgentDefinition",
    "LlmTagConfig",
    "LlmTagDefinition",
    "UserConfig",
]
