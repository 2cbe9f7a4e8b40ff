"""Pydantic models for the agent directory and semantic tag definitions."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AgentDefinition(BaseModel):
    """Static metadata for one routable agent."""

    name: str
    description: str
    instructions: str | None = None
    priority: int = Field(default=50, ge=0, le=100)


class UserConfig(BaseModel):
    agents: list[AgentDefinition] = Field(default_factory=list)

    def get(self, name: str) -> AgentDefinition | None:
        return next((a for a in self.agents if a.name == name), None)

    def validate_content(self) -> None:
        if not self.agents:
            raise ValueError("UserConfig must contain at least one agent")
        _check_names([a.name for a in self.agents], "Agent")


class LlmTagDefinition(BaseModel):
    name: str
    description: str
    examples: list[str] = Field(default_factory=list)


class LlmTagConfig(BaseModel):
    tags: list[LlmTagDefinition] = Field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.tags]

    def validate_content(self) -> None:
        if not self.tags:
            raise ValueError("LlmTagConfig must contain at least one tag")
        _check_names(self.names, "Tag")


def _check_names(names: list[str], label: str) -> None:
    seen: set[str] = set()
    for name in names:
        if not name.strip():
            raise ValueError(f"{label} name cannot be empty")
        if name in seen:
            raise ValueError(f"Duplicate {label.lower()} name: {name}")
        seen.add(name)
