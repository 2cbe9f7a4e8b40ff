"""Shared fixtures for agent-router tests."""

import json
from pathlib import Path

import pytest

from agent_router.config import ResolvedConfig
from agent_router.models import ClassificationInput, GitContext
from agent_router.registry.models import LlmTagConfig, UserConfig
from agent_router.rule_engine.models import RulesConfig

AGENTS = {
    "agents": [
        {
            "name": "security-reviewer",
            "description": "Reviews auth code",
            "instructions": "Look for injection",
            "priority": 90,
        },
        {"name": "test-writer", "description": "Writes tests", "priority": 60},
        {"name": "docs-writer", "description": "Writes docs"},
        {"name": "release-manager", "description": "Handles releases", "priority": 70},
    ]
}

RULES = {
    "rules": [
        {
            "description": "auth",
            "conditions": {
                "any_of": [
                    {"file_pattern": "**/auth/**"},
                    {"llm_tag": "security"},
                ]
            },
            "route_to_subagents": ["security-reviewer"],
        },
        {
            "description": "python tests",
            "conditions": {"file_pattern": "*.py"},
            "route_to_subagents": ["test-writer"],
        },
        {
            "description": "docs",
            "conditions": {"llm_tag": "documentation"},
            "route_to_subagents": ["docs-writer"],
        },
        {
            "description": "release",
            "conditions": {"branch_regex": "^release/"},
            "route_to_subagents": ["release-manager"],
        },
    ]
}

TAGS = {
    "tags": [
        {"name": "security", "description": "Security work", "examples": ["hash passwords"]},
        {"name": "documentation", "description": "Docs work"},
        {"name": "testing", "description": "Test work"},
    ]
}


class FakeTagIdentifier:
    """Returns a fixed tag list and records every call."""

    def __init__(self, tags: list[str] | None = None, error: Exception | None = None) -> None:
        self.tags = tags or []
        self.error = error
        self.calls: list[tuple[ClassificationInput, LlmTagConfig]] = []

    async def identify_tags(
        self, request: ClassificationInput, tag_config: LlmTagConfig
    ) -> list[str]:
        self.calls.append((request, tag_config))
        if self.error is not None:
            raise self.error
        return list(self.tags)


class FakeDirectClassifier:
    def __init__(self, agents: list[str]) -> None:
        self.agents = agents
        self.calls = 0

    async def classify(self, request: ClassificationInput, user_config: UserConfig) -> list[str]:
        self.calls += 1
        return list(self.agents)


def make_request(
    task: str = "do something",
    intent: str = "help",
    *,
    files: list[str] | None = None,
    branch: str | None = None,
    changed: list[str] | None = None,
    **kwargs,
) -> ClassificationInput:
    git_context = None
    if branch is not None or changed is not None:
        git_context = GitContext(branch=branch or "main", changed_files=changed or [])
    return ClassificationInput(
        task=task,
        intent=intent,
        associated_files=files,
        git_context=git_context,
        **kwargs,
    )


def write_json(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def user_config() -> UserConfig:
    return UserConfig.model_validate(AGENTS)


@pytest.fixture
def rules_config() -> RulesConfig:
    return RulesConfig.model_validate(RULES)


@pytest.fixture
def tag_config() -> LlmTagConfig:
    return LlmTagConfig.model_validate(TAGS)


@pytest.fixture
def resolved_config(user_config, rules_config, tag_config) -> ResolvedConfig:
    return ResolvedConfig(user=user_config, rules=rules_config, tags=tag_config)


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """A directory holding valid agents.json, rules.json and llm-tags.json."""
    write_json(tmp_path / "agents.json", AGENTS)
    write_json(tmp_path / "rules.json", RULES)
    write_json(tmp_path / "llm-tags.json", TAGS)
    return tmp_path
