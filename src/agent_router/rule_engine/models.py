"""Pydantic models for routing rules and their condition trees."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ConditionKind(StrEnum):
    FILE_PATTERN = "file_pattern"
    FILE_REGEX = "file_regex"
    PROMPT_REGEX = "prompt_regex"
    BRANCH_REGEX = "branch_regex"
    LLM_TAG = "llm_tag"
    GIT_LIFECYCLE = "git_lifecycle"  # legacy


FILE_KINDS = frozenset({ConditionKind.FILE_PATTERN, ConditionKind.FILE_REGEX})


class Condition(BaseModel):
    """A single leaf predicate, serialized as ``{"<kind>": "<value>"}``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    file_pattern: str | None = None
    file_regex: str | None = None
    prompt_regex: str | None = None
    branch_regex: str | None = None
    llm_tag: str | None = None
    git_lifecycle: str | None = None

    @model_validator(mode="after")
    def exactly_one_kind(self):
        set_fields = [kind for kind in ConditionKind if getattr(self, kind.value) is not None]
        if len(set_fields) != 1:
            raise ValueError(
                f"condition must set exactly one of {[k.value for k in ConditionKind]}, "
                f"got {[k.value for k in set_fields]}"
            )
        return self

    @property
    def kind(self) -> ConditionKind:
        for kind in ConditionKind:
            if getattr(self, kind.value) is not None:
                return kind
        raise AssertionError("unreachable: validated condition has no kind")

    @property
    def value(self) -> str:
        return getattr(self, self.kind.value)

    @classmethod
    def of(cls, kind: ConditionKind | str, value: str) -> Condition:
        return cls(**{ConditionKind(kind).value: value})


class AnyOf(BaseModel):
    """Logical OR over child conditions."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    any_of: list[RuleConditions] = Field(min_length=1)


class AllOf(BaseModel):
    """Logical AND over child conditions."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    all_of: list[RuleConditions] = Field(min_length=1)


RuleConditions = Condition | AnyOf | AllOf


class Rule(BaseModel):
    description: str | None = None
    conditions: RuleConditions
    route_to_subagents: list[str]


class RulesConfig(BaseModel):
    rules: list[Rule] = Field(default_factory=list)

    def validate_content(self) -> None:
        """Check load-time invariants. Raises ValueError on the first violation."""
        if not self.rules:
            raise ValueError("RulesConfig must contain at least one rule")
        for idx, rule in enumerate(self.rules, 1):
            if not rule.route_to_subagents:
                raise ValueError(f"Rule #{idx} must route to at least one agent")
            if any(not name.strip() for name in rule.route_to_subagents):
                raise ValueError(f"Rule #{idx} has empty agent name")


AnyOf.model_rebuild()
AllOf.model_rebuild()
Rule.model_rebuild()


@dataclass(frozen=True)
class MatchInfo:
    """Which leaf fired for a matching condition tree, and with what literal."""

    trigger_type: ConditionKind
    trigger_value: str
