"""Builds per-agent routing instructions from rule matches."""

from __future__ import annotations

import logging
from collections.abc import Collection

from agent_router.models import (
    AgentInfo,
    ClassificationInput,
    Instruction,
    InstructionContext,
    Trigger,
)
from agent_router.registry.models import UserConfig
from agent_router.rule_engine.evaluator import evaluate, files_for_evaluation, matched_files
from agent_router.rule_engine.models import ConditionKind, MatchInfo, RulesConfig

logger = logging.getLogger(__name__)

DETERMINISTIC_CONFIDENCE = 100
TAG_CONFIDENCE = 85


def confidence_for(match: MatchInfo) -> int:
    """Tag matches carry model uncertainty; every other trigger is deterministic."""
    if match.trigger_type is ConditionKind.LLM_TAG:
        return TAG_CONFIDENCE
    return DETERMINISTIC_CONFIDENCE


class InstructionBuilder:
    """Turns rule matches into at most one Instruction per target agent.

    Rules are visited in configuration order and the first rule to match a
    given agent decides its trigger, files and confidence. Agents named by a
    rule but missing from the agent directory are skipped.
    """

    def __init__(self, rules_config: RulesConfig, user_config: UserConfig) -> None:
        self._rules = rules_config
        self._user = user_config

    def build(self, request: ClassificationInput, tags: Collection[str]) -> list[Instruction]:
        instructions: list[Instruction] = []
        emitted: set[str] = set()
        files = files_for_evaluation(request)

        for rule in self._rules.rules:
            match = evaluate(rule.conditions, request, tags)
            if match is None:
                continue

            for agent_name in rule.route_to_subagents:
                if agent_name in emitted:
                    continue
                agent = self._user.get(agent_name)
                if agent is None:
                    logger.debug(f"Rule targets unknown agent '{agent_name}', skipping")
                    continue

                instructions.append(
                    Instruction(
                        trigger=Trigger(
                            name=match.trigger_type.value,
                            description=match.trigger_value,
                        ),
                        context=InstructionContext(
                            instructions=agent.instructions,
                            files=matched_files(rule.conditions, files),
                            confidence=confidence_for(match),
                            priority=agent.priority,
                        ),
                        route_to_agent=AgentInfo(name=agent.name, description=agent.description),
                    )
                )
                emitted.add(agent_name)

        return instructions
