"""Recursive evaluation of rule condition trees against a request."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from agent_router.models import ClassificationInput
from agent_router.rule_engine.models import (
    AllOf,
    AnyOf,
    Condition,
    ConditionKind,
    MatchInfo,
    RuleConditions,
    RulesConfig,
)
from agent_router.rule_engine.patterns import match_glob, match_regex

logger = logging.getLogger(__name__)

# Stand-in request for the tag pass: only llm_tag leaves can match against it.
_EMPTY_REQUEST = ClassificationInput(task="", intent="")


def files_for_evaluation(request: ClassificationInput) -> list[str]:
    """Files used for file_pattern/file_regex matching.

    Only the caller-declared ``associated_files``; git changed/staged files
    never take part in matching.
    """
    return list(request.associated_files or [])


def evaluate_condition(
    condition: Condition,
    request: ClassificationInput,
    tags: Collection[str],
) -> MatchInfo | None:
    """Evaluate one leaf. Malformed patterns are a non-match, never an error."""
    kind = condition.kind
    value = condition.value

    if kind is ConditionKind.FILE_PATTERN:
        files = files_for_evaluation(request)
        matched = bool(files) and match_glob(value, files)
    elif kind is ConditionKind.FILE_REGEX:
        files = files_for_evaluation(request)
        matched = bool(files) and match_regex(value, files)
    elif kind is ConditionKind.PROMPT_REGEX:
        texts = [request.task, request.intent]
        if request.original_prompt is not None:
            texts.append(request.original_prompt)
        matched = match_regex(value, texts)
    elif kind is ConditionKind.BRANCH_REGEX:
        ctx = request.git_context
        matched = ctx is not None and match_regex(value, [ctx.branch])
    elif kind is ConditionKind.LLM_TAG:
        matched = value in tags
    else:
        matched = request.trigger is not None and request.trigger == value

    if not matched:
        return None
    return MatchInfo(trigger_type=kind, trigger_value=value)


def evaluate(
    conditions: RuleConditions,
    request: ClassificationInput,
    tags: Collection[str] = (),
) -> MatchInfo | None:
    """Evaluate a condition tree.

    ``any_of`` reports the first matching child. ``all_of`` fails as soon as
    one child fails and otherwise reports the first child's match, even
    though every child matched.
    """
    if isinstance(conditions, AnyOf):
        for child in conditions.any_of:
            info = evaluate(child, request, tags)
            if info is not None:
                return info
        return None
    if isinstance(conditions, AllOf):
        first: MatchInfo | None = None
        for child in conditions.all_of:
            info = evaluate(child, request, tags)
            if info is None:
                return None
            if first is None:
                first = info
        return first
    return evaluate_condition(conditions, request, tags)


def contains_llm_tags(conditions: RuleConditions) -> bool:
    """True if any leaf anywhere in the tree is an llm_tag condition."""
    if isinstance(conditions, AnyOf):
        return any(contains_llm_tags(c) for c in conditions.any_of)
    if isinstance(conditions, AllOf):
        return any(contains_llm_tags(c) for c in conditions.all_of)
    return conditions.kind is ConditionKind.LLM_TAG


def _extend_unique(agents: list[str], names: Iterable[str]) -> None:
    for name in names:
        if name not in agents:
            agents.append(name)


def apply_rules(request: ClassificationInput, rules_config: RulesConfig) -> list[str]:
    """File/branch/prompt pass: evaluate every rule with no tags.

    Returns matched agent names, deduplicated in first-seen order.
    """
    agents: list[str] = []
    for rule in rules_config.rules:
        info = evaluate(rule.conditions, request)
        if info is not None:
            logger.debug(f"Rule matched via {info.trigger_type}='{info.trigger_value}'")
            _extend_unique(agents, rule.route_to_subagents)
    return agents


def apply_tag_rules(tags: Collection[str], rules_config: RulesConfig) -> list[str]:
    """Tag pass: evaluate only rules containing an llm_tag leaf, against the tags alone.

    Non-tag leaves see an empty request here, so an ``all_of`` mixing tag
    and file leaves cannot match in this pass.
    """
    agents: list[str] = []
    for rule in rules_config.rules:
        if not contains_llm_tags(rule.conditions):
            continue
        if evaluate(rule.conditions, _EMPTY_REQUEST, tags) is not None:
            _extend_unique(agents, rule.route_to_subagents)
    return agents


def file_matches(conditions: RuleConditions, path: str) -> bool:
    """Whether a single file satisfies the tree on its own.

    Only file_pattern/file_regex leaves can match a lone file; every other
    leaf kind counts as a non-match.
    """
    if isinstance(conditions, AnyOf):
        return any(file_matches(c, path) for c in conditions.any_of)
    if isinstance(conditions, AllOf):
        return all(file_matches(c, path) for c in conditions.all_of)
    if conditions.kind is ConditionKind.FILE_PATTERN:
        return match_glob(conditions.value, [path])
    if conditions.kind is ConditionKind.FILE_REGEX:
        return match_regex(conditions.value, [path])
    return False


def matched_files(conditions: RuleConditions, files: list[str]) -> list[str]:
    """Files that individually satisfy the tree, or all files when none do."""
    matched = [f for f in files if file_matches(conditions, f)]
    return matched or list(files)
