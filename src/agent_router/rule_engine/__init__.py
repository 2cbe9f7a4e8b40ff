"""Rule engine: condition trees, pattern matching, and rule evaluation."""

from agent_router.rule_engine.evaluator import (
    apply_rules,
    apply_tag_rules,
    contains_llm_tags,
    evaluate,
    evaluate_condition,
    file_matches,
    files_for_evaluation,
    matched_files,
)
from agent_router.rule_engine.models import (
    AllOf,
    AnyOf,
    Condition,
    ConditionKind,
    MatchInfo,
    Rule,
    RuleConditions,
    RulesConfig,
)
from agent_router.rule_engine.patterns import (
    GLOB_CACHE,
    REGEX_CACHE,
    PatternCache,
    match_glob,
    match_regex,
)

__all__ = [
    "GLOB_CACHE",
    "REGEX_CACHE",
    "AllOf",
    "AnyOf",
    "Condition",
    "ConditionKind",
    "MatchInfo",
    "PatternCache",
    "Rule",
    "RuleConditions",
    "RulesConfig",
    "apply_rules",
    "apply_tag_rules",
    "contains_llm_tags",
    "evaluate",
    "evaluate_condition",
    "file_matches",
    "files_for_evaluation",
    "match_glob",
    "match_regex",
    "matched_files",
]
