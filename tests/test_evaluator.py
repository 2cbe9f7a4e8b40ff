"""Tests for condition-tree evaluation and rule application."""

import random

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
    RulesConfig,
)
from tests.conftest import make_request

TAG_POOL = [f"t{i}" for i in range(6)]


def _random_tree(rng: random.Random, depth: int):
    if depth == 0 or rng.random() < 0.3:
        return Condition.of(ConditionKind.LLM_TAG, rng.choice(TAG_POOL))
    children = [_random_tree(rng, depth - 1) for _ in range(rng.randint(1, 4))]
    if rng.random() < 0.5:
        return AnyOf(any_of=children)
    return AllOf(all_of=children)


def _reference(tree, tags: set[str]) -> MatchInfo | None:
    if isinstance(tree, AnyOf):
        for child in tree.any_of:
            info = _reference(child, tags)
            if info is not None:
                return info
        return None
    if isinstance(tree, AllOf):
        infos = [_reference(child, tags) for child in tree.all_of]
        if any(i is None for i in infos):
            return None
        return infos[0]
    if tree.value in tags:
        return MatchInfo(ConditionKind.LLM_TAG, tree.value)
    return None


class TestEvaluateTrees:
    def test_random_trees_follow_boolean_semantics(self):
        rng = random.Random(1234)
        request = make_request()
        for _ in range(300):
            tree = _random_tree(rng, depth=4)
            tags = {t for t in TAG_POOL if rng.random() < 0.5}
            assert evaluate(tree, request, tags) == _reference(tree, tags)

    def test_any_of_reports_first_matching_child(self):
        tree = AnyOf(
            any_of=[
                Condition.of("llm_tag", "missing"),
                Condition.of("llm_tag", "b"),
                Condition.of("llm_tag", "a"),
            ]
        )
        info = evaluate(tree, make_request(), {"a", "b"})
        assert info == MatchInfo(ConditionKind.LLM_TAG, "b")

    def test_all_of_reports_first_child(self):
        tree = AllOf(all_of=[Condition.of("file_pattern", "*.py"), Condition.of("llm_tag", "x")])
        info = evaluate(tree, make_request(files=["app.py"]), {"x"})
        assert info == MatchInfo(ConditionKind.FILE_PATTERN, "*.py")

    def test_all_of_fails_when_any_child_fails(self):
        tree = AllOf(all_of=[Condition.of("file_pattern", "*.py"), Condition.of("llm_tag", "x")])
        assert evaluate(tree, make_request(files=["app.py"]), set()) is None

    def test_evaluation_is_deterministic(self):
        tree = AnyOf(any_of=[Condition.of("prompt_regex", "deploy"), Condition.of("llm_tag", "x")])
        request = make_request("deploy it")
        assert evaluate(tree, request) == evaluate(tree, request)


class TestLeafConditions:
    def test_file_pattern_uses_associated_files(self):
        cond = Condition.of("file_pattern", "*.py")
        assert evaluate_condition(cond, make_request(files=["a.py"]), ()) is not None

    def test_file_conditions_ignore_git_changed_files(self):
        request = make_request(changed=["src/auth/login.py"])
        assert files_for_evaluation(request) == []
        assert evaluate_condition(Condition.of("file_pattern", "**/auth/**"), request, ()) is None
        assert evaluate_condition(Condition.of("file_regex", "auth"), request, ()) is None

    def test_file_regex(self):
        cond = Condition.of("file_regex", r"test_.*\.py$")
        assert evaluate_condition(cond, make_request(files=["tests/test_x.py"]), ()) is not None
        assert evaluate_condition(cond, make_request(files=["x.py"]), ()) is None

    def test_prompt_regex_checks_task_intent_and_original_prompt(self):
        cond = Condition.of("prompt_regex", "(?i)migrate")
        assert evaluate_condition(cond, make_request("Migrate db"), ()) is not None
        assert evaluate_condition(cond, make_request(intent="migrate"), ()) is not None
        req = make_request(original_prompt="please MIGRATE the schema")
        assert evaluate_condition(cond, req, ()) is not None
        assert evaluate_condition(cond, make_request(), ()) is None

    def test_branch_regex_needs_git_context(self):
        cond = Condition.of("branch_regex", "^release/")
        assert evaluate_condition(cond, make_request(branch="release/1.2"), ()) is not None
        assert evaluate_condition(cond, make_request(branch="main"), ()) is None
        assert evaluate_condition(cond, make_request(), ()) is None

    def test_llm_tag_is_exact(self):
        cond = Condition.of("llm_tag", "security")
        assert evaluate_condition(cond, make_request(), ["security"]) is not None
        assert evaluate_condition(cond, make_request(), ["Security"]) is None

    def test_git_lifecycle_matches_trigger(self):
        cond = Condition.of("git_lifecycle", "pre_commit")
        info = evaluate_condition(cond, make_request(trigger="pre_commit"), ())
        assert info == MatchInfo(ConditionKind.GIT_LIFECYCLE, "pre_commit")
        assert evaluate_condition(cond, make_request(trigger="pre_push"), ()) is None
        assert evaluate_condition(cond, make_request(), ()) is None

    def test_invalid_pattern_is_non_match(self):
        assert evaluate_condition(Condition.of("prompt_regex", "("), make_request("("), ()) is None
        cond = Condition.of("file_pattern", "***")
        assert evaluate_condition(cond, make_request(files=["a"]), ()) is None


class TestApplyRules:
    def test_dedup_in_first_seen_order(self):
        config = RulesConfig.model_validate(
            {
                "rules": [
                    {"conditions": {"file_pattern": "*.py"}, "route_to_subagents": ["b", "a"]},
                    {"conditions": {"prompt_regex": "fix"}, "route_to_subagents": ["a", "c"]},
                    {"conditions": {"llm_tag": "x"}, "route_to_subagents": ["d"]},
                ]
            }
        )
        agents = apply_rules(make_request("fix bug", files=["a.py"]), config)
        assert agents == ["b", "a", "c"]

    def test_tag_rules_never_match_without_tags(self, rules_config):
        assert apply_rules(make_request(), rules_config) == []

    def test_tag_pass_only_uses_tags(self, rules_config):
        assert apply_tag_rules(["documentation"], rules_config) == ["docs-writer"]
        assert apply_tag_rules(["security", "documentation"], rules_config) == [
            "security-reviewer",
            "docs-writer",
        ]

    def test_tag_pass_cannot_satisfy_mixed_all_of(self):
        config = RulesConfig.model_validate(
            {
                "rules": [
                    {
                        "conditions": {
                            "all_of": [{"llm_tag": "security"}, {"file_pattern": "*.py"}]
                        },
                        "route_to_subagents": ["a"],
                    }
                ]
            }
        )
        assert apply_tag_rules(["security"], config) == []

    def test_contains_llm_tags(self):
        assert contains_llm_tags(AnyOf(any_of=[AllOf(all_of=[Condition.of("llm_tag", "x")])]))
        assert not contains_llm_tags(Condition.of("file_pattern", "*"))


class TestMatchedFiles:
    def test_individual_matches(self):
        tree = AnyOf(any_of=[Condition.of("file_pattern", "*.py"), Condition.of("llm_tag", "x")])
        assert matched_files(tree, ["a.py", "b.md", "c.py"]) == ["a.py", "c.py"]

    def test_falls_back_to_all_files(self):
        tree = Condition.of("llm_tag", "x")
        assert matched_files(tree, ["a.py", "b.md"]) == ["a.py", "b.md"]

    def test_no_files(self):
        assert matched_files(Condition.of("file_pattern", "*"), []) == []

    def test_file_matches_all_of(self):
        py = Condition.of("file_pattern", "*.py")
        assert file_matches(AllOf(all_of=[py, Condition.of("file_regex", "^src/")]), "src/a.py")
        assert not file_matches(AllOf(all_of=[py, Condition.of("llm_tag", "x")]), "src/a.py")

    def test_repeated_evaluation_is_stable(self):
        config = RulesConfig.model_validate(
            {
                "rules": [
                    {
                        "conditions": {
                            "any_of": [
                                {
                                    "all_of": [
                                        {"any_of": [{"file_regex": "^src/"}, {"llm_tag": "x"}]},
                                        {"file_pattern": "*.py"},
                                    ]
                                },
                                {"branch_regex": "^hotfix/"},
                            ]
                        },
                        "route_to_subagents": ["a"],
                    }
                ]
            }
        )
        cases = [
            (make_request(files=["src/a.py"]), ["a"]),
            (make_request(files=["lib/a.py"]), []),
            (make_request(files=["src/a.md"], branch="hotfix/1"), ["a"]),
        ]
        for _ in range(3):
            for request, expected in cases:
                assert apply_rules(request, config) == expected
