"""Multi-stage classification: fast rules, semantic tags, tag rules, fallback."""

from __future__ import annotations

import logging

from agent_router.classification.instructions import InstructionBuilder
from agent_router.config import ResolvedConfig
from agent_router.errors import ClassificationError
from agent_router.llm.client import OllamaClient
from agent_router.llm.config import LlmSettings, load_llm_settings
from agent_router.llm.tagging import (
    DirectClassifier,
    OllamaDirectClassifier,
    OllamaTagIdentifier,
    TagIdentifier,
)
from agent_router.models import (
    AgentRecommendation,
    ClassificationInput,
    ClassificationMethod,
    ClassificationResult,
    InstructionsResponse,
)
from agent_router.rule_engine.evaluator import apply_rules, apply_tag_rules

logger = logging.getLogger(__name__)

LIFECYCLE_INTENT_KEYWORDS = ("commit", "pull_request")


def is_high_confidence(request: ClassificationInput) -> bool:
    """Whether fast-path rule matches can be returned without tagging.

    True when the caller declared files, git reports changed files, or the
    intent names a lifecycle event.
    """
    if request.associated_files:
        return True
    if request.git_context is not None and request.git_context.changed_files:
        return True
    intent = request.intent.lower()
    return any(keyword in intent for keyword in LIFECYCLE_INTENT_KEYWORDS)


def _recommend(names: list[str], reason: str) -> list[AgentRecommendation]:
    return [AgentRecommendation(name=name, reason=reason) for name in names]


class Classifier:
    """Decides which agents handle a request.

    With no ``direct_classifier`` an empty match set is a valid answer and
    the model never selects agents itself. Supplying one enables a final
    direct-classification fallback when rules and tags match nothing.
    """

    def __init__(
        self,
        config: ResolvedConfig,
        tag_identifier: TagIdentifier,
        *,
        direct_classifier: DirectClassifier | None = None,
        client: OllamaClient | None = None,
    ) -> None:
        self._config = config
        self._tag_identifier = tag_identifier
        self._direct_classifier = direct_classifier
        self._client = client

    @classmethod
    def from_environment(
        cls,
        settings: LlmSettings | None = None,
        *,
        llm_fallback: bool = False,
    ) -> Classifier:
        """Load startup configs (env vars or defaults) and wire the Ollama collaborators."""
        config = ResolvedConfig.load()
        client = OllamaClient(settings or load_llm_settings())
        return cls(
            config,
            OllamaTagIdentifier(client),
            direct_classifier=OllamaDirectClassifier(client) if llm_fallback else None,
            client=client,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def is_ready(self) -> bool:
        """Whether the tagging service answers. Always true for injected collaborators."""
        if self._client is None:
            return True
        return await self._client.is_running()

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    def _prepare(self, request: ClassificationInput) -> ResolvedConfig:
        request.validate_limits()
        return self._config.for_request(request)

    async def _identify_tags(
        self, request: ClassificationInput, config: ResolvedConfig
    ) -> list[str]:
        try:
            tags = await self._tag_identifier.identify_tags(request, config.tags)
        except Exception as e:
            raise ClassificationError(f"Tag identification failed: {e}") from e
        logger.info(f"LLM identified tags: {tags}")
        return tags

    async def classify(self, request: ClassificationInput) -> ClassificationResult:
        """Return a flat list of recommended agents for the request."""
        config = self._prepare(request)

        rule_agents = apply_rules(request, config.rules)
        if rule_agents and is_high_confidence(request):
            logger.info(f"Using rule-based classification: {len(rule_agents)} agents")
            return ClassificationResult(
                agents=_recommend(rule_agents, "Matched file pattern or trigger"),
                reasoning="Clear rule-based matches",
                method=ClassificationMethod.RULES,
            )

        tags = await self._identify_tags(request, config)
        agents = list(rule_agents)
        for name in apply_tag_rules(tags, config.rules):
            if name not in agents:
                agents.append(name)
        logger.info(f"Rules matched {len(agents)} agents")

        if agents or self._direct_classifier is None:
            return ClassificationResult(
                agents=_recommend(agents, "Matched via rules or LLM tags"),
                reasoning="Rules + LLM semantic tags",
                method=ClassificationMethod.RULES_LLM_TAGS,
                llm_tags=tags,
            )

        try:
            llm_agents = await self._direct_classifier.classify(request, config.user)
        except Exception as e:
            raise ClassificationError(f"Direct classification failed: {e}") from e
        logger.info(f"LLM direct classification selected {len(llm_agents)} agents")
        return ClassificationResult(
            agents=_recommend(llm_agents, "Selected by LLM classification"),
            reasoning="LLM direct classification",
            method=ClassificationMethod.LLM,
            llm_tags=tags,
        )

    async def classify_enhanced(self, request: ClassificationInput) -> InstructionsResponse:
        """Return one routing instruction per matched agent.

        Tags are always identified here since every rule, tag-based or not,
        is evaluated in a single pass.
        """
        config = self._prepare(request)
        tags = await self._identify_tags(request, config)
        instructions = InstructionBuilder(config.rules, config.user).build(request, tags)
        logger.info(f"Rules matched {len(instructions)} agents")
        return InstructionsResponse(instructions=instructions)
