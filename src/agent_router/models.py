"""Request and response models for task classification."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from agent_router.errors import InputValidationError

MAX_PROMPT_LENGTH = 10_000
MAX_FILES_COUNT = 100
MAX_FILE_PATH_LENGTH = 1_000
MAX_BRANCH_LENGTH = 200


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


class GitContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    branch: str
    changed_files: list[str] = Field(default_factory=list)
    staged_files: list[str] = Field(default_factory=list)
    tag: str | None = None  # set when HEAD is tagged


class ClassificationInput(BaseModel):
    """A single routing request.

    Only ``associated_files`` feeds file_pattern/file_regex conditions; the
    git context contributes the branch name and nothing else to matching.
    """

    model_config = ConfigDict(frozen=True)

    task: str
    intent: str
    original_prompt: str | None = None
    associated_files: list[str] | None = None
    git_context: GitContext | None = None
    agent_config_path: str | None = None
    rules_config_path: str | None = None
    llm_tags_path: str | None = None
    # Legacy lifecycle trigger name (e.g. "pre_commit"), matched by git_lifecycle conditions.
    trigger: str | None = None

    def validate_limits(self) -> None:
        """Raise InputValidationError when any field exceeds its size limit."""
        for field_name, value in (
            ("task", self.task),
            ("intent", self.intent),
            ("original_prompt", self.original_prompt),
        ):
            if value is not None and _byte_len(value) > MAX_PROMPT_LENGTH:
                raise InputValidationError(
                    f"{field_name} too long: {_byte_len(value)} bytes "
                    f"(max: {MAX_PROMPT_LENGTH} bytes)"
                )

        if self.associated_files is not None:
            if len(self.associated_files) > MAX_FILES_COUNT:
                raise InputValidationError(
                    f"Too many associated_files: {len(self.associated_files)} "
                    f"(max: {MAX_FILES_COUNT})"
                )
            _check_paths(self.associated_files)

        if self.git_context is not None:
            ctx = self.git_context
            total = len(ctx.changed_files) + len(ctx.staged_files)
            if total > MAX_FILES_COUNT:
                raise InputValidationError(f"Too many files: {total} (max: {MAX_FILES_COUNT})")
            _check_paths([*ctx.changed_files, *ctx.staged_files])
            if _byte_len(ctx.branch) > MAX_BRANCH_LENGTH:
                raise InputValidationError(
                    f"branch name too long (max: {MAX_BRANCH_LENGTH} bytes)"
                )

        for field_name, path in (
            ("agent_config_path", self.agent_config_path),
            ("rules_config_path", self.rules_config_path),
            ("llm_tags_path", self.llm_tags_path),
        ):
            if path is not None and _byte_len(path) > MAX_FILE_PATH_LENGTH:
                raise InputValidationError(f"{field_name} too long")


def _check_paths(paths: list[str]) -> None:
    for path in paths:
        if _byte_len(path) > MAX_FILE_PATH_LENGTH:
            raise InputValidationError(
                f"File path too long: {_byte_len(path)} bytes "
                f"(max: {MAX_FILE_PATH_LENGTH} bytes)"
            )


class ClassificationMethod(StrEnum):
    RULES = "rules"
    RULES_LLM_TAGS = "rules+llm-tags"
    LLM = "llm"


class AgentRecommendation(BaseModel):
    name: str
    reason: str


class ClassificationResult(BaseModel):
    agents: list[AgentRecommendation] = Field(default_factory=list)
    reasoning: str
    method: ClassificationMethod
    llm_tags: list[str] | None = None

    @property
    def agent_names(self) -> list[str]:
        return [a.name for a in self.agents]


class Trigger(BaseModel):
    name: str  # condition kind, e.g. "file_pattern"
    description: str  # literal pattern or tag that fired


class InstructionContext(BaseModel):
    instructions: str | None = None
    files: list[str] = Field(default_factory=list)
    confidence: int = Field(ge=0, le=100)
    priority: int = Field(ge=0, le=100)


class AgentInfo(BaseModel):
    name: str
    description: str


class Instruction(BaseModel):
    trigger: Trigger
    context: InstructionContext
    route_to_agent: AgentInfo


class InstructionsResponse(BaseModel):
    instructions: list[Instruction] = Field(default_factory=list)
