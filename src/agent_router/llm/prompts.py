"""Prompt construction and response parsing for the tagging model."""

from __future__ import annotations

import re

from agent_router.models import ClassificationInput
from agent_router.registry.models import LlmTagConfig, UserConfig

_NUMBER_RE = re.compile(r"\d+")


def sanitize_input(text: str) -> str:
    """Collapse multi-line input to a single line of trimmed, non-empty lines."""
    return " ".join(line.strip() for line in text.splitlines() if line.strip())


def _files_line(request: ClassificationInput) -> str:
    # associated_files win over git changed files; this only informs the model
    if request.associated_files is not None:
        if not request.associated_files:
            return "none"
        return ", ".join(sanitize_input(f) for f in request.associated_files)
    if request.git_context is not None:
        return ", ".join(sanitize_input(f) for f in request.git_context.changed_files)
    return "none"


def _request_context(request: ClassificationInput) -> str:
    lines = [
        f'Task: "{sanitize_input(request.task)}"',
        f'Intent: "{sanitize_input(request.intent)}"',
    ]
    if request.original_prompt is not None:
        lines.append(f'Original request: "{sanitize_input(request.original_prompt)}"')
    lines.append(f"Changed files: {_files_line(request)}")
    return "\n".join(lines)


def build_tagging_prompt(request: ClassificationInput, tag_config: LlmTagConfig) -> str:
    entries = []
    for i, tag in enumerate(tag_config.tags, 1):
        entry = f"{i}. {tag.name} - {tag.description}"
        if tag.examples:
            entry += f"\n   Examples: {', '.join(tag.examples)}"
        entries.append(entry)

    return f"""You are a code task classifier. Be CONSERVATIVE - only select tags that CLEARLY match.

{_request_context(request)}

Which tags apply? Choose from:
{chr(10).join(entries)}

IMPORTANT:
- Only select tags if there is CLEAR evidence in the task/intent. If the task is vague or generic (like "help me" or "do something"), reply "0"
- Do NOT guess or assume. When in doubt, reply "0"

Reply with the number(s) only, comma-separated. Reply "0" if none apply."""


def build_classification_prompt(request: ClassificationInput, user_config: UserConfig) -> str:
    entries = [f"{i}. {a.name} - {a.description}" for i, a in enumerate(user_config.agents, 1)]

    return f"""You are routing a coding task to specialist agents. Be CONSERVATIVE.

{_request_context(request)}

Which agents should handle this task? Choose from:
{chr(10).join(entries)}

Reply with the number(s) only, comma-separated. Reply "0" if no agent fits."""


def parse_choice_list(response: str, names: list[str]) -> list[str]:
    """Map a numbered reply ("1, 3") back to names, deduplicated in reply order.

    Numbers are 1-based; out-of-range numbers (including "0") are ignored.
    When the reply holds no usable number, fall back to a case-insensitive
    scan for the names themselves.
    """
    found: list[str] = []
    for match in _NUMBER_RE.finditer(response):
        num = int(match.group())
        if 0 < num <= len(names) and names[num - 1] not in found:
            found.append(names[num - 1])

    if not found:
        lowered = response.lower()
        for name in names:
            if name.lower() in lowered and name not in found:
                found.append(name)
    return found


def parse_tag_list(response: str, tag_config: LlmTagConfig) -> list[str]:
    return parse_choice_list(response, tag_config.names)
