"""MCP stdio server exposing the routing tools."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

import anyio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from agent_router import __version__
from agent_router.classification.strategy import Classifier
from agent_router.errors import RouterError
from agent_router.git import detect_git_context
from agent_router.models import ClassificationInput

logger = logging.getLogger(__name__)

_REQUEST_PROPERTIES: dict[str, Any] = {
    "task": {
        "type": "string",
        "description": "What the agent is doing (the current task or action being performed)",
    },
    "intent": {
        "type": "string",
        "description": (
            "The agent's intent for this tool call (e.g., 'review code before commit', "
            "'help debug an issue', 'suggest improvements')"
        ),
    },
    "original_prompt": {
        "type": "string",
        "description": (
            "Optional: The original user request, preserved for better semantic tagging."
        ),
    },
    "associated_files": {
        "type": "array",
        "items": {"type": "string"},
        "description": (
            "Optional: File paths relevant to this task, used for file-based routing rules. "
            "Git detection only supplies branch context."
        ),
    },
}

GET_INSTRUCTIONS_SCHEMA = {
    "type": "object",
    "properties": _REQUEST_PROPERTIES,
    "required": ["task", "intent"],
}

CLASSIFY_SCHEMA = {
    "type": "object",
    "properties": {
        **_REQUEST_PROPERTIES,
        "agent_config_path": {"type": "string", "description": "Override agents config"},
        "rules_config_path": {"type": "string", "description": "Override rules config"},
        "llm_tags_path": {"type": "string", "description": "Override LLM tags config"},
    },
    "required": ["task", "intent"],
}

_OVERRIDE_KEYS = ("agent_config_path", "rules_config_path", "llm_tags_path")

OLLAMA_NOT_RUNNING = "Ollama is not running. Start Ollama and load the model, then retry."


def build_request(args: dict[str, Any], *, allow_overrides: bool) -> ClassificationInput:
    """Build a request from tool arguments, attaching the detected git context."""
    fields: dict[str, Any] = {
        "task": args.get("task"),
        "intent": args.get("intent"),
        "original_prompt": args.get("original_prompt"),
        "associated_files": args.get("associated_files"),
        "git_context": detect_git_context(),
    }
    if allow_overrides:
        fields.update({k: args[k] for k in _OVERRIDE_KEYS if args.get(k) is not None})
    return ClassificationInput.model_validate(fields)


class ClassifierHolder:
    """Builds the classifier on first use, once per process."""

    def __init__(self, factory: Callable[[], Classifier]) -> None:
        self._factory = factory
        self._classifier: Classifier | None = None
        self._lock = asyncio.Lock()

    async def get(self) -> Classifier:
        async with self._lock:
            if self._classifier is None:
                logger.info("Initializing classifier for routing...")
                self._classifier = self._factory()
            return self._classifier


async def handle_tool(name: str, args: dict[str, Any], holder: ClassifierHolder) -> dict:
    """Dispatch one tool call; routing failures become an ``error`` payload.

    The tagging service is checked before the arguments are validated.
    """
    if name not in ("get_instructions", "classify"):
        return {"error": f"Unknown tool: {name}"}
    try:
        classifier = await holder.get()
        if not await classifier.is_ready():
            return {"error": OLLAMA_NOT_RUNNING}
        if name == "get_instructions":
            request = build_request(args, allow_overrides=False)
            result = await classifier.classify_enhanced(request)
        else:
            request = build_request(args, allow_overrides=True)
            result = await classifier.classify(request)
    except ValidationError as e:
        return {"error": f"Invalid arguments: {e.errors(include_url=False)}"}
    except RouterError as e:
        logger.warning(f"Tool {name} failed: {e}")
        return {"error": str(e)}
    return result.model_dump(mode="json", exclude_none=True)


def create_mcp_server(factory: Callable[[], Classifier] = Classifier.from_environment) -> Server:
    """Create and configure the MCP server with the routing tool handlers."""
    server = Server("agent-router", __version__)
    holder = ClassifierHolder(factory)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name="get_instructions",
                description=(
                    "Get routing instructions for which agents should handle a user request"
                ),
                inputSchema=GET_INSTRUCTIONS_SCHEMA,
            ),
            types.Tool(
                name="classify",
                description="Classify a task and return the recommended agents with reasons.",
                inputSchema=CLASSIFY_SCHEMA,
            ),
        ]

    @server.call_tool()
    async def call_tool(
        name: str,
        arguments: dict | None,
    ) -> list[types.TextContent]:
        result = await handle_tool(name, arguments or {}, holder)
        return [types.TextContent(type="text", text=json.dumps(result, indent=2))]

    return server


async def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    server = create_mcp_server()
    async with stdio_server() as (read_stream, write_stream):
        init_options = server.create_initialization_options(
            notification_options=NotificationOptions(),
        )
        await server.run(read_stream, write_stream, init_options)


def main() -> None:
    anyio.run(run_mcp_server)
