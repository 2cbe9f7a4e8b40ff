"""CLI entry point for agent-router."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import cast

from pydantic import ValidationError

from agent_router import __version__
from agent_router.classification.strategy import Classifier
from agent_router.config import ResolvedConfig
from agent_router.errors import RouterError
from agent_router.models import ClassificationInput


def _read_request(source: str) -> ClassificationInput:
    try:
        if source == "-":
            raw = sys.stdin.read()
        else:
            path = Path(source)
            if not path.exists():
                print(f"Error: file not found: {path}", file=sys.stderr)
                sys.exit(1)
            raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read request: {e}", file=sys.stderr)
        sys.exit(1)
    try:
        return ClassificationInput.model_validate_json(raw)
    except ValidationError as e:
        print(f"Error: invalid request: {e}", file=sys.stderr)
        sys.exit(1)


def _run_classifier(args: argparse.Namespace, enhanced: bool) -> None:
    request = _read_request(cast(str, args.request))

    async def run() -> dict:
        classifier = Classifier.from_environment(llm_fallback=bool(args.llm_fallback))
        try:
            if enhanced:
                result = await classifier.classify_enhanced(request)
            else:
                result = await classifier.classify(request)
        finally:
            await classifier.close()
        return result.model_dump(mode="json", exclude_none=True)

    try:
        output = asyncio.run(run())
    except RouterError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(output, indent=2))


def _cmd_classify(args: argparse.Namespace) -> None:
    _run_classifier(args, enhanced=False)


def _cmd_instructions(args: argparse.Namespace) -> None:
    _run_classifier(args, enhanced=True)


def _cmd_check_config(args: argparse.Namespace) -> None:
    try:
        config = ResolvedConfig.load(
            agents_path=args.agents,
            rules_path=args.rules,
            tags_path=args.tags,
        )
    except RouterError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Agents: {len(config.user.agents)}")
    print(f"Rules:  {len(config.rules.rules)}")
    print(f"Tags:   {len(config.tags.tags)}")


def _cmd_mcp_serve(_args: argparse.Namespace) -> None:
    from agent_router.mcp_server.server import main as mcp_main

    mcp_main()


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="agent-router",
        description="Route tasks to specialised agents using rules and semantic tags",
    )
    _ = parser.add_argument(
        "-V", "--version", action="version", version=f"agent-router {__version__}"
    )
    _ = parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("classify", "Classify a request and print recommended agents"),
        ("instructions", "Print routing instructions for a request"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        _ = p.add_argument("request", help="Path to a request JSON file, or - for stdin")
        _ = p.add_argument(
            "--llm-fallback",
            action="store_true",
            dest="llm_fallback",
            help="Ask the model to pick agents directly when no rule matches",
        )

    check_p = subparsers.add_parser("check-config", help="Load and validate configuration files")
    _ = check_p.add_argument("--agents", default=None, help="Agents config path")
    _ = check_p.add_argument("--rules", default=None, help="Rules config path")
    _ = check_p.add_argument("--tags", default=None, help="LLM tags config path")

    _ = subparsers.add_parser("mcp-serve", help="Start the MCP stdio server")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    dispatch = {
        "classify": _cmd_classify,
        "instructions": _cmd_instructions,
        "check-config": _cmd_check_config,
        "mcp-serve": _cmd_mcp_serve,
    }
    command = cast(str | None, args.command)
    handler = dispatch.get(command) if command is not None else None
    if handler:
        handler(args)
    else:
        parser.print_help()
        sys.exit(1)
