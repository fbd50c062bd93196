"""Command-line interface for prompting configured run targets."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel

from . import schema
from .detect import detect_available_tools
from .errors import AgentShotError
from .executor import execute_target
from .logger import setup_logger
from .settings import load_settings


def build_parser() -> argparse.ArgumentParser:
    """Return an argument parser for the agentshot CLI."""

    parser = argparse.ArgumentParser(
        prog="agentshot",
        description="Send one-shot prompts to coding-agent CLIs.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Alternative settings file (default: $AGENTSHOT_CONFIG or ~/.agentshot/config.yaml).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        metavar="LEVEL",
        help="Logging level; overrides 'log_level' from the settings file.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        metavar="PATH",
        help="Also write debug-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Prompt a configured run target.")
    run.add_argument("target", help="Run target name from the settings file.")
    run.add_argument("prompt", help="Prompt text passed to the target.")
    run.add_argument("--schema", dest="schema_label", metavar="LABEL", help="Parse the reply with a registered schema.")
    run.add_argument("--timeout", type=float, metavar="SECONDS", help="Override the configured timeout.")
    run.add_argument("--cwd", type=Path, metavar="DIR", help="Working directory for the agent.")

    schemas = subparsers.add_parser("schemas", help="List schema labels or print one JSON Schema.")
    schemas.add_argument("label", nargs="?", help="Label whose JSON Schema is printed.")

    subparsers.add_parser("detect", help="List built-in agent tools found on PATH.")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments from *argv*."""

    parser = build_parser()
    return parser.parse_args(argv)


def _format_result(result: object) -> str:
    if isinstance(result, BaseModel):
        return result.model_dump_json(indent=2)
    # undecodable output bytes are shown as U+FFFD on the terminal
    return str(result).encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logger(level=args.log_level or settings.log_level, log_file=args.log_file)
    result = asyncio.run(
        execute_target(
            settings,
            args.target,
            args.prompt,
            schema_label=args.schema_label,
            timeout=args.timeout,
            cwd=args.cwd,
        )
    )
    print(_format_result(result))
    return 0


def _schemas(args: argparse.Namespace) -> int:
    if args.label:
        print(json.dumps(json.loads(schema.get(args.label)), indent=2))
    else:
        for label in schema.labels():
            print(label)
    return 0


def _detect(args: argparse.Namespace) -> int:
    tools = detect_available_tools()
    if not tools:
        print("No built-in agent tools found on PATH.")
        return 1
    for name, path in tools.items():
        print(f"{name}\t{path}")
    return 0


COMMANDS = {
    "run": _run,
    "schemas": _schemas,
    "detect": _detect,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and dispatch the selected command."""

    args = parse_args(argv)
    try:
        return COMMANDS[args.command](args)
    except AgentShotError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["build_parser", "main", "parse_args"]
