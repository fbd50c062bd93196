"""Command resolution for the built-in agent CLIs."""

from __future__ import annotations

import shutil
from enum import Enum
from typing import Dict, List

from .errors import ResolutionError

BUILTIN_TOOL_NAMES = ("claude", "codex", "gemini")


class ToolMode(str, Enum):
    """How a detected tool is invoked."""

    INTERACTIVE = "interactive"
    ONESHOT = "oneshot"


def is_builtin_tool_name(name: str) -> bool:
    """Return ``True`` if *name* is one of the built-in agent tools."""

    return name in BUILTIN_TOOL_NAMES


def build_command_parts(tool_name: str, detected_command: str, mode: ToolMode) -> List[str]:
    """Build the argv prefix for running *tool_name* in *mode*.

    ``detected_command`` is the binary (optionally with extra arguments) found for
    the tool, e.g. ``"claude"`` or ``"/home/user/.local/bin/claude --model opus"``.
    Interactive mode returns the command unchanged; one-shot mode adds the flags
    each tool needs to answer a single prompt and exit.
    """

    parts = detected_command.split()
    if not parts:
        raise ResolutionError(f"tool {tool_name}: empty command", tool_name=tool_name)

    if mode == ToolMode.INTERACTIVE:
        return parts

    base_cmd, existing_args = parts[0], parts[1:]
    if tool_name == "claude":
        new_args = [*existing_args, "-p"]
    elif tool_name == "codex":
        new_args = [*existing_args, "exec", "--json"]
    elif tool_name == "gemini":
        # gemini answers a trailing prompt non-interactively unless -i is present
        new_args = [arg for arg in existing_args if arg != "-i"]
    else:
        raise ResolutionError(
            f"unknown tool: {tool_name} (supported: {', '.join(BUILTIN_TOOL_NAMES)})",
            tool_name=tool_name,
        )

    return [base_cmd, *new_args]


def detect_available_tools() -> Dict[str, str]:
    """Return the built-in tools found on ``PATH`` mapped to their resolved paths."""

    found: Dict[str, str] = {}
    for name in BUILTIN_TOOL_NAMES:
        path = shutil.which(name)
        if path is not None:
            found[name] = path
    return found


__all__ = [
    "BUILTIN_TOOL_NAMES",
    "ToolMode",
    "build_command_parts",
    "detect_available_tools",
    "is_builtin_tool_name",
]
