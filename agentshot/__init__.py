"""agentshot: one-shot prompting of coding-agent CLIs with typed results."""

from __future__ import annotations

from . import schemas  # registers the built-in result shapes before any lookup
from .detect import ToolMode, build_command_parts, detect_available_tools
from .environment import merge_env
from .errors import (
    AgentShotError,
    ConfigurationError,
    DecodeError,
    ExecutionError,
    ExecutionTimeoutError,
    ResolutionError,
    SchemaError,
    SchemaValidationError,
    ValidationError,
)
from .executor import execute, execute_command, execute_target
from .normalize import normalize, parse_codex_jsonl
from .schema import SchemaDescriptor, SchemaRegistry, StrictModel, get, labels, lookup, register
from .settings import RunTarget, Settings, load_settings

__all__ = [
    "AgentShotError",
    "ConfigurationError",
    "DecodeError",
    "ExecutionError",
    "ExecutionTimeoutError",
    "ResolutionError",
    "RunTarget",
    "SchemaDescriptor",
    "SchemaError",
    "SchemaRegistry",
    "SchemaValidationError",
    "Settings",
    "StrictModel",
    "ToolMode",
    "ValidationError",
    "build_command_parts",
    "detect_available_tools",
    "execute",
    "execute_command",
    "execute_target",
    "get",
    "labels",
    "load_settings",
    "lookup",
    "merge_env",
    "normalize",
    "parse_codex_jsonl",
    "register",
    "schemas",
]
