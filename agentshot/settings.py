"""Loading and validation of agentshot run-target configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from .detect import BUILTIN_TOOL_NAMES, is_builtin_tool_name
from .errors import ConfigurationError

SETTINGS_DIR = Path.home() / ".agentshot"
SETTINGS_PATH = SETTINGS_DIR / "config.yaml"
CONFIG_ENV_VAR = "AGENTSHOT_CONFIG"

DEFAULT_TIMEOUT = 30.0


@dataclass(slots=True)
class RunTarget:
    """A promptable target: a built-in agent tool or an arbitrary command."""

    name: str
    command: str
    tool: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    promptable: bool = True

    @property
    def is_builtin(self) -> bool:
        return self.tool is not None


@dataclass(slots=True)
class Settings:
    """Full configuration model for the application."""

    targets: List[RunTarget]
    default_timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @property
    def target_names(self) -> List[str]:
        """Return the configured target names in order."""

        return [target.name for target in self.targets]

    def get_target(self, name: str) -> Optional[RunTarget]:
        for target in self.targets:
            if target.name == name:
                return target
        return None


def resolve_settings_path(path: Optional[Path] = None) -> Path:
    """Return *path*, ``$AGENTSHOT_CONFIG`` or the default location, in that order."""

    if path is not None:
        return path.expanduser()
    configured = os.getenv(CONFIG_ENV_VAR)
    if configured:
        return Path(configured).expanduser()
    return SETTINGS_PATH


def _load_yaml(path: Path) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigurationError(
            f"Settings file not found at {path}. Create it with a 'targets' list.",
            original_error=exc,
        ) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Settings file contains invalid YAML: {exc}", original_error=exc) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Settings file must contain a mapping at the top level.")
    return data


def _parse_env(name: str, raw: object) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Target '{name}': 'env' must be a mapping.", config_key="env")
    return {str(key): str(value) for key, value in raw.items()}


def _parse_target(entry: object, seen_names: set[str]) -> RunTarget:
    if not isinstance(entry, dict):
        raise ConfigurationError("Target entries must be mappings.", config_key="targets")
    try:
        name = str(entry["name"]).strip()
        command = str(entry["command"]).strip()
    except KeyError as exc:
        raise ConfigurationError(f"Missing required target field: {exc.args[0]}", config_key=exc.args[0]) from exc

    if not name:
        raise ConfigurationError("Target 'name' must be a non-empty string.", config_key="name")
    if name in seen_names:
        raise ConfigurationError(f"Target name '{name}' is duplicated.", config_key="name")
    if not command:
        raise ConfigurationError(f"Target '{name}': 'command' must be a non-empty string.", config_key="command")

    tool = entry.get("tool")
    if tool is None and is_builtin_tool_name(name):
        tool = name
    if tool is not None:
        tool = str(tool).strip()
        if not is_builtin_tool_name(tool):
            raise ConfigurationError(
                f"Target '{name}': unknown tool '{tool}' (supported: {', '.join(BUILTIN_TOOL_NAMES)}).",
                config_key="tool",
            )

    promptable = entry.get("promptable", True)
    if not isinstance(promptable, bool):
        raise ConfigurationError(f"Target '{name}': 'promptable' must be a boolean.", config_key="promptable")

    return RunTarget(
        name=name,
        command=command,
        tool=tool,
        env=_parse_env(name, entry.get("env")),
        promptable=promptable,
    )


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from *path*, ``$AGENTSHOT_CONFIG`` or the default location.

    A ``.env`` file in the working directory is loaded into the process
    environment first; variables already set are left alone.
    """

    load_dotenv(find_dotenv(usecwd=True))
    target = resolve_settings_path(path)
    data = _load_yaml(target)

    targets_data = data.get("targets")
    if not isinstance(targets_data, list) or not targets_data:
        raise ConfigurationError(
            "The 'targets' list must be provided and contain at least one target.",
            config_key="targets",
        )

    targets: List[RunTarget] = []
    seen_names: set[str] = set()
    for entry in targets_data:
        run_target = _parse_target(entry, seen_names)
        seen_names.add(run_target.name)
        targets.append(run_target)

    timeout_raw = data.get("default_timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout_raw, bool) or not isinstance(timeout_raw, (int, float)) or timeout_raw <= 0:
        raise ConfigurationError("'default_timeout' must be a positive number.", config_key="default_timeout")

    log_level = str(data.get("log_level", "INFO")).strip().upper() or "INFO"

    return Settings(targets=targets, default_timeout=float(timeout_raw), log_level=log_level)


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_TIMEOUT",
    "RunTarget",
    "Settings",
    "SETTINGS_PATH",
    "load_settings",
    "resolve_settings_path",
]
