"""
One-shot execution of agent CLIs and arbitrary promptable commands.

Each call spawns exactly one child process with the prompt as its final argv
element, waits for it, and returns the combined stdout/stderr. Cancelling the
awaiting task or exceeding ``timeout`` terminates the child (and anything it
spawned) before the exception reaches the caller. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import List, Mapping, Optional, Union

import psutil
from pydantic import BaseModel

from . import schema
from .detect import ToolMode, build_command_parts
from .environment import merge_env
from .errors import (
    ConfigurationError,
    ExecutionError,
    ExecutionTimeoutError,
    SchemaError,
    ValidationError,
)
from .logger import get_logger
from .normalize import normalize
from .settings import Settings

PROMPT_PLACEHOLDER = "<prompt>"
TERMINATE_GRACE_SECONDS = 2.0

logger = get_logger("executor")


async def execute(
    agent_name: str,
    agent_command: str,
    prompt: str,
    env: Optional[Mapping[str, str]] = None,
    *,
    timeout: Optional[float] = None,
    cwd: Optional[Path] = None,
) -> str:
    """Run a built-in agent in one-shot mode and return its normalized reply.

    Args:
        agent_name: Built-in tool name (``claude``, ``codex``, ``gemini``)
        agent_command: Detected binary, e.g. ``"/home/user/.local/bin/claude"``
        prompt: Prompt text, passed as the last argument
        env: Variables added to (or replacing) the inherited environment
        timeout: Seconds to wait before terminating the agent
        cwd: Working directory for the agent; inherited when omitted

    Raises:
        ValidationError: An argument is empty
        ResolutionError: The command resolver rejected the agent
        ExecutionError: Spawning failed or the agent exited non-zero
        ExecutionTimeoutError: The agent ran past ``timeout``
    """
    if not agent_name:
        raise ValidationError("agent name cannot be empty", field="agent_name")
    if not agent_command:
        raise ValidationError("agent command cannot be empty", field="agent_command")
    if not prompt:
        raise ValidationError("prompt cannot be empty", field="prompt")

    parts = build_command_parts(agent_name, agent_command, ToolMode.ONESHOT)
    output = await _run_oneshot(parts, prompt, env, timeout, cwd, agent=agent_name)
    return normalize(agent_name, output)


async def execute_command(
    command: str,
    prompt: str,
    env: Optional[Mapping[str, str]] = None,
    *,
    timeout: Optional[float] = None,
    cwd: Optional[Path] = None,
) -> str:
    """Run a whitespace-separated command line with *prompt* appended.

    The raw combined output is returned verbatim. Errors are the same as for
    :func:`execute`, without resolution.
    """
    if not command:
        raise ValidationError("command cannot be empty", field="command")
    if not prompt:
        raise ValidationError("prompt cannot be empty", field="prompt")

    parts = command.split()
    if not parts:
        raise ValidationError("command cannot be empty", field="command")

    return await _run_oneshot(parts, prompt, env, timeout, cwd)


async def execute_target(
    settings: Settings,
    target_name: str,
    prompt: str,
    *,
    schema_label: Optional[str] = None,
    timeout: Optional[float] = None,
    cwd: Optional[Path] = None,
    registry: Optional[schema.SchemaRegistry] = None,
) -> Union[str, BaseModel]:
    """Prompt a configured run target by name.

    Targets bound to a built-in tool go through :func:`execute`, everything else
    through :func:`execute_command`. With *schema_label* the reply is parsed into
    the registered result model, which is returned instead of the text.
    *cwd* is the directory the agent runs in, e.g. a workspace whose files it
    should read and edit.
    """
    target = settings.get_target(target_name)
    if target is None:
        raise ConfigurationError(f"run target not found: {target_name}", config_key="targets")
    if not target.promptable:
        raise ConfigurationError(f"run target {target_name} must be promptable", config_key="promptable")

    descriptor = None
    if schema_label is not None:
        descriptor = (registry or schema.registry).lookup(schema_label)
        if descriptor is None:
            raise SchemaError(f"unknown schema label: {schema_label}", label=schema_label)

    effective_timeout = settings.default_timeout if timeout is None else timeout
    if target.tool is not None:
        response = await execute(target.tool, target.command, prompt, target.env, timeout=effective_timeout, cwd=cwd)
    else:
        response = await execute_command(target.command, prompt, target.env, timeout=effective_timeout, cwd=cwd)

    if descriptor is None:
        return response
    return descriptor.parse(response)


def _failure_message(agent: Optional[str], command_line: str, cause: object, output: str) -> str:
    prefix = f"agent {agent}" if agent else "command"
    return f"{prefix}: one-shot execution failed (command: {command_line}): {cause}\noutput: {output}"


async def _run_oneshot(
    parts: List[str],
    prompt: str,
    env: Optional[Mapping[str, str]],
    timeout: Optional[float],
    cwd: Optional[Path],
    agent: Optional[str] = None,
) -> str:
    """Spawn *parts* plus *prompt* and return the combined output.

    Output is decoded as UTF-8 with ``surrogateescape``, so bytes that are not
    valid UTF-8 survive and ``output.encode("utf-8", "surrogateescape")``
    restores exactly what the process wrote.
    """
    command_line = " ".join([*parts, PROMPT_PLACEHOLDER])
    process_env = merge_env(os.environ, env) if env else None

    logger.debug("Spawning one-shot process: %s", command_line)
    try:
        process = await asyncio.create_subprocess_exec(
            parts[0],
            *parts[1:],
            prompt,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            env=process_env,
            cwd=cwd,
        )
    except OSError as exc:
        raise ExecutionError(
            _failure_message(agent, command_line, exc, ""),
            agent=agent or "",
            command_line=command_line,
            original_error=exc,
        ) from exc

    try:
        raw_output, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        await terminate_process(process)
        raise ExecutionTimeoutError(
            _failure_message(agent, command_line, f"timed out after {timeout} seconds", ""),
            agent=agent or "",
            command_line=command_line,
            returncode=process.returncode,
            original_error=exc,
        ) from exc
    except asyncio.CancelledError:
        await terminate_process(process)
        raise

    output = raw_output.decode("utf-8", errors="surrogateescape")
    logger.debug("Process %s exited with code %s (%d bytes)", process.pid, process.returncode, len(raw_output))

    if process.returncode != 0:
        raise ExecutionError(
            _failure_message(agent, command_line, f"exit status {process.returncode}", output),
            agent=agent or "",
            command_line=command_line,
            output=output,
            returncode=process.returncode,
        )
    return output


def _descendants(pid: int) -> List[psutil.Process]:
    try:
        return psutil.Process(pid).children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return []


async def terminate_process(
    process: asyncio.subprocess.Process,
    grace: float = TERMINATE_GRACE_SECONDS,
) -> None:
    """Terminate *process* and its descendants, escalating to SIGKILL after *grace*.

    Returns once the child has been reaped.
    """
    if process.returncode is not None:
        return

    descendants = _descendants(process.pid)
    for proc in descendants:
        try:
            proc.terminate()
        except psutil.NoSuchProcess:
            pass
    try:
        process.terminate()
    except ProcessLookupError:
        pass

    try:
        await asyncio.wait_for(process.wait(), timeout=grace)
    except asyncio.TimeoutError:
        logger.debug("Process %s did not terminate, killing", process.pid)
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()

    for proc in descendants:
        try:
            if proc.is_running():
                proc.kill()
        except psutil.NoSuchProcess:
            pass


__all__ = [
    "PROMPT_PLACEHOLDER",
    "execute",
    "execute_command",
    "execute_target",
    "terminate_process",
]
