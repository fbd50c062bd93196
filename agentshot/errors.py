"""
Error handling for agentshot.

Every failure raised by the package derives from :class:`AgentShotError`, which
carries a category and a details mapping so callers can branch on the kind of
failure and log it in a structured way.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error categories."""
    VALIDATION = "validation"
    RESOLUTION = "resolution"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    DECODE = "decode"
    SCHEMA = "schema"
    CONFIGURATION = "configuration"


class AgentShotError(Exception):
    """Base class for agentshot errors."""

    category = ErrorCategory.EXECUTION

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error into a dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
            "original_error": str(self.original_error) if self.original_error else None,
        }


class ValidationError(AgentShotError):
    """A required input was empty or unusable. Raised before any process spawns."""

    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, field: str = ""):
        super().__init__(message, details={"field": field})
        self.field = field


class ResolutionError(AgentShotError):
    """The command resolver rejected a tool/command/mode combination."""

    category = ErrorCategory.RESOLUTION

    def __init__(self, message: str, tool_name: str = ""):
        super().__init__(message, details={"tool_name": tool_name})
        self.tool_name = tool_name


class ExecutionError(AgentShotError):
    """The agent process could not be spawned or exited with a non-zero status."""

    category = ErrorCategory.EXECUTION

    def __init__(
        self,
        message: str,
        agent: str = "",
        command_line: str = "",
        output: str = "",
        returncode: Optional[int] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            details={
                "agent": agent,
                "command_line": command_line,
                "returncode": returncode,
            },
            original_error=original_error,
        )
        self.agent = agent
        self.command_line = command_line
        self.output = output
        self.returncode = returncode


class ExecutionTimeoutError(ExecutionError):
    """The agent process did not finish within its timeout and was terminated."""

    category = ErrorCategory.TIMEOUT


class DecodeError(AgentShotError):
    """A line of a structured output stream could not be decoded."""

    category = ErrorCategory.DECODE

    def __init__(
        self,
        message: str,
        line_number: int = 0,
        line: str = "",
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            details={"line_number": line_number, "line": line},
            original_error=original_error,
        )
        self.line_number = line_number
        self.line = line


class SchemaError(AgentShotError):
    """Schema registration or lookup misuse."""

    category = ErrorCategory.SCHEMA

    def __init__(self, message: str, label: str = ""):
        super().__init__(message, details={"label": label})
        self.label = label


class SchemaValidationError(SchemaError):
    """An agent response does not conform to the schema registered under a label."""

    def __init__(self, message: str, label: str = "", original_error: Optional[BaseException] = None):
        super().__init__(message, label=label)
        self.original_error = original_error


class ConfigurationError(AgentShotError):
    """The settings file is missing or invalid, or names an unusable target."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, config_key: str = "", original_error: Optional[BaseException] = None):
        super().__init__(message, details={"config_key": config_key}, original_error=original_error)
        self.config_key = config_key


__all__ = [
    "AgentShotError",
    "ConfigurationError",
    "DecodeError",
    "ErrorCategory",
    "ExecutionError",
    "ExecutionTimeoutError",
    "ResolutionError",
    "SchemaError",
    "SchemaValidationError",
    "ValidationError",
]
