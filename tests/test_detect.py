import pytest

from agentshot import detect
from agentshot.detect import ToolMode, build_command_parts, detect_available_tools, is_builtin_tool_name
from agentshot.errors import ResolutionError


@pytest.mark.parametrize(
    "tool_name,command,expected",
    [
        ("claude", "claude", ["claude", "-p"]),
        ("claude", "/home/user/.local/bin/claude", ["/home/user/.local/bin/claude", "-p"]),
        ("claude", "claude --model opus", ["claude", "--model", "opus", "-p"]),
        ("codex", "codex", ["codex", "exec", "--json"]),
        ("gemini", "gemini", ["gemini"]),
        ("gemini", "gemini -i --yolo", ["gemini", "--yolo"]),
    ],
)
def test_build_oneshot_command(tool_name, command, expected):
    assert build_command_parts(tool_name, command, ToolMode.ONESHOT) == expected


def test_interactive_mode_returns_command_unchanged():
    assert build_command_parts("gemini", "gemini -i", ToolMode.INTERACTIVE) == ["gemini", "-i"]


@pytest.mark.parametrize(
    "tool_name,command,message",
    [
        ("unknown", "unknown", "unknown tool: unknown"),
        ("claude", "", "tool claude: empty command"),
        ("claude", "   ", "tool claude: empty command"),
    ],
)
def test_build_command_parts_errors(tool_name, command, message):
    with pytest.raises(ResolutionError) as excinfo:
        build_command_parts(tool_name, command, ToolMode.ONESHOT)

    assert message in str(excinfo.value)
    assert excinfo.value.tool_name == tool_name


def test_builtin_tool_names():
    assert is_builtin_tool_name("codex")
    assert not is_builtin_tool_name("my-llm")


def test_detect_available_tools_uses_path(monkeypatch):
    paths = {"claude": "/usr/local/bin/claude", "gemini": "/opt/bin/gemini"}
    monkeypatch.setattr(detect.shutil, "which", paths.get)

    assert detect_available_tools() == paths
