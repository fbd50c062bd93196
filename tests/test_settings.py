import os
from pathlib import Path

import pytest
import yaml

from agentshot.errors import ConfigurationError
from agentshot.settings import CONFIG_ENV_VAR, RunTarget, Settings, load_settings


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def write_settings(tmp_path: Path, payload) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return path


def test_load_settings_success(tmp_path):
    path = write_settings(
        tmp_path,
        {
            "default_timeout": 45,
            "log_level": "debug",
            "targets": [
                {"name": "claude", "command": "/opt/bin/claude"},
                {"name": "fast", "tool": "gemini", "command": "gemini", "env": {"MODEL": "flash", "RETRIES": 2}},
                {"name": "summarizer", "command": "my-llm --quiet", "promptable": False},
            ],
        },
    )

    settings = load_settings(path)

    assert isinstance(settings, Settings)
    assert settings.target_names == ["claude", "fast", "summarizer"]
    assert settings.default_timeout == 45.0
    assert settings.log_level == "DEBUG"
    assert settings.get_target("claude") == RunTarget(name="claude", command="/opt/bin/claude", tool="claude")
    assert settings.get_target("fast").env == {"MODEL": "flash", "RETRIES": "2"}
    summarizer = settings.get_target("summarizer")
    assert summarizer.tool is None
    assert not summarizer.is_builtin
    assert summarizer.promptable is False
    assert settings.get_target("missing") is None


@pytest.mark.parametrize(
    "payload,config_key",
    [
        ({}, "targets"),
        ({"targets": []}, "targets"),
        ({"targets": ["claude"]}, "targets"),
        ({"targets": [{"name": "x"}]}, "command"),
        ({"targets": [{"name": "", "command": "x"}]}, "name"),
        ({"targets": [{"name": "dup", "command": "x"}, {"name": "dup", "command": "y"}]}, "name"),
        ({"targets": [{"name": "x", "command": "x", "tool": "cursor"}]}, "tool"),
        ({"targets": [{"name": "x", "command": "x", "env": ["A=1"]}]}, "env"),
        ({"targets": [{"name": "x", "command": "x", "promptable": "yes"}]}, "promptable"),
        ({"targets": [{"name": "x", "command": "x"}], "default_timeout": 0}, "default_timeout"),
        ({"targets": [{"name": "x", "command": "x"}], "default_timeout": "soon"}, "default_timeout"),
    ],
)
def test_load_settings_rejects_invalid_config(tmp_path, payload, config_key):
    path = write_settings(tmp_path, payload)

    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(path)

    assert excinfo.value.config_key == config_key


def test_load_settings_missing_file(tmp_path):
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(tmp_path / "absent.yaml")

    assert "not found" in str(excinfo.value)


def test_load_settings_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("targets: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(path)

    assert "invalid YAML" in str(excinfo.value)


def test_load_settings_uses_env_var_path(tmp_path, monkeypatch):
    path = write_settings(tmp_path, {"targets": [{"name": "codex", "command": "codex"}]})
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    settings = load_settings()

    assert settings.get_target("codex").tool == "codex"


def test_load_settings_reads_dotenv_from_working_directory(tmp_path, monkeypatch):
    # set then delete so monkeypatch removes the variable again at teardown
    monkeypatch.setenv("AGENTSHOT_DOTENV_VALUE", "placeholder")
    monkeypatch.delenv("AGENTSHOT_DOTENV_VALUE")
    (tmp_path / ".env").write_text("AGENTSHOT_DOTENV_VALUE=from-dotenv\n", encoding="utf-8")
    path = write_settings(tmp_path, {"targets": [{"name": "x", "command": "x"}]})

    load_settings(path)

    assert os.environ["AGENTSHOT_DOTENV_VALUE"] == "from-dotenv"
