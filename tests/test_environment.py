import os

import pytest

from agentshot.environment import merge_env


@pytest.mark.parametrize(
    "base,overrides",
    [
        ({"PATH": "/bin", "HOME": "/root"}, {"HOME": "/tmp"}),
        ({"PATH": "/bin"}, {"API_KEY": "secret", "MODEL": "fast"}),
        ({}, {"ONLY": "override"}),
        ({"KEEP": "1"}, {}),
        ({"VALUE": "has=equals"}, {"OTHER": "a=b=c"}),
    ],
)
def test_overrides_win_and_everything_else_is_kept(base, overrides):
    merged = merge_env(base, overrides)

    for key, value in overrides.items():
        assert merged[key] == value
    for key, value in base.items():
        if key not in overrides:
            assert merged[key] == value
    assert set(merged) == set(base) | set(overrides)


def test_merge_env_does_not_modify_inputs():
    base = {"A": "1"}
    overrides = {"A": "2", "B": "3"}

    merge_env(base, overrides)

    assert base == {"A": "1"}
    assert overrides == {"A": "2", "B": "3"}


def test_merge_env_leaves_process_environment_alone(monkeypatch):
    monkeypatch.setenv("AGENTSHOT_MERGE_VALUE", "original")

    merged = merge_env(os.environ, {"AGENTSHOT_MERGE_VALUE": "changed"})

    assert merged["AGENTSHOT_MERGE_VALUE"] == "changed"
    assert os.environ["AGENTSHOT_MERGE_VALUE"] == "original"
