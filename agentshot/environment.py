"""Environment composition for spawned agent processes."""

from __future__ import annotations

from typing import Dict, Mapping


def merge_env(base: Mapping[str, str], overrides: Mapping[str, str]) -> Dict[str, str]:
    """Return a new environment: *base* with every key of *overrides* applied on top.

    Overrides only add or replace variables; nothing inherited is removed. Neither
    argument is modified, so callers pass ``os.environ`` directly.
    """

    merged = dict(base)
    merged.update(overrides)
    return merged


__all__ = ["merge_env"]
