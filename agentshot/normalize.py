"""Per-agent cleanup of raw one-shot output."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

from .errors import DecodeError

Normalizer = Callable[[str], str]

GEMINI_CREDENTIALS_NOTICE = "Loaded cached credentials."


def strip_gemini_credentials(output: str) -> str:
    """Drop the cached-credentials notice gemini prints, keeping every other line."""

    lines = output.split("\n")
    return "\n".join(line for line in lines if line != GEMINI_CREDENTIALS_NOTICE)


def passthrough(output: str) -> str:
    return output


NORMALIZERS: Dict[str, Normalizer] = {
    "gemini": strip_gemini_credentials,
    "claude": passthrough,
    # TODO: parse `codex exec --json` events with parse_codex_jsonl once CodexEvent has fields
    "codex": passthrough,
}


def register_normalizer(agent_name: str, normalizer: Normalizer) -> None:
    """Install *normalizer* for *agent_name*, replacing any existing entry."""

    NORMALIZERS[agent_name] = normalizer


def normalize(agent_name: str, output: str) -> str:
    """Clean *output* produced by *agent_name*.

    Unknown agents get their output back unchanged; normalization never fails.
    """

    return NORMALIZERS.get(agent_name, passthrough)(output)


@dataclass(frozen=True, slots=True)
class CodexEvent:
    """One record of the ``codex exec --json`` event stream.

    Placeholder: no fields are decoded yet. Add them here and read them in
    :meth:`from_record`; unknown keys are ignored so the stream can grow.
    """

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CodexEvent":
        return cls()


def parse_codex_jsonl(output: str) -> List[CodexEvent]:
    """Decode a codex JSONL stream, one JSON object per non-blank line.

    Raises :class:`DecodeError` on the first malformed line; events decoded
    before it are discarded.
    """

    events: List[CodexEvent] = []
    for line_number, raw_line in enumerate(output.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            raise DecodeError(
                f"failed to parse codex JSONL line {line_number}: {exc.msg}: {line!r}",
                line_number=line_number,
                line=line,
                original_error=exc,
            ) from exc
        if not isinstance(record, dict):
            raise DecodeError(
                f"failed to parse codex JSONL line {line_number}: expected an object: {line!r}",
                line_number=line_number,
                line=line,
            )
        events.append(CodexEvent.from_record(record))
    return events


__all__ = [
    "CodexEvent",
    "GEMINI_CREDENTIALS_NOTICE",
    "NORMALIZERS",
    "Normalizer",
    "normalize",
    "parse_codex_jsonl",
    "register_normalizer",
    "strip_gemini_credentials",
]
