"""
Schema registry for structured agent results.

A result shape is declared as a pydantic model that forbids undeclared fields
and is registered once, at import time, under a label. Callers that receive raw
agent output claiming to follow that shape look the label up and parse the
output through the returned :class:`SchemaDescriptor`.

Registration is a startup phase: the first read (:meth:`SchemaRegistry.lookup`,
:meth:`SchemaRegistry.get`, :meth:`SchemaRegistry.labels`) or an explicit
:meth:`SchemaRegistry.seal` ends it, and later registrations raise
:class:`~agentshot.errors.SchemaError`. Reads after that need no locking because
the table never changes again.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

import pydantic
from pydantic import BaseModel, ConfigDict

from .errors import SchemaError, SchemaValidationError

_DEFS_PREFIX = "#/$defs/"

_QUOTE_TRANSLATION = str.maketrans({"“": '"', "”": '"'})


class StrictModel(BaseModel):
    """Base class for registered result shapes: unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


def _first_object(text: str) -> Optional[Dict[str, Any]]:
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            data, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(data, dict):
                return data
        start = text.find("{", start + 1)
    return None


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the first JSON object out of an agent reply.

    Agents wrap JSON in ```json fences or surround it with prose, so decoding
    is attempted at each ``{`` and the first object that decodes wins. Only
    when nothing decodes is the scan repeated with typographic quotes
    replaced, so curly quotes inside valid string values survive.
    """

    data = _first_object(text)
    if data is None:
        data = _first_object(text.translate(_QUOTE_TRANSLATION))
    if data is None:
        raise ValueError("no JSON object found in response")
    return data


def _inline_refs(node: Any, defs: Mapping[str, Any], stack: Tuple[str, ...] = ()) -> Any:
    if isinstance(node, list):
        return [_inline_refs(item, defs, stack) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str) and ref.startswith(_DEFS_PREFIX):
        name = ref[len(_DEFS_PREFIX):]
        if name in stack:
            raise SchemaError(f"recursive schema reference to {name} cannot be inlined")
        target = copy.deepcopy(defs[name])
        target.update({key: value for key, value in node.items() if key != "$ref"})
        return _inline_refs(target, defs, stack + (name,))

    return {key: _inline_refs(value, defs, stack) for key, value in node.items()}


def fix_additional_properties(node: Dict[str, Any]) -> None:
    """Ensure ``properties`` exists wherever ``additionalProperties`` is a schema.

    Structured-output backends reject object schemas that describe map values
    without also declaring ``properties``. Applied recursively in place.
    """

    additional = node.get("additionalProperties")
    if isinstance(additional, dict):
        node.setdefault("properties", {})
        fix_additional_properties(additional)

    properties = node.get("properties")
    if isinstance(properties, dict):
        for prop in properties.values():
            if isinstance(prop, dict):
                fix_additional_properties(prop)

    items = node.get("items")
    if isinstance(items, dict):
        fix_additional_properties(items)


def generate_json(model: Type[BaseModel], *skip_fields: str) -> str:
    """Generate a self-contained JSON Schema document for *model*.

    Nested models are inlined rather than referenced, and properties named in
    *skip_fields* are removed from ``properties`` and ``required``.
    """

    raw = model.model_json_schema()
    defs = raw.pop("$defs", {})
    schema = _inline_refs(raw, defs)

    if skip_fields:
        properties = schema.get("properties", {})
        for name in skip_fields:
            properties.pop(name, None)
        required = [name for name in schema.get("required", []) if name not in skip_fields]
        if required:
            schema["required"] = required
        else:
            schema.pop("required", None)

    fix_additional_properties(schema)
    return json.dumps(schema, separators=(",", ":"))


@dataclass(frozen=True)
class SchemaDescriptor:
    """A registered result shape."""

    label: str
    model: Type[BaseModel]
    skip_fields: Tuple[str, ...] = field(default=())

    @property
    def field_names(self) -> List[str]:
        return [
            info.alias or name
            for name, info in self.model.model_fields.items()
            if (info.alias or name) not in self.skip_fields
        ]

    @property
    def required_fields(self) -> List[str]:
        return [
            info.alias or name
            for name, info in self.model.model_fields.items()
            if info.is_required() and (info.alias or name) not in self.skip_fields
        ]

    @cached_property
    def _schema_text(self) -> str:
        return generate_json(self.model, *self.skip_fields)

    def json_schema(self) -> str:
        """Return the JSON Schema text for this shape, generated once."""

        return self._schema_text

    def validate(self, data: Mapping[str, Any]) -> BaseModel:
        """Validate a decoded mapping and return the model instance."""

        try:
            return self.model.model_validate(data)
        except pydantic.ValidationError as exc:
            raise SchemaValidationError(
                f"response does not match schema {self.label}: {exc}",
                label=self.label,
                original_error=exc,
            ) from exc

    def parse(self, raw: str) -> BaseModel:
        """Extract, decode and validate the JSON object in an agent reply."""

        try:
            data = extract_json_object(raw)
        except ValueError as exc:
            raise SchemaValidationError(
                f"response for schema {self.label} is not a JSON object: {exc}",
                label=self.label,
                original_error=exc,
            ) from exc
        return self.validate(data)


class SchemaRegistry:
    """Label to :class:`SchemaDescriptor` table with a write-once lifecycle."""

    def __init__(self) -> None:
        self._entries: Dict[str, SchemaDescriptor] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """End the registration phase."""

        self._sealed = True

    def register(self, label: str, model: Type[BaseModel], *skip_fields: str) -> SchemaDescriptor:
        """Register *model* under *label*.

        Raises :class:`SchemaError` for an empty or duplicate label, a model
        that allows undeclared fields, or a registry that is already sealed.
        """

        if not label:
            raise SchemaError("schema label cannot be empty")
        if self._sealed:
            raise SchemaError(f"cannot register schema {label}: registry is sealed", label=label)
        if label in self._entries:
            raise SchemaError(f"schema {label} is already registered", label=label)
        if model.model_config.get("extra") != "forbid":
            raise SchemaError(
                f"schema {label}: model {model.__name__} must forbid extra fields",
                label=label,
            )

        descriptor = SchemaDescriptor(label=label, model=model, skip_fields=tuple(skip_fields))
        self._entries[label] = descriptor
        return descriptor

    def lookup(self, label: str) -> Optional[SchemaDescriptor]:
        """Return the descriptor for *label*, or ``None`` if none is registered."""

        self._sealed = True
        return self._entries.get(label)

    def get(self, label: str) -> str:
        """Return the JSON Schema text registered under *label*."""

        descriptor = self.lookup(label)
        if descriptor is None:
            raise SchemaError(f"unknown schema label: {label}", label=label)
        return descriptor.json_schema()

    def labels(self) -> List[str]:
        self._sealed = True
        return sorted(self._entries)

    def __contains__(self, label: object) -> bool:
        return label in self._entries

    def __len__(self) -> int:
        return len(self._entries)


registry = SchemaRegistry()


def register(label: str, model: Type[BaseModel], *skip_fields: str) -> SchemaDescriptor:
    return registry.register(label, model, *skip_fields)


def lookup(label: str) -> Optional[SchemaDescriptor]:
    return registry.lookup(label)


def get(label: str) -> str:
    return registry.get(label)


def labels() -> List[str]:
    return registry.labels()


def seal() -> None:
    registry.seal()


__all__ = [
    "SchemaDescriptor",
    "SchemaRegistry",
    "StrictModel",
    "extract_json_object",
    "fix_additional_properties",
    "generate_json",
    "get",
    "labels",
    "lookup",
    "register",
    "registry",
    "seal",
]
