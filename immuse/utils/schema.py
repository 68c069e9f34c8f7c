"""Derive OpenAI strict-mode JSON schemas from pydantic models.

Structured outputs in strict mode require every object to list all of its
properties as ``required`` and to set ``additionalProperties: false``.
Pydantic's ``model_json_schema()`` also emits keywords the strict mode
rejects or ignores (titles, defaults, length and range bounds).  Bounds
are still enforced: the generation services validate the model's answer
with the same pydantic model, and a violation triggers the fallback.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

_STRIPPED_KEYWORDS = frozenset({
    "title",
    "default",
    "minLength",
    "maxLength",
    "minItems",
    "maxItems",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "pattern",
    "format",
})

# Keys whose values map user-chosen names to sub-schemas; the names
# themselves (e.g. a property called "title") must never be stripped.
_NAME_MAPPINGS = frozenset({"properties", "$defs"})


def strict_json_schema(model: type[BaseModel]) -> dict[str, Any]:
    """Return a strict-mode JSON schema for *model*."""
    return _tighten(model.model_json_schema())


def _tighten(node: Any) -> Any:
    if isinstance(node, list):
        return [_tighten(item) for item in node]
    if not isinstance(node, dict):
        return node

    cleaned: dict[str, Any] = {}
    for key, value in node.items():
        if key in _NAME_MAPPINGS and isinstance(value, dict):
            cleaned[key] = {name: _tighten(sub) for name, sub in value.items()}
        elif key not in _STRIPPED_KEYWORDS:
            cleaned[key] = _tighten(value)

    if cleaned.get("type") == "object" and "properties" in cleaned:
        cleaned["required"] = list(cleaned["properties"])
        cleaned["additionalProperties"] = False
    return cleaned
