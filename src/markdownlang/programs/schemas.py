from __future__ import annotations

from typing import Any, Dict, Mapping

from .base import SCHEMA_KEYS, Schema

__all__ = ["normalize"]


def normalize(schema: Any) -> Any:
    """
    Project a JSON Schema onto the strict structured-output dialect.

    Strict mode requires:
      - every object lists all of its properties in `required`
      - every object sets `additionalProperties: false`
      - no unsupported keywords (minimum, maximum, pattern, minLength, ...)

    Keys outside SCHEMA_KEYS are dropped silently. Object properties, array
    `items` and `anyOf` branches are normalized recursively; `oneOf`, `$ref`,
    `$defs`, `enum` and `const` are carried over untouched.

    Never raises: non-mapping input is returned unchanged, and malformed
    parts are passed through rather than rejected. The result is a new
    Schema; `schema` itself is not modified. normalize(normalize(s)) equals
    normalize(s).
    """
    if not isinstance(schema, Mapping):
        return schema

    result: Dict[str, Any] = {k: v for k, v in schema.items() if k in SCHEMA_KEYS}

    props = result.get("properties")
    if result.get("type") == "object" and isinstance(props, Mapping):
        result["properties"] = {name: normalize(sub) for name, sub in props.items()}
        result["required"] = list(props.keys())
        result["additionalProperties"] = False

    if result.get("type") == "array" and "items" in result:
        result["items"] = normalize(result["items"])

    if isinstance(result.get("anyOf"), list):
        result["anyOf"] = [normalize(branch) for branch in result["anyOf"]]

    return Schema(result)
