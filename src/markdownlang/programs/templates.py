"""
Prompt-body rendering.

Program bodies use Go-style placeholders: ``{{ .name }}``. Only a single
identifier per placeholder is supported: no nested paths, filters, or control
flow. A placeholder whose identifier is not bound is left in the output as-is,
so a program with partially supplied inputs still produces a usable prompt.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

__all__ = ["PLACEHOLDER", "render", "to_text"]

PLACEHOLDER: re.Pattern[str] = re.compile(r"\{\{\s*\.([A-Za-z0-9_]+)\s*\}\}")


def _integral_floats_as_ints(value: Any) -> Any:
    """Integral floats as ints, so ``3.0`` renders as ``3``."""
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, Mapping):
        return {k: _integral_floats_as_ints(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_integral_floats_as_ints(v) for v in value]
    return value


def to_text(value: Any) -> str:
    """Textual form of a bound value.

    Strings are used verbatim and numbers via ``str``, with integral floats
    written without a fraction (``3.0`` -> ``3``); booleans, ``None`` and
    containers render as compact JSON (``true``, ``null``, ``[1,2]``).
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, type(None), Mapping, list, tuple)):
        return json.dumps(_integral_floats_as_ints(value), separators=(",", ":"), ensure_ascii=False, default=str)
    return str(_integral_floats_as_ints(value))


def render(body: str, bindings: Mapping[str, Any]) -> str:
    """Substitute ``{{ .key }}`` placeholders in ``body`` from ``bindings``."""

    def repl(m: re.Match[str]) -> str:
        key = m.group(1)
        if key in bindings:
            return to_text(bindings[key])
        return m.group(0)

    return PLACEHOLDER.sub(repl, body)
