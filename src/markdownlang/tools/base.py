from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

from ..core.Exceptions import (
    MalformedToolArgumentsError,
    NoImportsDeclaredError,
    UnknownToolError,
)
from ..programs.base import Program, Schema
from ..programs.loader import resolve_import
from ..programs.schemas import normalize

logger = logging.getLogger(__name__)

__all__ = ["ToolDeclaration", "RunCallable", "declare_tools", "invoke_tool"]

# Recursive entry point supplied by the runner: (program, inputs) -> result
RunCallable = Callable[[Program, Mapping[str, Any]], Any]


# ───────────────────────────────────────────────────────────────────────────────
# Tool declaration
# ───────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ToolDeclaration:
    """Function-tool view of an imported program."""

    name: str
    description: str
    parameters: Schema

    @classmethod
    def from_program(cls, program: Program) -> "ToolDeclaration":
        return cls(
            name=program.name,
            description=program.description,
            parameters=normalize(program.input_schema),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Provider function-tool shape."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


# ───────────────────────────────────────────────────────────────────────────────
# Bridge operations
# ───────────────────────────────────────────────────────────────────────────────
def declare_tools(program: Program) -> List[ToolDeclaration]:
    """Resolve every import of ``program`` into a tool declaration, in order."""
    return [
        ToolDeclaration.from_program(resolve_import(program, ref))
        for ref in program.imports
    ]


def invoke_tool(
    call_name: str,
    call_arguments: str,
    parent: Program,
    run: RunCallable,
) -> Any:
    """
    Execute a tool call by running the imported program named ``call_name``.

    Imports are resolved one by one until a program with a matching name is
    found; its arguments are parsed from ``call_arguments`` (JSON text) and
    handed to ``run``, whose result is returned.
    """
    if not parent.imports:
        raise NoImportsDeclaredError(
            f"{parent.name}: no imports defined but tool call received: {call_name}"
        )

    for ref in parent.imports:
        imported = resolve_import(parent, ref)
        if imported.name != call_name:
            continue

        try:
            arguments = json.loads(call_arguments) if call_arguments else {}
        except (TypeError, json.JSONDecodeError) as exc:
            raise MalformedToolArgumentsError(
                f"{parent.name}: invalid JSON arguments for tool {call_name}: {exc}"
            ) from exc
        if not isinstance(arguments, dict):
            raise MalformedToolArgumentsError(
                f"{parent.name}: arguments for tool {call_name} must be a JSON object, "
                f"got {type(arguments).__name__}"
            )

        logger.debug("%s: calling tool %s (%s)", parent.name, call_name, imported.source)
        return run(imported, arguments)

    raise UnknownToolError(f"{parent.name}: unknown tool: {call_name}")
