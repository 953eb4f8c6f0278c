"""
Runner

Executes one markdownlang program against an LLM engine:

- renders the prompt body with the caller's inputs
- offers every imported program as a function tool
- asks for output constrained to the (normalized) output schema
- runs a bounded request -> tool calls -> request loop until the model
  answers with content, which is parsed as JSON and returned

Tool calls are executed one at a time, in the order the model listed them.
Each one runs the imported program through the same runner, with its own
conversation, one level deeper.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..core.Exceptions import (
    CallDepthExceededError,
    EmptyResponseError,
    IterationLimitExceededError,
    MalformedOutputError,
)
from ..core.Prompts import system_prompt
from ..engines.base import LLMEngine
from ..programs.base import Program
from ..programs.schemas import normalize
from ..programs.templates import render
from ..tools.base import declare_tools, invoke_tool

logger = logging.getLogger(__name__)

__all__ = ["MAX_ITERATIONS", "RunOptions", "ProgramRunner", "response_format", "run"]

# Provider round-trips allowed per run (per nesting level).
MAX_ITERATIONS = 10

# Strict-output directive names allow only [A-Za-z0-9_-], up to 64 chars.
_UNSAFE_NAME_CHARS: re.Pattern[str] = re.compile(r"[^A-Za-z0-9_-]")


@dataclass(frozen=True)
class RunOptions:
    """
    Per-run settings.

    model:
        Model identifier sent with every request; None uses the engine default.
    verbose:
        Log program, model, prompt, schema and result at INFO instead of DEBUG.
        The records go through the "markdownlang.runtime.runner" logger, so
        they only show up once the caller has configured logging to emit INFO
        (the CLI does this for -v; otherwise call logging.basicConfig).
    max_iterations:
        Provider round-trips allowed before giving up.
    max_depth:
        Deepest allowed nesting of tool-triggered runs (the top-level run is
        depth 0). None leaves nesting unbounded.
    """

    model: Optional[str] = None
    verbose: bool = False
    max_iterations: int = MAX_ITERATIONS
    max_depth: Optional[int] = None


def response_format(name: str, schema: Mapping[str, Any]) -> Dict[str, Any]:
    """Named, strict ``json_schema`` output directive."""
    safe_name = _UNSAFE_NAME_CHARS.sub("_", name)[:64] or "output"
    return {
        "type": "json_schema",
        "json_schema": {
            "name": safe_name,
            "schema": schema,
            "strict": True,
        },
    }


class ProgramRunner:
    """
    Runs programs against one injected LLMEngine.

    The runner keeps no per-run state, so a single instance can serve
    concurrent top-level runs from different threads.
    """

    def __init__(self, engine: LLMEngine, options: Optional[RunOptions] = None) -> None:
        if not isinstance(engine, LLMEngine):
            raise TypeError("engine must be an instance of LLMEngine.")
        if options is not None and not isinstance(options, RunOptions):
            raise TypeError("options must be a RunOptions instance or None.")
        options = options or RunOptions()
        if not isinstance(options.max_iterations, int) or options.max_iterations < 1:
            raise ValueError("max_iterations must be an int >= 1.")
        if options.max_depth is not None and (not isinstance(options.max_depth, int) or options.max_depth < 0):
            raise ValueError("max_depth must be None or an int >= 0.")
        self._engine = engine
        self._options = options

    @property
    def engine(self) -> LLMEngine:
        return self._engine

    @property
    def options(self) -> RunOptions:
        return self._options

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def run(self, program: Program, inputs: Mapping[str, Any]) -> Any:
        """Run ``program`` with ``inputs`` and return the parsed JSON result."""
        return self._run(program, inputs, depth=0)

    # ------------------------------------------------------------------ #
    # Agentic loop
    # ------------------------------------------------------------------ #
    def _run(self, program: Program, inputs: Mapping[str, Any], *, depth: int) -> Any:
        if not isinstance(inputs, Mapping):
            raise TypeError(f"{program.name}: inputs must be a mapping, got {type(inputs).__name__}")
        max_depth = self._options.max_depth
        if max_depth is not None and depth > max_depth:
            raise CallDepthExceededError(
                f"{program.name}: nested run depth {depth} exceeds max_depth={max_depth}"
            )

        diag_level = logging.INFO if self._options.verbose else logging.DEBUG
        show = logger.isEnabledFor(diag_level)

        prompt = render(program.body, inputs)
        tools = [decl.to_dict() for decl in declare_tools(program)]
        schema = normalize(program.output_schema)

        if show:
            logger.log(diag_level, "Program: %s (%s)", program.name, program.source)
            logger.log(diag_level, "Model: %s", self._model_label())
            logger.log(diag_level, "Prompt:\n%s\n", prompt)
            logger.log(diag_level, "Output schema: %s", json.dumps(schema, indent=2))

        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": system_prompt(program.name, program.description)},
            {"role": "user", "content": prompt},
        ]
        directive = response_format(program.name, schema)

        def run_nested(imported: Program, arguments: Mapping[str, Any]) -> Any:
            return self._run(imported, arguments, depth=depth + 1)

        for iteration in range(1, self._options.max_iterations + 1):
            completion = self._engine.invoke(
                messages,
                response_format=directive,
                tools=tools or None,
                model=self._options.model,
            )

            if completion.has_tool_calls:
                logger.debug(
                    "%s: iteration %d requested %d tool call(s)",
                    program.name, iteration, len(completion.tool_calls),
                )
                messages.append(completion.assistant_message())
                for call in completion.tool_calls:
                    result = invoke_tool(call.name, call.arguments, program, run_nested)
                    messages.append(
                        {
                            "role": "tool",
                            "tool_call_id": call.id,
                            "content": json.dumps(result, ensure_ascii=False),
                        }
                    )
                continue

            content = completion.content
            if not content:
                raise EmptyResponseError(f"{program.name}: no response content from {self._engine.name}")

            try:
                result = json.loads(content)
            except json.JSONDecodeError as exc:
                raise MalformedOutputError(
                    f"{program.name}: response content is not valid JSON: {exc}"
                ) from exc

            if show:
                logger.log(diag_level, "Result: %s", json.dumps(result, indent=2, ensure_ascii=False))
            return result

        raise IterationLimitExceededError(
            f"{program.name}: agentic loop exceeded maximum iterations ({self._options.max_iterations})"
        )

    def _model_label(self) -> str:
        return self._options.model or getattr(self._engine, "model", None) or self._engine.name


def run(
    program: Program,
    inputs: Mapping[str, Any],
    options: Optional[RunOptions] = None,
    *,
    engine: LLMEngine,
) -> Any:
    """Run ``program`` once with a throwaway ProgramRunner."""
    return ProgramRunner(engine, options).run(program, inputs)
