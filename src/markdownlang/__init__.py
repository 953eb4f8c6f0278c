from importlib.metadata import PackageNotFoundError, version

try:  # populated when installed or when a wheel is built
    __version__ = version("markdownlang")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

from .core.Exceptions import *
from .engines import Completion, LLMEngine, OpenAIEngine, ToolCall
from .programs import (
    Program,
    Schema,
    check_required_inputs,
    load,
    normalize,
    parse_source,
    render,
)
from .runtime import ProgramRunner, RunOptions, run
from .tools import ToolDeclaration, declare_tools, invoke_tool

__all__ = [
    "Program",
    "Schema",
    "load",
    "parse_source",
    "check_required_inputs",
    "render",
    "normalize",
    "ToolDeclaration",
    "declare_tools",
    "invoke_tool",
    "LLMEngine",
    "OpenAIEngine",
    "Completion",
    "ToolCall",
    "ProgramRunner",
    "RunOptions",
    "run",
    "MarkdownlangError",
    "ProgramError",
    "MalformedProgramError",
    "SourceNotFoundError",
    "MissingInputError",
    "ToolCallError",
    "UnknownToolError",
    "NoImportsDeclaredError",
    "MalformedToolArgumentsError",
    "ResponseError",
    "EmptyResponseError",
    "MalformedOutputError",
    "ExecutionError",
    "IterationLimitExceededError",
    "CallDepthExceededError",
    "LLMEngineError",
]
