from .Exceptions import *
from .Prompts import SYSTEM_PROMPT, system_prompt

__all__ = [
    "SYSTEM_PROMPT",
    "system_prompt",
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
