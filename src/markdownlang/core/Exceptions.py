# ───────────────────────────────────────────────────────────────────────────────
# Exceptions
# ───────────────────────────────────────────────────────────────────────────────
__all__ = [
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


class MarkdownlangError(Exception):
    """Base class for every error raised while loading or running a program."""


class ProgramError(MarkdownlangError):
    """Base class for program-source errors."""


class MalformedProgramError(ProgramError, ValueError):
    """Raised when a program source cannot be parsed into a Program."""


class SourceNotFoundError(ProgramError, FileNotFoundError):
    """Raised when a program reference does not resolve to a readable file."""


class MissingInputError(ProgramError, ValueError):
    """Raised by the pre-flight input check when a required input field is absent."""


class ToolCallError(MarkdownlangError):
    """Base class for tool calls that do not match the declared tools."""


class UnknownToolError(ToolCallError):
    """Raised when the model calls a tool that no import provides."""


class NoImportsDeclaredError(ToolCallError):
    """Raised when the model calls a tool but the program declares no imports."""


class MalformedToolArgumentsError(ToolCallError, ValueError):
    """Raised when tool-call arguments are not a JSON object."""


class ResponseError(MarkdownlangError):
    """Base class for provider responses that break the expected contract."""


class EmptyResponseError(ResponseError):
    """Raised when the final response carries no content."""


class MalformedOutputError(ResponseError, ValueError):
    """Raised when the final response content is not valid JSON."""


class ExecutionError(MarkdownlangError, RuntimeError):
    """Base class for errors in the agentic loop itself."""


class IterationLimitExceededError(ExecutionError):
    """Raised when the loop exhausts its round-trip budget without a final answer."""


class CallDepthExceededError(ExecutionError):
    """Raised when nested tool-triggered runs go deeper than the configured limit."""


class LLMEngineError(MarkdownlangError, RuntimeError):
    """Raised when an LLM engine fails to complete an invocation."""
