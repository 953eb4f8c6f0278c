from .runner import MAX_ITERATIONS, ProgramRunner, RunOptions, response_format, run

__all__ = [
    "MAX_ITERATIONS",
    "ProgramRunner",
    "RunOptions",
    "response_format",
    "run",
]
