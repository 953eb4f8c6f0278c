from .base import (
    RunCallable,
    ToolDeclaration,
    declare_tools,
    invoke_tool,
)

__all__ = ["RunCallable",
           "ToolDeclaration",
           "declare_tools",
           "invoke_tool",]
