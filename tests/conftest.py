"""
Shared fixtures: a scripted LLMEngine and a program-file writer.
"""
from typing import Any, Callable, Dict, List, Optional, Union

import pytest
import yaml

from markdownlang.engines.base import Completion, LLMEngine, ToolCall

Responder = Callable[[Dict[str, Any]], Completion]


class ScriptedEngine(LLMEngine):
    """LLMEngine that replays scripted completions instead of calling a provider.

    Each entry is either a Completion or a callable taking the payload and
    returning one. When the script runs out, ``default`` (if set) answers
    every further call.
    """

    def __init__(self, script: Optional[List[Union[Completion, Responder]]] = None, default: Optional[Responder] = None) -> None:
        super().__init__(name="scripted")
        self.script = list(script or [])
        self.default = default
        self.calls: List[Dict[str, Any]] = []

    def _build_provider_payload(self, messages, *, response_format, tools, model):
        return {
            "messages": messages,
            "response_format": response_format,
            "tools": tools,
            "model": model,
        }

    def _call_provider(self, payload):
        self.calls.append(payload)
        if self.script:
            item = self.script.pop(0)
        elif self.default is not None:
            item = self.default
        else:
            raise AssertionError("ScriptedEngine ran out of scripted responses")
        return item(payload) if callable(item) else item

    def _extract_completion(self, response):
        return response


def final(content: Optional[str]) -> Completion:
    return Completion(content=content)


def tool_calls(*calls: ToolCall) -> Completion:
    return Completion(content=None, tool_calls=tuple(calls))


def program_name_of(payload: Dict[str, Any]) -> str:
    """Name of the program a request belongs to, read from its system message."""
    system = payload["messages"][0]["content"]
    return system.split('"')[1]


@pytest.fixture
def scripted_engine():
    """Factory for ScriptedEngine instances."""
    return ScriptedEngine


@pytest.fixture
def write_program(tmp_path):
    """Write a .mdlang file under tmp_path and return its path as a string."""

    def _write(
        filename: str,
        name: str,
        *,
        description: str = "A test program.",
        input: Optional[Dict[str, Any]] = None,
        output: Optional[Dict[str, Any]] = None,
        imports: Optional[List[str]] = None,
        body: str = "Do the thing.",
    ) -> str:
        frontmatter: Dict[str, Any] = {
            "name": name,
            "description": description,
            "input": input if input is not None else {"type": "object", "properties": {}},
            "output": output if output is not None else {
                "type": "object",
                "properties": {"answer": {"type": "string"}},
            },
        }
        if imports is not None:
            frontmatter["imports"] = imports
        text = "---\n" + yaml.safe_dump(frontmatter, sort_keys=False) + "---\n\n" + body + "\n"
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write
