from __future__ import annotations

# LLMEngines.py
# Engines are stateless adapters around provider SDKs.
# The runner owns the conversation; engines map messages, the output-schema
# directive and tool declarations to provider-specific requests.

import os
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from ..core.Exceptions import LLMEngineError
from .base import Completion, LLMEngine, ToolCall

__all__ = ["DEFAULT_MODEL", "Completion", "LLMEngine", "OpenAIEngine", "ToolCall"]

DEFAULT_MODEL = "gpt-4o-mini"


# ── OPENAI (Chat Completions API) ─────────────────────────────────────────────
class OpenAIEngine(LLMEngine):
    """
    OpenAI adapter using the Chat Completions API.

    Structured output is requested through ``response_format`` (a strict
    ``json_schema`` directive) and imported programs are offered through
    ``tools`` as function declarations. Assistant turns that carry tool calls
    and the matching ``tool`` messages are passed through unchanged.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        temperature: Optional[float] = None,
        *,
        name: Optional[str] = None,
        timeout_seconds: float = 600.0,
        client: Optional[Any] = None,
    ) -> None:
        """
        Parameters
        ----------
        model:
            Default OpenAI model identifier (e.g. "gpt-4o-mini"); a per-call
            ``model`` passed to ``invoke`` takes precedence.
        api_key:
            Optional API key; if omitted, `OPENAI_API_KEY` from the environment is used.
        temperature:
            Sampling temperature; left to the provider default when None.
        name, timeout_seconds:
            Engine configuration (see `base.LLMEngine`).
        client:
            Pre-built OpenAI client; when given, `api_key` and the timeout are
            not applied.
        """
        super().__init__(
            name=name or f"openai:{model}",
            timeout_seconds=timeout_seconds,
        )

        if client is None:
            try:
                client = OpenAI(
                    api_key=api_key or os.getenv("OPENAI_API_KEY"),
                    timeout=self._timeout_seconds,
                )
            except OpenAIError as exc:
                raise LLMEngineError(f"{self._name}: could not create OpenAI client: {exc}") from exc
        self.llm = client

        self.model = model
        self.temperature = None if temperature is None else float(temperature)

    # ------------------------------------------------------------------ #
    # Template hooks
    # ------------------------------------------------------------------ #

    def _build_provider_payload(
        self,
        messages: List[Dict[str, Any]],
        *,
        response_format: Optional[Dict[str, Any]],
        tools: List[Dict[str, Any]],
        model: Optional[str],
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
        }
        if response_format:
            kwargs["response_format"] = response_format
        if tools:
            kwargs["tools"] = tools
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        return kwargs

    def _call_provider(self, payload: Dict[str, Any]) -> Any:
        """Perform a single Chat Completions call using the pre-built payload."""
        return self.llm.chat.completions.create(**payload)

    def _extract_completion(self, response: Any) -> Completion:
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise LLMEngineError(f"{self._name}: response contained no choices")
        message = choices[0].message

        calls: List[ToolCall] = []
        for tc in getattr(message, "tool_calls", None) or []:
            function = getattr(tc, "function", None)
            if function is None:
                raise LLMEngineError(
                    f"{self._name}: unsupported tool call type {getattr(tc, 'type', None)!r}"
                )
            calls.append(
                ToolCall(
                    id=str(tc.id),
                    name=str(function.name),
                    arguments=function.arguments or "{}",
                )
            )

        return Completion(content=getattr(message, "content", None), tool_calls=tuple(calls))

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def to_dict(self) -> OrderedDict[str, Any]:
        """
        Diagnostic snapshot for OpenAIEngine, without secrets.
        """
        base = OrderedDict(super().to_dict())
        base.update(
            OrderedDict(
                model=self.model,
                temperature=self.temperature,
            )
        )
        return base
