from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.Exceptions import LLMEngineError

logger = logging.getLogger(__name__)

__all__ = [
    "MESSAGE_ROLES",
    "ToolCall",
    "Completion",
    "LLMEngine",
]

MESSAGE_ROLES = frozenset({"system", "user", "assistant", "tool"})


@dataclass(frozen=True)
class ToolCall:
    """One function call requested by the model; ``arguments`` is raw JSON text."""

    id: str
    name: str
    arguments: str = "{}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass(frozen=True)
class Completion:
    """Provider-neutral view of one chat-completion response."""

    content: Optional[str] = None
    tool_calls: Tuple[ToolCall, ...] = field(default_factory=tuple)

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0

    def assistant_message(self) -> Dict[str, Any]:
        """The assistant turn to append to the conversation."""
        message: Dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        return message


class LLMEngine(ABC):
    """
    Base template-method primitive for LLM provider adapters.

    Engines are stateless with respect to conversation history: the runner
    owns the messages. An engine instance represents one provider + default
    model configuration and is passed explicitly to whoever needs it, so
    several engines (different credentials, test doubles) can coexist.

    Public contract
    ---------------
    - ``invoke(messages, *, response_format, tools, model) -> Completion``
      is the *only* public entrypoint for making a call.

    Each ``invoke`` performs exactly one provider call; there is no retry.
    """

    def __init__(
        self,
        *,
        name: Optional[str] = None,
        timeout_seconds: float = 600.0,
    ) -> None:
        """
        Parameters
        ----------
        name:
            Optional human-friendly identifier for logging/introspection.
        timeout_seconds:
            Per-call timeout; subclasses should honor this where their
            provider SDKs allow it.
        """
        self._name = name or type(self).__name__
        self._timeout_seconds = float(timeout_seconds)

    # --------------------------------------------------------------------- #
    # Public surface
    # --------------------------------------------------------------------- #

    @property
    def name(self) -> str:
        """Human-friendly identifier for this engine instance."""
        return self._name

    def invoke(
        self,
        messages: List[Dict[str, Any]],
        *,
        response_format: Optional[Mapping[str, Any]] = None,
        tools: Optional[Sequence[Mapping[str, Any]]] = None,
        model: Optional[str] = None,
    ) -> Completion:
        """
        Template method that defines the engine invocation lifecycle.

        Steps:
        1. Normalize and validate the input `messages`.
        2. Ask the subclass to build a provider-specific payload.
        3. Call the provider once.
        4. Extract a `Completion` (content and/or tool calls).

        Subclasses **must not** override this method; they customize behavior
        via the protected hooks documented below.
        """
        start = time.time()
        try:
            normalized = self._normalize_messages(messages)
            payload = self._build_provider_payload(
                normalized,
                response_format=dict(response_format) if response_format else None,
                tools=[dict(t) for t in tools or ()],
                model=model,
            )
            response = self._call_provider(payload)
            completion = self._extract_completion(response)

            if not isinstance(completion, Completion):
                raise LLMEngineError(
                    f"{type(self).__name__}._extract_completion must return Completion; "
                    f"got {type(completion)!r}"
                )
            return completion
        except LLMEngineError:
            # Already normalized; bubble up unchanged.
            raise
        except Exception as exc:
            raise LLMEngineError(f"{self._name}.invoke failed: {exc}") from exc
        finally:
            duration = time.time() - start
            logger.debug(
                "LLMEngine %s.invoke completed in %.3fs", self._name, duration
            )

    # --------------------------------------------------------------------- #
    # Shared helpers used by the template
    # --------------------------------------------------------------------- #

    def _normalize_messages(
        self, messages: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """
        Validate and normalize a sequence of chat messages.

        - Ensures `messages` is a non-empty list of mappings.
        - Ensures each `role` is one of system/user/assistant/tool (lowercased).
        - `content` must be a string, except on assistant turns that carry
          `tool_calls`, where it may be None.
        - `tool` messages must name the `tool_call_id` they answer.
        """
        if not isinstance(messages, list):
            raise LLMEngineError("LLMEngine.invoke: messages must be a list")
        if not messages:
            raise LLMEngineError("LLMEngine.invoke: messages must not be empty")

        normalized: List[Dict[str, Any]] = []
        for idx, msg in enumerate(messages):
            if not isinstance(msg, Mapping):
                raise LLMEngineError(
                    f"LLMEngine.invoke: message {idx} is not a mapping (got {type(msg)!r})"
                )
            role = msg.get("role")
            if not isinstance(role, str) or role.lower() not in MESSAGE_ROLES:
                raise LLMEngineError(f"LLMEngine.invoke: message {idx} has invalid role {role!r}")
            role = role.lower()

            content = msg.get("content")
            if content is None and not (role == "assistant" and msg.get("tool_calls")):
                raise LLMEngineError(f"LLMEngine.invoke: message {idx} ({role}) has no content")
            if content is not None and not isinstance(content, str):
                raise LLMEngineError(f"LLMEngine.invoke: message {idx} content must be a string")

            if role == "tool" and not isinstance(msg.get("tool_call_id"), str):
                raise LLMEngineError(f"LLMEngine.invoke: tool message {idx} requires a 'tool_call_id'")

            entry = dict(msg)
            entry["role"] = role
            normalized.append(entry)
        return normalized

    # --------------------------------------------------------------------- #
    # Abstract hooks for subclasses
    # --------------------------------------------------------------------- #

    @abstractmethod
    def _build_provider_payload(
        self,
        messages: List[Dict[str, Any]],
        *,
        response_format: Optional[Dict[str, Any]],
        tools: List[Dict[str, Any]],
        model: Optional[str],
    ) -> Any:
        """
        Convert normalized messages, the output directive and tool
        declarations into the provider-specific request payload. ``model``
        overrides the engine's default model when given.
        """
        raise NotImplementedError

    @abstractmethod
    def _call_provider(self, payload: Any) -> Any:
        """
        Perform a single call to the underlying provider using the given payload.

        This method should honor `self._timeout_seconds` where possible.
        """
        raise NotImplementedError

    @abstractmethod
    def _extract_completion(self, response: Any) -> Completion:
        """
        Extract the assistant's reply (content and tool calls) from a provider
        response object.
        """
        raise NotImplementedError

    # --------------------------------------------------------------------- #
    # Introspection
    # --------------------------------------------------------------------- #

    def to_dict(self) -> Dict[str, Any]:
        """
        Shallow, non-secret configuration snapshot for debugging / logging.
        """
        return {
            "name": self._name,
            "timeout_seconds": self._timeout_seconds,
            "provider": type(self).__name__,
        }
