from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.Exceptions import MalformedProgramError

__all__ = ["INLINE_SOURCE", "SCHEMA_KEYS", "FrozenDict", "FrozenList", "Schema", "Program"]

# Source identity used for programs parsed from text rather than a file.
INLINE_SOURCE = "<inline>"

# JSON Schema keys the strict structured-output dialect understands.
SCHEMA_KEYS: Tuple[str, ...] = (
    "type",
    "properties",
    "required",
    "items",
    "description",
    "enum",
    "const",
    "anyOf",
    "oneOf",
    "$ref",
    "$defs",
    "additionalProperties",
)


def _readonly(self: Any, *args: Any, **kwargs: Any) -> Any:
    raise TypeError(f"{type(self).__name__} is immutable")


class FrozenDict(dict):
    """``dict`` whose contents cannot be changed after construction."""

    __slots__ = ()

    def __init__(self, data: Optional[Mapping[str, Any]] = None) -> None:
        dict.__init__(self)
        for key, value in (data or {}).items():
            dict.__setitem__(self, str(key), _freeze(value))

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

    def __reduce__(self):
        return (type(self), (dict(self),))


class FrozenList(list):
    """``list`` whose contents cannot be changed after construction."""

    __slots__ = ()

    def __init__(self, items: Any = ()) -> None:
        list.__init__(self, items)

    __setitem__ = _readonly
    __delitem__ = _readonly
    __iadd__ = _readonly
    __imul__ = _readonly
    append = _readonly
    extend = _readonly
    insert = _readonly
    pop = _readonly
    remove = _readonly
    clear = _readonly
    sort = _readonly
    reverse = _readonly

    def __reduce__(self):
        return (type(self), (list(self),))


def _freeze(value: Any) -> Any:
    """Read-only copy of a JSON-like value."""
    if isinstance(value, Mapping):
        return FrozenDict(value)
    if isinstance(value, list):
        return FrozenList(_freeze(v) for v in value)
    if isinstance(value, tuple):
        return tuple(_freeze(v) for v in value)
    return copy.deepcopy(value)


def _schema_or_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return Schema(value)
    return _freeze(value)


def _coerce(key: str, value: Any) -> Any:
    """Wrap the sub-schemas found at schema positions; freeze everything else."""
    if key in ("properties", "$defs") and isinstance(value, Mapping):
        return FrozenDict({str(k): _schema_or_value(v) for k, v in value.items()})
    if key in ("items", "additionalProperties") and isinstance(value, Mapping):
        return Schema(value)
    if key in ("anyOf", "oneOf") and isinstance(value, list):
        return FrozenList(_schema_or_value(v) for v in value)
    return _freeze(value)


class Schema(FrozenDict):
    """Read-only JSON Schema node.

    A ``Schema`` is a plain ``dict`` as far as ``json.dumps`` and equality are
    concerned, so it compares equal to the mapping it was built from. On top
    of that it offers attribute access to the keys in :data:`SCHEMA_KEYS` and
    keeps every other key (``minimum``, ``maxLength``, ``pattern``, ...)
    verbatim; those are exposed through :attr:`extras` and only disappear when
    the schema is normalized.

    Sub-schemas (``properties`` values, ``items``, ``anyOf``/``oneOf``
    branches, ``$defs`` values, mapping ``additionalProperties``) are wrapped
    as ``Schema`` too. ``$ref`` is never resolved.

    Instances are immutable all the way down: nested mappings are stored as
    :class:`FrozenDict` and lists as :class:`FrozenList`, so item assignment
    and the mutating ``dict``/``list`` methods raise ``TypeError`` at every
    level. Both still compare equal to, and serialize like, plain containers.
    """

    __slots__ = ()

    def __init__(self, data: Optional[Mapping[str, Any]] = None) -> None:
        dict.__init__(self)
        for key, value in (data or {}).items():
            dict.__setitem__(self, str(key), _coerce(str(key), value))

    # Attribute accessors
    @property
    def type(self) -> Any:
        return self.get("type")

    @property
    def properties(self) -> Optional[Dict[str, Any]]:
        props = self.get("properties")
        return dict(props) if isinstance(props, Mapping) else props

    @property
    def required(self) -> Optional[List[str]]:
        req = self.get("required")
        return list(req) if isinstance(req, list) else req

    @property
    def items_schema(self) -> Any:
        """The ``items`` key (``Schema.items`` is the ``dict`` method)."""
        return self.get("items")

    @property
    def description(self) -> Optional[str]:
        return self.get("description")

    @property
    def enum(self) -> Optional[List[Any]]:
        return self.get("enum")

    @property
    def const(self) -> Any:
        return self.get("const")

    @property
    def any_of(self) -> Optional[List[Any]]:
        return self.get("anyOf")

    @property
    def one_of(self) -> Optional[List[Any]]:
        return self.get("oneOf")

    @property
    def ref(self) -> Optional[str]:
        return self.get("$ref")

    @property
    def defs(self) -> Optional[Dict[str, Any]]:
        return self.get("$defs")

    @property
    def additional_properties(self) -> Any:
        return self.get("additionalProperties")

    @property
    def extras(self) -> Dict[str, Any]:
        """Keys outside :data:`SCHEMA_KEYS`, in source order."""
        return {k: v for k, v in dict.items(self) if k not in SCHEMA_KEYS}

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested ``dict`` copy of this schema."""
        return copy.deepcopy(_plain(self))


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


# ───────────────────────────────────────────────────────────────────────────────
# Program
# ───────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Program:
    """A parsed markdownlang program.

    ``name``, ``description``, ``input_schema`` and ``output_schema`` are
    mandatory; ``imports`` (references to other program sources, used as
    tools) and ``body`` (the prompt template) are optional. ``source`` is the
    absolute path the program was read from, or ``"<inline>"``.

    Programs carry no runtime state and can be shared between runs.
    """

    name: str
    description: str
    input_schema: Schema
    output_schema: Schema
    imports: Tuple[str, ...] = field(default_factory=tuple)
    body: str = ""
    source: str = INLINE_SOURCE

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise MalformedProgramError("name must be a non-empty string")
        if not isinstance(self.description, str):
            raise MalformedProgramError("description must be a string")
        for attr in ("input_schema", "output_schema"):
            value = getattr(self, attr)
            if not isinstance(value, Mapping):
                raise MalformedProgramError(
                    f"{attr} must be a JSON Schema mapping, got {type(value).__name__}"
                )
            if not isinstance(value, Schema):
                object.__setattr__(self, attr, Schema(value))
        object.__setattr__(self, "imports", tuple(str(ref) for ref in (self.imports or ())))
        object.__setattr__(self, "body", self.body or "")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable view, keyed like the source frontmatter."""
        return {
            "name": self.name,
            "description": self.description,
            "input": self.input_schema.to_dict(),
            "output": self.output_schema.to_dict(),
            "imports": list(self.imports),
            "body": self.body,
            "source": self.source,
        }
