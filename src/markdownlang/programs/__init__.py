from .base import INLINE_SOURCE, SCHEMA_KEYS, Program, Schema
from .loader import check_required_inputs, load, parse_source, resolve_import
from .schemas import normalize
from .templates import render

__all__ = [
    "INLINE_SOURCE",
    "SCHEMA_KEYS",
    "Program",
    "Schema",
    "check_required_inputs",
    "load",
    "parse_source",
    "resolve_import",
    "normalize",
    "render",
]
