from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

import yaml

from ..core.Exceptions import MalformedProgramError, MissingInputError, SourceNotFoundError
from .base import INLINE_SOURCE, Program

logger = logging.getLogger(__name__)

__all__ = [
    "DELIMITER",
    "REQUIRED_FIELDS",
    "load",
    "parse_source",
    "resolve_import",
    "check_required_inputs",
]

DELIMITER = "---"
REQUIRED_FIELDS = ("name", "description", "input", "output")


# ───────────────────────────────────────────────────────────────────────────────
# Parsing
# ───────────────────────────────────────────────────────────────────────────────
def parse_source(source: str, source_path: str = INLINE_SOURCE) -> Program:
    """
    Parse markdownlang source text into a Program.

    The format is::

        ---
        <YAML frontmatter>
        ---
        <Markdown body>

    The frontmatter must be a mapping with ``name``, ``description``,
    ``input`` (JSON Schema) and ``output`` (JSON Schema), and may list
    ``imports`` (paths to other programs, used as tools). Everything after
    the closing delimiter, trimmed, is the prompt body.

    Raises MalformedProgramError, with ``source_path`` in the message, when
    any of that does not hold.
    """

    def fail(reason: str) -> MalformedProgramError:
        return MalformedProgramError(f"Invalid markdownlang file ({source_path}): {reason}")

    lines = source.strip().splitlines()
    if not lines or lines[0].strip() != DELIMITER:
        raise fail(f"must start with YAML frontmatter delimited by {DELIMITER}")

    closing = next(
        (i for i in range(1, len(lines)) if lines[i].strip() == DELIMITER),
        None,
    )
    if closing is None:
        raise fail(f"missing closing {DELIMITER} for frontmatter")

    frontmatter_raw = "\n".join(lines[1:closing])
    body = "\n".join(lines[closing + 1:]).strip()

    try:
        frontmatter = yaml.safe_load(frontmatter_raw)
    except yaml.YAMLError as exc:
        raise fail(f"frontmatter is not valid YAML: {exc}") from exc

    if not isinstance(frontmatter, Mapping):
        raise fail("frontmatter is not a valid YAML object")

    for name in REQUIRED_FIELDS:
        if name not in frontmatter:
            raise fail(f'missing required field "{name}" in frontmatter')

    imports = frontmatter.get("imports")
    if imports is not None and not isinstance(imports, list):
        raise fail(f'"imports" must be a list of paths, got {type(imports).__name__}')

    try:
        program = Program(
            name=str(frontmatter["name"]),
            description=str(frontmatter["description"]),
            input_schema=frontmatter["input"],
            output_schema=frontmatter["output"],
            imports=tuple(str(ref) for ref in imports or ()),
            body=body,
            source=source_path,
        )
    except MalformedProgramError as exc:
        raise fail(str(exc)) from exc

    logger.debug("Parsed program %r from %s (%d imports)", program.name, source_path, len(program.imports))
    return program


# ───────────────────────────────────────────────────────────────────────────────
# Loading
# ───────────────────────────────────────────────────────────────────────────────
def load(reference: str, base_dir: Optional[str] = None) -> Program:
    """
    Read and parse the program at ``reference``.

    Relative references resolve against ``base_dir`` when given, otherwise
    against the working directory. Every call reads and parses the file
    again; nothing is cached.
    """
    if not isinstance(reference, str) or not reference.strip():
        raise SourceNotFoundError(f"Program reference must be a non-empty path, got {reference!r}")

    path = os.path.expanduser(reference)
    if base_dir is not None and not os.path.isabs(path):
        path = os.path.join(base_dir, path)
    path = os.path.abspath(path)

    if not os.path.isfile(path):
        raise SourceNotFoundError(f"Program source not found: {reference} (resolved to {path})")

    try:
        with open(path, "r", encoding="utf-8") as fh:
            content = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedProgramError(f"Invalid markdownlang file ({path}): cannot be read: {exc}") from exc

    return parse_source(content, path)


def resolve_import(program: Program, reference: str) -> Program:
    """
    Load an import of ``program``.

    A relative reference is looked up next to the importing program's source
    first; when no file exists there, it resolves against the working
    directory. Inline programs only use the working directory.
    """
    if program.source != INLINE_SOURCE and isinstance(reference, str):
        base_dir = os.path.dirname(program.source)
        candidate = os.path.join(base_dir, os.path.expanduser(reference))
        if os.path.isfile(candidate):
            return load(reference, base_dir=base_dir)
        logger.debug(
            "%s: import %s not found next to %s, trying the working directory",
            program.name, reference, program.source,
        )
    return load(reference)


# ───────────────────────────────────────────────────────────────────────────────
# Pre-flight input check
# ───────────────────────────────────────────────────────────────────────────────
def check_required_inputs(program: Program, inputs: Mapping[str, Any]) -> None:
    """
    Ensure every field in ``program.input_schema.required`` is present in
    ``inputs``.

    This is a convenience for callers (the CLI runs it before ``run``); the
    execution engine itself does not depend on it.
    """
    required = program.input_schema.required
    if not isinstance(required, list):
        return
    for name in required:
        if name not in inputs:
            raise MissingInputError(
                f'missing required input field "{name}" '
                f"(required fields: {', '.join(str(r) for r in required)})"
            )
