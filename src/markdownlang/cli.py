"""
markdownlang command line.

    markdownlang run FILE [-i JSON] [-m MODEL] [-v]
    markdownlang parse FILE

Results go to stdout as JSON; diagnostics and errors go to stderr. Any
failure exits with status 1.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .config import get_settings, load_environment
from .core.Exceptions import MarkdownlangError
from .engines.LLMEngines import OpenAIEngine
from .programs.loader import check_required_inputs, load
from .runtime.runner import ProgramRunner, RunOptions

logger = logging.getLogger(__name__)


class CLIError(Exception):
    """Raised for invalid command-line usage that argparse cannot catch."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markdownlang",
        description="An AI-native programming environment where markdown files are executable programs",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    run_p = sub.add_parser("run", help="Run a markdownlang program")
    run_p.add_argument("file", help="Path to a .mdlang file")
    run_p.add_argument("-i", "--input", default="{}", help="Input data as a JSON string")
    run_p.add_argument("-m", "--model", default=None, help="OpenAI model to use (default: $MARKDOWNLANG_MODEL or gpt-4o-mini)")
    run_p.add_argument("-v", "--verbose", action="store_true", help="Enable verbose/debug output")
    run_p.set_defaults(handler=_cmd_run)

    parse_p = sub.add_parser("parse", help="Parse and display the structure of a markdownlang program")
    parse_p.add_argument("file", help="Path to a .mdlang file")
    parse_p.set_defaults(handler=_cmd_parse)

    return parser


def _parse_input(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CLIError("--input must be valid JSON") from exc
    if not isinstance(data, dict):
        raise CLIError("--input must be a JSON object")
    return data


def _cmd_run(args: argparse.Namespace) -> int:
    program = load(args.file)
    inputs = _parse_input(args.input)
    check_required_inputs(program, inputs)

    settings = get_settings()
    model = args.model or settings.default_model
    engine = OpenAIEngine(
        model=model,
        api_key=settings.openai_api_key,
        timeout_seconds=settings.timeout_seconds,
    )
    runner = ProgramRunner(engine, RunOptions(model=model, verbose=args.verbose))
    result = runner.run(program, inputs)

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def _cmd_parse(args: argparse.Namespace) -> int:
    program = load(args.file)
    print(json.dumps(program.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO if getattr(args, "verbose", False) else logging.WARNING,
        format="[%(name)s] %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    load_environment()

    try:
        return args.handler(args)
    except (MarkdownlangError, CLIError, ValueError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
