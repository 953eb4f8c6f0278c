"""
Example: running markdownlang programs from Python.

Loads a program, checks its required inputs, and runs it with an OpenAIEngine.
`prime_report.mdlang` imports `is_prime.mdlang`, so the model can call it as a
tool; each call runs is_prime as its own nested program.

Usage:
  python examples/run_program.py
"""
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from markdownlang import OpenAIEngine, ProgramRunner, RunOptions, check_required_inputs, load

load_dotenv()  # take environment variables from .env file (if exists)

logging.basicConfig(level=logging.INFO)

HERE = Path(__file__).parent


def run_case(label: str, runner: ProgramRunner, filename: str, inputs: dict) -> None:
    print(f"\n=== {label} ===")
    program = load(str(HERE / filename))
    check_required_inputs(program, inputs)
    result = runner.run(program, inputs)
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    engine = OpenAIEngine(model="gpt-4o-mini")
    runner = ProgramRunner(engine, RunOptions(verbose=True))

    run_case("fizzbuzz 1..15", runner, "fizzbuzz.mdlang", {"start": 1, "end": 15})
    run_case("prime report", runner, "prime_report.mdlang", {"numbers": [4, 7, 9, 11, 21]})
