import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .engines.LLMEngines import DEFAULT_MODEL

# Files read by load_environment(), in priority order.
ENV_FILES = (".env.local", ".env")


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment."""

    default_model: str = DEFAULT_MODEL
    openai_api_key: Optional[str] = None
    timeout_seconds: float = 600.0


def load_environment(directory: Optional[str] = None) -> None:
    """Load .env.local, then .env, from ``directory`` (default: the working directory).

    Variables already present in the environment are never overridden, so
    .env.local takes precedence over .env.
    """
    base = directory or os.getcwd()
    for filename in ENV_FILES:
        path = os.path.join(base, filename)
        if os.path.isfile(path):
            load_dotenv(path, override=False)


def get_settings() -> Settings:
    """Build Settings from the current environment."""
    timeout_raw = os.getenv("MARKDOWNLANG_TIMEOUT")
    try:
        timeout = float(timeout_raw) if timeout_raw else Settings.timeout_seconds
    except ValueError as exc:
        raise ValueError(f"Configuration value is invalid: MARKDOWNLANG_TIMEOUT={timeout_raw!r}") from exc

    return Settings(
        default_model=os.getenv("MARKDOWNLANG_MODEL") or DEFAULT_MODEL,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        timeout_seconds=timeout,
    )
