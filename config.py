# /// script
# requires-python = ">=3.12"
# dependencies = ["anthropic>=0.78.0"]
# ///
"""Centralized configuration for environment variables."""

import os
from pathlib import Path

from anthropic import Anthropic

ANTHROPIC_KEY_ENV = "ANTHROPIC_API_KEY"
COACH_MODEL_ENV = "PEV_COACH_MODEL"
LOG_PATH_ENV = "PEV_LOG_PATH"

DEFAULT_COACH_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_LOG_PATH = Path(__file__).resolve().parent / "data" / "play_log.json"


def get_api_key() -> str:
    """Return the Anthropic API key, or empty string if not set."""
    return os.environ.get(ANTHROPIC_KEY_ENV, "")


def get_coach_model() -> str:
    return os.environ.get(COACH_MODEL_ENV) or DEFAULT_COACH_MODEL


def get_log_path() -> Path:
    """Return the play log path, honouring the PEV_LOG_PATH override."""
    override = os.environ.get(LOG_PATH_ENV)
    return Path(override) if override else DEFAULT_LOG_PATH


def create_anthropic_client(api_key: str | None = None) -> Anthropic:
    """Create an Anthropic client using the given or configured API key."""
    return Anthropic(api_key=api_key or get_api_key())
