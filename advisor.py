# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "anthropic>=0.78.0",
#     "pydantic>=2.0",
# ]
# ///
"""AI coach: asks Claude for a short strategy recommendation.

The coach sees the current situation and the ranked strategy statistics for
it and returns free text. It never touches stored records or computed
values. Every failure (missing key, rate limit exhaustion, API error)
becomes a human-readable fallback string.

Usage::

    from advisor import get_ai_analysis

    advice = get_ai_analysis(situation, stats)
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Optional

from config import create_anthropic_client, get_api_key, get_coach_model
from models import Situation, StrategyStat
from strategy import total_samples
from strategy_output import describe_situation

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Claude API constants
# ---------------------------------------------------------------------------

COACH_MAX_RETRIES = 3
COACH_BACKOFF_BASE = 2.0  # seconds; actual delay = base * 2^attempt + jitter
COACH_MAX_TOKENS = 512
ADVICE_MAX_CHARS = 200

LOW_SAMPLE_THRESHOLD = 5
HIGH_SAMPLE_THRESHOLD = 10

NO_API_KEY_MESSAGE = "API key not configured."
NO_ADVICE_MESSAGE = "The coach could not produce a recommendation."
ERROR_MESSAGE = "An error occurred while asking the AI coach."


# ---------------------------------------------------------------------------
# Prompt construction
# ---------------------------------------------------------------------------

def build_stats_description(stats: list[StrategyStat]) -> str:
    if not stats:
        return "- No recorded plays in this situation."
    return "\n".join(
        f"- Action: {s.action.value}, Avg PEV: {s.avg_pev:.3f}, "
        f"Avg Pitches: {s.avg_pitches:.1f}, Samples: {s.count}"
        for s in stats
    )


def build_advice_prompt(
    situation: Situation,
    stats: list[StrategyStat],
    team_name: str = "",
    language: str = "English",
) -> str:
    """Build the coach prompt for a situation and its strategy statistics."""
    team = team_name or situation.offense_team or "the team"
    samples = total_samples(stats)
    return (
        f"You are the strategy coach for {team}.\n\n"
        f"Current situation:\n"
        f"{describe_situation(situation)}\n\n"
        f"Historical data (actual results in this situation):\n"
        f"{build_stats_description(stats)}\n"
        f"Total samples: {samples}\n\n"
        f"Task:\n"
        f"Give a concise strategic recommendation in {language} "
        f"(under {ADVICE_MAX_CHARS} characters).\n\n"
        f"Guidelines:\n"
        f"1. If total samples are low (under {LOW_SAMPLE_THRESHOLD}), rely more on "
        f"general theory (run expectancy, count leverage) and mention the lack of data.\n"
        f"2. If total samples are high (over {HIGH_SAMPLE_THRESHOLD}), rely heavily on "
        f"the historical data. If one action has a clearly higher Avg PEV, recommend "
        f"it as a team trend.\n"
        f"3. Always consider the ball/strike count (3-0 green light vs 0-2 protect).\n"
        f"4. Treat PEV (Player Evaluation Value) as the primary measure of success.\n"
    )


# ---------------------------------------------------------------------------
# Rate-limit handling
# ---------------------------------------------------------------------------

def _coach_backoff_sleep(attempt: int, retry_after: float | None = None) -> None:
    """Sleep with exponential backoff and jitter before retrying."""
    base_delay = COACH_BACKOFF_BASE * (2 ** attempt)
    delay = base_delay + random.random() * base_delay
    if retry_after is not None and retry_after > delay:
        delay = retry_after
    time.sleep(delay)


def _extract_retry_after(exc: Exception) -> float | None:
    """Read ``retry-after`` / ``x-retry-after`` from an API error's response."""
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    for key in ("retry-after", "x-retry-after"):
        val = headers.get(key)
        if val is not None:
            try:
                return max(0.0, float(val))
            except (TypeError, ValueError):
                pass
    return None


def _is_rate_limit_error(exc: Exception) -> bool:
    """Check whether an Anthropic exception is a 429 rate limit error."""
    if getattr(exc, "status_code", None) == 429:
        return True
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None) == 429


def _extract_text(message: Any) -> str:
    parts = []
    for block in getattr(message, "content", None) or []:
        if getattr(block, "type", None) == "text" and block.text:
            parts.append(block.text)
    return "".join(parts).strip()


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def get_ai_analysis(
    situation: Situation,
    stats: list[StrategyStat],
    client: Optional[Any] = None,
    model: Optional[str] = None,
    team_name: str = "",
    language: str = "English",
    max_retries: int = COACH_MAX_RETRIES,
) -> str:
    """Ask the coach for a recommendation.

    Args:
        situation: Current situation.
        stats: Ranked strategy statistics for the situation.
        client: Anthropic client. Created from the environment if omitted.
        model: Model name. Defaults to the configured coach model.
        team_name: Team the coach works for (defaults to the offense).
        language: Language of the reply.
        max_retries: Attempts allowed when the API rate-limits us.

    Returns:
        The coach's advice, or a fallback message on any failure.
    """
    if client is None:
        api_key = get_api_key()
        if not api_key:
            return NO_API_KEY_MESSAGE
        client = create_anthropic_client(api_key)

    prompt = build_advice_prompt(situation, stats, team_name=team_name, language=language)
    model = model or get_coach_model()

    for attempt in range(max_retries):
        try:
            message = client.messages.create(
                model=model,
                max_tokens=COACH_MAX_TOKENS,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as exc:
            if _is_rate_limit_error(exc) and attempt < max_retries - 1:
                retry_after = _extract_retry_after(exc)
                logger.warning(
                    "Claude API rate limit (429) on attempt %d/%d (Retry-After: %s)",
                    attempt + 1, max_retries,
                    retry_after if retry_after is not None else "not set",
                )
                _coach_backoff_sleep(attempt, retry_after=retry_after)
                continue
            logger.warning("AI coach request failed: %s", exc)
            return ERROR_MESSAGE
        return _extract_text(message) or NO_ADVICE_MESSAGE

    return ERROR_MESSAGE
