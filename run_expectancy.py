# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Base-out-count run expectancy lookup.

Expected runs from a state to the end of the half inning, read from a fixed
24-state base-out table and shifted by a ball-strike count adjustment.
"""

from __future__ import annotations

from models import RunnerState

# ---------------------------------------------------------------------------
# 24-state run expectancy matrix (independent-league approximation)
# Key: runner pattern value (e.g. "000" = bases empty, "103" = 1st and 3rd)
# Value: (0 outs, 1 out, 2 outs). Three outs is always 0.
# ---------------------------------------------------------------------------

RE_MATRIX: dict[str, tuple[float, float, float]] = {
    RunnerState.NONE.value: (0.48, 0.26, 0.10),
    RunnerState.FIRST.value: (0.85, 0.51, 0.22),
    RunnerState.SECOND.value: (1.07, 0.67, 0.32),
    RunnerState.THIRD.value: (1.30, 0.90, 0.36),
    RunnerState.FIRST_SECOND.value: (1.46, 0.90, 0.44),
    RunnerState.FIRST_THIRD.value: (1.70, 1.15, 0.50),
    RunnerState.SECOND_THIRD.value: (1.90, 1.35, 0.58),
    RunnerState.FULL.value: (2.25, 1.54, 0.75),
}

# ---------------------------------------------------------------------------
# Ball-strike count adjustments
# Positive favours the batter, negative the pitcher.
# Key: "balls-strikes"
# ---------------------------------------------------------------------------

COUNT_RE_ADJUSTMENTS: dict[str, float] = {
    "0-0": 0.00,
    "1-0": 0.03,
    "2-0": 0.09,
    "3-0": 0.20,
    "0-1": -0.04,
    "1-1": -0.02,
    "2-1": 0.03,
    "3-1": 0.13,
    "0-2": -0.10,
    "1-2": -0.08,
    "2-2": -0.03,
    "3-2": 0.06,  # full count: walk chance outweighs the strikeout risk
}


def _runners_key(runners: RunnerState | str) -> str:
    if isinstance(runners, RunnerState):
        return runners.value
    return str(runners)


def count_key(balls: int, strikes: int) -> str:
    return f"{balls}-{strikes}"


def base_run_expectancy(outs: int, runners: RunnerState | str) -> float:
    """Table value for a base-out state, 0.0 for 3 outs or unknown states."""
    if outs < 0 or outs > 2:
        return 0.0
    row = RE_MATRIX.get(_runners_key(runners))
    if row is None:
        return 0.0
    return row[outs]


def count_adjustment(balls: int, strikes: int) -> float:
    """Signed RE shift for a ball-strike count, 0.0 for unknown counts."""
    return COUNT_RE_ADJUSTMENTS.get(count_key(balls, strikes), 0.0)


def run_expectancy(
    outs: int,
    runners: RunnerState | str,
    balls: int = 0,
    strikes: int = 0,
) -> float:
    """Return expected runs for a base-out-count state.

    Args:
        outs: Outs in the inning. Three or more means the inning is over.
        runners: Runner pattern (enum member or its string value).
        balls: Balls in the count (0-3).
        strikes: Strikes in the count (0-2).

    Returns:
        Base table value plus the count adjustment, never below 0.0.
        Unknown states and counts contribute 0.0 instead of raising.
    """
    if outs >= 3:
        return 0.0
    re = base_run_expectancy(outs, runners) + count_adjustment(balls, strikes)
    return max(0.0, re)
