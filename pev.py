# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Player Evaluation Value (PEV) calculation.

PEV = runs scored + (after RE - before RE) + risk adjustment

The RE delta is the measurable part of a play's value. The risk adjustment
is a fixed doctrine term: passive strikeouts cost more than aggressive ones,
double plays cost the most, and putting the ball in play to force an error
earns a bonus.
"""

from __future__ import annotations

from models import ResultType, RunnerState
from run_expectancy import run_expectancy

# ---------------------------------------------------------------------------
# Outcome classification
# ---------------------------------------------------------------------------

# Single-pitch events: the same batter stays at the plate with a new count.
CONTINUING_RESULTS: frozenset[ResultType] = frozenset({
    ResultType.TAKE_BALL,
    ResultType.TAKE_STRIKE,
    ResultType.SWING_STRIKE,
    ResultType.FOUL,
})

# ---------------------------------------------------------------------------
# Risk adjustments (added to the RE delta)
# ---------------------------------------------------------------------------

RISK_ADJUSTMENTS: dict[ResultType, float] = {
    ResultType.DOUBLE_PLAY: -0.50,
    ResultType.STRIKEOUT_LOOKING: -0.25,
    ResultType.STRIKEOUT: -0.15,
    ResultType.STRIKEOUT_SWINGING: -0.15,
    ResultType.ERROR: 0.30,
}


def ends_plate_appearance(result_type: ResultType) -> bool:
    """True if the outcome finishes the plate appearance."""
    return ResultType(result_type) not in CONTINUING_RESULTS


def risk_adjustment(result_type: ResultType) -> float:
    return RISK_ADJUSTMENTS.get(ResultType(result_type), 0.0)


def after_run_expectancy(
    next_outs: int,
    next_runners: RunnerState | str,
    result_type: ResultType,
    next_balls: int = 0,
    next_strikes: int = 0,
) -> float:
    """Run expectancy of the state a play leaves behind.

    A finished plate appearance hands a fresh 0-0 count to the next batter,
    so the supplied after-count only matters for single-pitch events.
    """
    if next_outs == 3:
        return 0.0
    if ends_plate_appearance(result_type):
        next_balls, next_strikes = 0, 0
    return run_expectancy(next_outs, next_runners, next_balls, next_strikes)


def calculate_pev(
    runs_scored: int,
    before_re: float,
    next_outs: int,
    next_runners: RunnerState | str,
    result_type: ResultType,
    next_balls: int = 0,
    next_strikes: int = 0,
) -> float:
    """Compute the PEV contribution of a single play.

    Args:
        runs_scored: Runs that crossed the plate on the play.
        before_re: Run expectancy of the situation before the play.
        next_outs: Outs after the play (3 ends the inning).
        next_runners: Runner pattern after the play.
        result_type: Outcome category of the play.
        next_balls: Balls after the play (single-pitch events only).
        next_strikes: Strikes after the play (single-pitch events only).

    Returns:
        Signed PEV value.
    """
    after_re = after_run_expectancy(
        next_outs, next_runners, result_type, next_balls, next_strikes,
    )
    return runs_scored + (after_re - before_re) + risk_adjustment(result_type)
