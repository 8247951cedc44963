# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Data models for the PEV strategy log."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Half(str, Enum):
    TOP = "TOP"
    BOTTOM = "BOTTOM"


class InningZone(str, Enum):
    EARLY = "EARLY"    # 1-3
    MIDDLE = "MIDDLE"  # 4-6
    LATE = "LATE"      # 7+


class ScoreDiff(str, Enum):
    """Score differential bucket from the offense's point of view."""
    WIN_BIG = "WIN_BIG"        # +3 or more
    WIN_SMALL = "WIN_SMALL"    # +1 to +2
    TIE = "TIE"
    LOSE_SMALL = "LOSE_SMALL"  # -1 to -2
    LOSE_BIG = "LOSE_BIG"      # -3 or less

    @classmethod
    def from_runs(cls, diff: int) -> ScoreDiff:
        """Bucket a raw run differential (offense minus defense)."""
        if diff >= 3:
            return cls.WIN_BIG
        if diff >= 1:
            return cls.WIN_SMALL
        if diff == 0:
            return cls.TIE
        if diff >= -2:
            return cls.LOSE_SMALL
        return cls.LOSE_BIG

    def flipped(self) -> ScoreDiff:
        """The same margin seen from the other team's side."""
        mirror = {
            ScoreDiff.WIN_BIG: ScoreDiff.LOSE_BIG,
            ScoreDiff.WIN_SMALL: ScoreDiff.LOSE_SMALL,
            ScoreDiff.TIE: ScoreDiff.TIE,
            ScoreDiff.LOSE_SMALL: ScoreDiff.WIN_SMALL,
            ScoreDiff.LOSE_BIG: ScoreDiff.WIN_BIG,
        }
        return mirror[self]


class RunnerState(str, Enum):
    """Base occupancy. Each digit marks an occupied base (1st, 2nd, 3rd)."""
    NONE = "000"
    FIRST = "100"
    SECOND = "020"
    THIRD = "003"
    FIRST_SECOND = "120"
    FIRST_THIRD = "103"
    SECOND_THIRD = "023"
    FULL = "123"

    def occupied(self) -> tuple[bool, bool, bool]:
        """Return (first, second, third) occupancy flags."""
        return tuple(ch != "0" for ch in self.value)  # type: ignore[return-value]


class ActionType(str, Enum):
    SWING_AWAY = "SWING_AWAY"
    SAC_BUNT = "SAC_BUNT"
    SAFETY_BUNT = "SAFETY_BUNT"
    RUN_AND_HIT = "RUN_AND_HIT"
    HIT_AND_RUN = "HIT_AND_RUN"
    STEAL = "STEAL"
    TAKE = "TAKE"


class ResultType(str, Enum):
    # Hits
    HOME_RUN = "HOME_RUN"
    TRIPLE = "TRIPLE"
    DOUBLE = "DOUBLE"
    SINGLE = "SINGLE"
    HIT = "HIT"  # unspecified hit, kept for older logs

    # Outs in play
    GROUNDER = "GROUNDER"
    FLY = "FLY"
    LINER = "LINER"
    POP_FLY = "POP_FLY"
    DOUBLE_PLAY = "DOUBLE_PLAY"
    TRIPLE_PLAY = "TRIPLE_PLAY"

    # Sacrifices
    SAC_BUNT = "SAC_BUNT"
    SAC_FLY = "SAC_FLY"

    # Free bases
    WALK = "WALK"
    HIT_BY_PITCH = "HIT_BY_PITCH"
    INTENTIONAL_WALK = "INTENTIONAL_WALK"

    # Strikeouts
    STRIKEOUT = "STRIKEOUT"  # unspecified strikeout, kept for older logs
    STRIKEOUT_SWINGING = "STRIKEOUT_SWINGING"
    STRIKEOUT_LOOKING = "STRIKEOUT_LOOKING"
    STRIKEOUT_UNCAUGHT = "STRIKEOUT_UNCAUGHT"

    # Defensive mistakes
    ERROR = "ERROR"
    FIELDERS_CHOICE = "FIELDERS_CHOICE"

    # Single-pitch events (plate appearance continues)
    TAKE_BALL = "TAKE_BALL"
    TAKE_STRIKE = "TAKE_STRIKE"
    SWING_STRIKE = "SWING_STRIKE"
    FOUL = "FOUL"


class Scope(str, Enum):
    TEAM = "TEAM"
    ALL = "ALL"


# ---------------------------------------------------------------------------
# Situation and play input
# ---------------------------------------------------------------------------

class Situation(BaseModel):
    """The game situation before a play."""
    model_config = ConfigDict(frozen=True)

    inning: int = Field(ge=1)
    half: Half
    outs: int = Field(ge=0, le=2)
    runners: RunnerState = RunnerState.NONE
    score_diff: ScoreDiff = ScoreDiff.TIE
    balls: int = Field(default=0, ge=0, le=3)
    strikes: int = Field(default=0, ge=0, le=2)
    offense_team: Optional[str] = None
    defense_team: Optional[str] = None


class PlayResult(BaseModel):
    """What the operator enters once the play is over."""
    model_config = ConfigDict(frozen=True)

    action: ActionType
    result_type: ResultType
    runs_scored: int = Field(default=0, ge=0)
    next_outs: int = Field(ge=0, le=3, description="Outs after the play (3 = inning over)")
    next_runners: RunnerState = RunnerState.NONE
    next_balls: int = Field(default=0, ge=0, le=3)
    next_strikes: int = Field(default=0, ge=0, le=2)
    pitch_count: Optional[int] = Field(default=None, ge=1, description="Pitches seen in the plate appearance")


# ---------------------------------------------------------------------------
# Stored records and derived statistics
# ---------------------------------------------------------------------------

class PlayRecord(BaseModel):
    """A committed play. Built once, never modified."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    date: str
    fingerprint: str
    situation: Situation
    action: ActionType
    result_type: ResultType
    runs_scored: int = Field(ge=0)
    next_outs: int = Field(ge=0, le=3)
    next_runners: RunnerState
    next_balls: int = Field(default=0, ge=0, le=3)
    next_strikes: int = Field(default=0, ge=0, le=2)
    pitch_count: Optional[int] = Field(default=None, ge=1)
    before_re: float
    after_re: float
    pev: float
    offense_team: Optional[str] = None
    defense_team: Optional[str] = None


class StrategyStat(BaseModel):
    """Aggregated outcome of one action in one situation fingerprint."""
    action: ActionType
    count: int = Field(ge=1)
    avg_pev: float
    success_rate: float = Field(ge=0.0, le=1.0)
    avg_pitches: float
