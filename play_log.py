# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Play log: committing plays, undoing the latest one, and JSON export.

Usage::

    from play_log import GameSession, PlayLog

    log = PlayLog.load("data/play_log.json")   # empty log if file is missing
    session = GameSession(situation, log)
    record = session.commit(result)            # appends and advances
    session.undo()                             # drops it, restores situation
    log.save("data/play_log.json")

The log only ever grows by ``add`` and shrinks by ``undo_last``; records
themselves are frozen.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Iterator, Optional

from pydantic import ValidationError

from models import Half, PlayRecord, PlayResult, RunnerState, Situation
from pev import after_run_expectancy, calculate_pev, ends_plate_appearance
from run_expectancy import run_expectancy
from strategy import situation_fingerprint

logger = logging.getLogger(__name__)


class PlayLogFormatError(ValueError):
    """Raised when a play log file cannot be read back into records."""


# ---------------------------------------------------------------------------
# Record construction
# ---------------------------------------------------------------------------

def default_pitch_count(situation: Situation, result: PlayResult) -> int:
    """Pitches implied by the count when the operator did not enter them.

    A finished plate appearance took every ball and strike in the count plus
    the deciding pitch (2-2 -> 5). A single-pitch event is one pitch.
    """
    if ends_plate_appearance(result.result_type):
        return situation.balls + situation.strikes + 1
    return 1


def build_play_record(
    situation: Situation,
    result: PlayResult,
    record_date: Optional[str] = None,
    record_id: Optional[str] = None,
) -> PlayRecord:
    """Compute RE values and PEV for a play and freeze them into a record.

    Args:
        situation: The situation before the play (count included).
        result: What happened on the play.
        record_date: ISO date for the record. Defaults to today.
        record_id: Record identifier. Defaults to a random uuid4 hex string.
    """
    before_re = run_expectancy(
        situation.outs, situation.runners, situation.balls, situation.strikes,
    )
    after_re = after_run_expectancy(
        result.next_outs, result.next_runners, result.result_type,
        result.next_balls, result.next_strikes,
    )
    pev = calculate_pev(
        result.runs_scored, before_re,
        result.next_outs, result.next_runners, result.result_type,
        result.next_balls, result.next_strikes,
    )
    return PlayRecord(
        id=record_id or uuid.uuid4().hex,
        date=record_date or date.today().isoformat(),
        fingerprint=situation_fingerprint(situation),
        situation=situation,
        action=result.action,
        result_type=result.result_type,
        runs_scored=result.runs_scored,
        next_outs=result.next_outs,
        next_runners=result.next_runners,
        next_balls=result.next_balls,
        next_strikes=result.next_strikes,
        pitch_count=result.pitch_count or default_pitch_count(situation, result),
        before_re=before_re,
        after_re=after_re,
        pev=pev,
        offense_team=situation.offense_team,
        defense_team=situation.defense_team,
    )


def advance_situation(situation: Situation, result: PlayResult) -> Situation:
    """Return the situation the next play starts from.

    Three outs flips the half inning (and bumps the inning after the bottom
    half), clears the bases and swaps offense and defense, mirroring the
    score bucket to the new offense's side. Otherwise outs and
    runners follow the play; the count carries over only while the same
    plate appearance continues.
    """
    if result.next_outs >= 3:
        if situation.half == Half.TOP:
            half, inning = Half.BOTTOM, situation.inning
        else:
            half, inning = Half.TOP, situation.inning + 1
        return situation.model_copy(update={
            "inning": inning,
            "half": half,
            "outs": 0,
            "runners": RunnerState.NONE,
            "balls": 0,
            "strikes": 0,
            "score_diff": situation.score_diff.flipped(),
            "offense_team": situation.defense_team,
            "defense_team": situation.offense_team,
        })

    if ends_plate_appearance(result.result_type):
        balls, strikes = 0, 0
    else:
        balls, strikes = result.next_balls, result.next_strikes
    return situation.model_copy(update={
        "outs": result.next_outs,
        "runners": result.next_runners,
        "balls": balls,
        "strikes": strikes,
    })


# ---------------------------------------------------------------------------
# Log collection
# ---------------------------------------------------------------------------

@dataclass
class PlayLog:
    """Ordered, append-only collection of committed plays.

    Attributes:
        entries: Records in commit order, oldest first.
    """
    entries: list[PlayRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PlayRecord]:
        return iter(self.entries)

    @property
    def records(self) -> tuple[PlayRecord, ...]:
        """Immutable snapshot for the aggregator."""
        return tuple(self.entries)

    @property
    def last(self) -> Optional[PlayRecord]:
        return self.entries[-1] if self.entries else None

    def add(self, record: PlayRecord) -> None:
        self.entries.append(record)

    def undo_last(self) -> Optional[PlayRecord]:
        """Remove and return the most recent record, or None if empty."""
        if not self.entries:
            return None
        return self.entries.pop()

    def to_list(self) -> list[dict[str, Any]]:
        return [r.model_dump(mode="json") for r in self.entries]

    @classmethod
    def from_list(cls, items: Any) -> PlayLog:
        """Rebuild a log from its exported flat list.

        Raises:
            PlayLogFormatError: If ``items`` is not a list or a record
                fails validation.
        """
        if not isinstance(items, list):
            raise PlayLogFormatError(
                f"Play log must be a JSON list, got {type(items).__name__}"
            )
        entries = []
        for i, item in enumerate(items):
            try:
                entries.append(PlayRecord.model_validate(item))
            except ValidationError as exc:
                raise PlayLogFormatError(f"Invalid record at index {i}: {exc}") from exc
        return cls(entries=entries)

    def save(self, path: str | Path) -> Path:
        """Write the log as a JSON list, creating parent directories.

        The list goes to a sibling ``.tmp`` file first and is then moved over
        ``path``, so an interrupted write leaves the previous log intact.

        Returns:
            Path to the written file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self.to_list(), f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)
        logger.info("Saved %d plays to %s", len(self.entries), path)
        return path

    @classmethod
    def load(cls, path: str | Path) -> PlayLog:
        """Read a log written by ``save``. A missing file is an empty log."""
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            with open(path, encoding="utf-8") as f:
                items = json.load(f)
        except json.JSONDecodeError as exc:
            raise PlayLogFormatError(f"{path} is not valid JSON: {exc}") from exc
        log = cls.from_list(items)
        logger.info("Loaded %d plays from %s", len(log), path)
        return log


# ---------------------------------------------------------------------------
# Session: current situation + log
# ---------------------------------------------------------------------------

@dataclass
class GameSession:
    """The operator's working state during a game.

    Attributes:
        situation: The situation the next play starts from.
        log: Plays committed so far.
    """
    situation: Situation
    log: PlayLog = field(default_factory=PlayLog)

    def commit(
        self,
        result: PlayResult,
        record_date: Optional[str] = None,
    ) -> PlayRecord:
        """Record a play and move on to the resulting situation."""
        record = build_play_record(self.situation, result, record_date=record_date)
        self.log.add(record)
        self.situation = advance_situation(self.situation, result)
        logger.info(
            "Committed %s/%s at %s: PEV %+.3f",
            record.action.value, record.result_type.value,
            record.fingerprint, record.pev,
        )
        return record

    def undo(self) -> Optional[PlayRecord]:
        """Drop the latest play and restore its "before" situation."""
        record = self.log.undo_last()
        if record is None:
            return None
        self.situation = record.situation
        logger.info("Undid play %s", record.id)
        return record
