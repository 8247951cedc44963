# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for the play log.

Validates:
  1. build_play_record computes before/after RE, PEV and the fingerprint
  2. advance_situation moves to the next situation (count, outs, half inning)
  3. PlayLog append/undo semantics
  4. GameSession commit/undo keeps the situation in step with the log
  5. JSON export/import round trip and malformed file handling
"""

import json
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from pydantic import ValidationError

from models import (
    ActionType,
    Half,
    PlayResult,
    ResultType,
    RunnerState,
    ScoreDiff,
    Situation,
)
from play_log import (
    GameSession,
    PlayLog,
    PlayLogFormatError,
    advance_situation,
    build_play_record,
    default_pitch_count,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def situation():
    """Top 1st, nobody out, runner on first, 0-0."""
    return Situation(
        inning=1, half=Half.TOP, outs=0, runners=RunnerState.FIRST,
        score_diff=ScoreDiff.TIE, offense_team="Waves", defense_team="Shrikes",
    )


@pytest.fixture
def take_ball():
    return PlayResult(
        action=ActionType.TAKE, result_type=ResultType.TAKE_BALL,
        next_outs=0, next_runners=RunnerState.FIRST, next_balls=1, next_strikes=0,
    )


@pytest.fixture
def double_play():
    return PlayResult(
        action=ActionType.SWING_AWAY, result_type=ResultType.DOUBLE_PLAY,
        next_outs=2, next_runners=RunnerState.NONE, pitch_count=3,
    )


# ---------------------------------------------------------------------------
# Step 1: Record construction
# ---------------------------------------------------------------------------

class TestStep1BuildRecord:

    def test_take_ball_record(self, situation, take_ball):
        record = build_play_record(situation, take_ball, record_date="2025-05-10", record_id="abc")
        assert record.id == "abc"
        assert record.date == "2025-05-10"
        assert record.fingerprint == "EARLY_TIE_0_100_0-0"
        assert record.before_re == pytest.approx(0.85)
        assert record.after_re == pytest.approx(0.88)
        assert record.pev == pytest.approx(0.03)
        assert record.situation == situation
        assert record.offense_team == "Waves"
        assert record.defense_team == "Shrikes"

    def test_double_play_record(self, situation, double_play):
        record = build_play_record(situation, double_play)
        assert record.after_re == pytest.approx(0.10)
        assert record.pev == pytest.approx(0.10 - 0.85 - 0.50)
        assert record.pitch_count == 3

    def test_before_re_is_count_aware(self, situation, double_play):
        deep = situation.model_copy(update={"balls": 0, "strikes": 2})
        record = build_play_record(deep, double_play)
        assert record.before_re == pytest.approx(0.85 - 0.10)

    def test_generated_id_and_date(self, situation, take_ball):
        a = build_play_record(situation, take_ball)
        b = build_play_record(situation, take_ball)
        assert a.id and b.id and a.id != b.id
        assert len(a.date) == 10

    def test_pitch_count_from_full_count(self, situation):
        two_two = situation.model_copy(update={"balls": 2, "strikes": 2})
        single = PlayResult(
            action=ActionType.SWING_AWAY, result_type=ResultType.SINGLE,
            next_outs=0, next_runners=RunnerState.FIRST_SECOND,
        )
        assert default_pitch_count(two_two, single) == 5
        assert build_play_record(two_two, single).pitch_count == 5

    def test_pitch_count_first_pitch(self, situation):
        grounder = PlayResult(
            action=ActionType.SWING_AWAY, result_type=ResultType.GROUNDER,
            next_outs=1, next_runners=RunnerState.SECOND,
        )
        assert build_play_record(situation, grounder).pitch_count == 1

    def test_pitch_count_single_pitch_event(self, situation, take_ball):
        deep = situation.model_copy(update={"balls": 2, "strikes": 1})
        assert build_play_record(deep, take_ball).pitch_count == 1

    def test_entered_pitch_count_wins(self, situation, double_play):
        two_two = situation.model_copy(update={"balls": 2, "strikes": 2})
        assert build_play_record(two_two, double_play).pitch_count == 3

    def test_record_is_frozen(self, situation, take_ball):
        record = build_play_record(situation, take_ball)
        with pytest.raises(ValidationError):
            record.pev = 5.0


# ---------------------------------------------------------------------------
# Step 2: Advancing the situation
# ---------------------------------------------------------------------------

class TestStep2Advance:

    def test_pitch_event_carries_count(self, situation, take_ball):
        nxt = advance_situation(situation, take_ball)
        assert (nxt.balls, nxt.strikes) == (1, 0)
        assert nxt.outs == 0
        assert nxt.runners == RunnerState.FIRST

    def test_finished_plate_appearance_resets_count(self, situation):
        later = situation.model_copy(update={"balls": 2, "strikes": 2})
        single = PlayResult(
            action=ActionType.SWING_AWAY, result_type=ResultType.SINGLE,
            next_outs=0, next_runners=RunnerState.FIRST_SECOND,
            next_balls=2, next_strikes=2,
        )
        nxt = advance_situation(later, single)
        assert (nxt.balls, nxt.strikes) == (0, 0)
        assert nxt.runners == RunnerState.FIRST_SECOND

    def test_third_out_top_goes_to_bottom(self, situation):
        result = PlayResult(
            action=ActionType.SWING_AWAY, result_type=ResultType.FLY,
            next_outs=3, next_runners=RunnerState.FIRST,
        )
        nxt = advance_situation(situation, result)
        assert nxt.inning == 1
        assert nxt.half == Half.BOTTOM
        assert nxt.outs == 0
        assert nxt.runners == RunnerState.NONE
        assert nxt.offense_team == "Shrikes"
        assert nxt.defense_team == "Waves"

    def test_third_out_bottom_goes_to_next_inning(self, situation):
        bottom = situation.model_copy(update={"inning": 9, "half": Half.BOTTOM})
        result = PlayResult(
            action=ActionType.TAKE, result_type=ResultType.STRIKEOUT_LOOKING,
            next_outs=3, next_runners=RunnerState.NONE,
        )
        nxt = advance_situation(bottom, result)
        assert nxt.inning == 10
        assert nxt.half == Half.TOP

    @pytest.mark.parametrize("before,after", [
        (ScoreDiff.WIN_BIG, ScoreDiff.LOSE_BIG),
        (ScoreDiff.WIN_SMALL, ScoreDiff.LOSE_SMALL),
        (ScoreDiff.TIE, ScoreDiff.TIE),
        (ScoreDiff.LOSE_SMALL, ScoreDiff.WIN_SMALL),
        (ScoreDiff.LOSE_BIG, ScoreDiff.WIN_BIG),
    ])
    def test_third_out_mirrors_score_bucket(self, situation, before, after):
        ahead = situation.model_copy(update={"outs": 2, "score_diff": before})
        result = PlayResult(
            action=ActionType.SWING_AWAY, result_type=ResultType.FLY,
            next_outs=3, next_runners=RunnerState.NONE,
        )
        nxt = advance_situation(ahead, result)
        assert nxt.offense_team == "Shrikes"
        assert nxt.score_diff == after

    def test_score_bucket_unchanged(self, situation, double_play):
        behind = situation.model_copy(update={"score_diff": ScoreDiff.LOSE_BIG})
        assert advance_situation(behind, double_play).score_diff == ScoreDiff.LOSE_BIG


# ---------------------------------------------------------------------------
# Step 3: PlayLog
# ---------------------------------------------------------------------------

class TestStep3PlayLog:

    def test_empty(self):
        log = PlayLog()
        assert len(log) == 0
        assert log.last is None
        assert log.undo_last() is None

    def test_add_and_undo_last_only(self, situation, take_ball, double_play):
        log = PlayLog()
        first = build_play_record(situation, take_ball)
        second = build_play_record(situation, double_play)
        log.add(first)
        log.add(second)

        assert log.undo_last() is second
        assert list(log) == [first]
        assert log.last is first

    def test_records_is_snapshot(self, situation, take_ball):
        log = PlayLog()
        log.add(build_play_record(situation, take_ball))
        snapshot = log.records
        log.add(build_play_record(situation, take_ball))
        assert len(snapshot) == 1
        assert isinstance(snapshot, tuple)


# ---------------------------------------------------------------------------
# Step 4: GameSession
# ---------------------------------------------------------------------------

class TestStep4Session:

    def test_commit_appends_and_advances(self, situation, take_ball):
        session = GameSession(situation)
        record = session.commit(take_ball)
        assert session.log.last is record
        assert (session.situation.balls, session.situation.strikes) == (1, 0)

    def test_sequence_of_pitches(self, situation, take_ball):
        session = GameSession(situation)
        session.commit(take_ball)
        foul = PlayResult(
            action=ActionType.TAKE, result_type=ResultType.FOUL,
            next_outs=0, next_runners=RunnerState.FIRST, next_balls=1, next_strikes=1,
        )
        record = session.commit(foul)
        assert record.fingerprint == "EARLY_TIE_0_100_1-0"
        assert record.before_re == pytest.approx(0.88)
        assert record.after_re == pytest.approx(0.83)

    def test_undo_restores_before_situation(self, situation, take_ball, double_play):
        session = GameSession(situation)
        session.commit(take_ball)
        mid = session.situation
        session.commit(double_play)

        undone = session.undo()
        assert undone.result_type == ResultType.DOUBLE_PLAY
        assert session.situation == mid
        assert len(session.log) == 1

    def test_next_half_fingerprint_uses_new_offense_score(self, situation):
        ahead = situation.model_copy(update={"inning": 3, "outs": 2, "score_diff": ScoreDiff.WIN_BIG})
        session = GameSession(ahead)
        session.commit(PlayResult(
            action=ActionType.SWING_AWAY, result_type=ResultType.FLY,
            next_outs=3, next_runners=RunnerState.NONE,
        ))
        record = session.commit(PlayResult(
            action=ActionType.SWING_AWAY, result_type=ResultType.SINGLE,
            next_outs=0, next_runners=RunnerState.FIRST,
        ))
        assert record.offense_team == "Shrikes"
        assert record.fingerprint == "EARLY_LOSE_BIG_0_000_0-0"

    def test_undo_empty_session(self, situation):
        session = GameSession(situation)
        assert session.undo() is None
        assert session.situation == situation


# ---------------------------------------------------------------------------
# Step 5: JSON export / import
# ---------------------------------------------------------------------------

class TestStep5Persistence:

    def test_save_and_load(self, tmp_path, situation, take_ball, double_play):
        session = GameSession(situation)
        session.commit(take_ball, record_date="2025-05-10")
        session.commit(double_play, record_date="2025-05-10")

        path = session.log.save(tmp_path / "nested" / "log.json")
        loaded = PlayLog.load(path)

        assert loaded.records == session.log.records

    def test_saved_file_is_flat_list(self, tmp_path, situation, take_ball):
        log = PlayLog()
        log.add(build_play_record(situation, take_ball))
        path = log.save(tmp_path / "log.json")

        data = json.loads(path.read_text())
        assert isinstance(data, list)
        assert data[0]["action"] == "TAKE"
        assert data[0]["situation"]["runners"] == "100"
        assert data[0]["pitch_count"] == 1

    def test_save_leaves_no_temp_file(self, tmp_path, situation, take_ball):
        log = PlayLog()
        log.add(build_play_record(situation, take_ball))
        path = log.save(tmp_path / "log.json")
        assert [p.name for p in tmp_path.iterdir()] == ["log.json"]
        assert len(PlayLog.load(path)) == 1

    def test_failed_save_keeps_previous_log(self, tmp_path, situation, take_ball, double_play):
        log = PlayLog()
        log.add(build_play_record(situation, take_ball))
        path = log.save(tmp_path / "log.json")
        before = path.read_text()

        log.add(build_play_record(situation, double_play))
        with patch("play_log.json.dump", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                log.save(path)

        assert path.read_text() == before
        assert len(PlayLog.load(path)) == 1

    def test_missing_file_is_empty_log(self, tmp_path):
        assert len(PlayLog.load(tmp_path / "nope.json")) == 0

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "log.json"
        path.write_text(json.dumps({"records": []}))
        with pytest.raises(PlayLogFormatError, match="JSON list"):
            PlayLog.load(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "log.json"
        path.write_text("{not json")
        with pytest.raises(PlayLogFormatError, match="not valid JSON"):
            PlayLog.load(path)

    def test_unknown_enum_value(self, tmp_path, situation, take_ball):
        log = PlayLog()
        log.add(build_play_record(situation, take_ball))
        items = log.to_list()
        items[0]["action"] = "BOOGIE"
        with pytest.raises(PlayLogFormatError, match="index 0"):
            PlayLog.from_list(items)
