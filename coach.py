# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "anthropic>=0.78.0",
#     "pydantic>=2.0",
# ]
# ///
"""PEV strategy log -- command-line entry point.

Usage:
    uv run coach.py re --outs 0 --runners 100 --count 1-0
    uv run coach.py pev --runs 0 --before-re 0.85 --next-outs 0 --next-runners 100 \\
        --result TAKE_BALL --next-count 1-0
    uv run coach.py log --inning 7 --half BOTTOM --outs 1 --runners 020 --count 1-1 --score-margin -1 \\
        --action SWING_AWAY --result SINGLE --runs 1 --next-outs 1 --next-runners 100
    uv run coach.py undo
    uv run coach.py analyze --inning 7 --outs 1 --runners 020 --count 1-1 --scope ALL --ai
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from advisor import get_ai_analysis
from config import get_log_path
from models import (
    ActionType,
    Half,
    PlayResult,
    ResultType,
    RunnerState,
    Scope,
    ScoreDiff,
    Situation,
)
from pev import calculate_pev
from play_log import GameSession, PlayLog, PlayLogFormatError
from run_expectancy import run_expectancy
from strategy import recommend_strategies, situation_fingerprint
from strategy_output import (
    describe_situation,
    format_record_line,
    format_strategy_table,
)


# ---------------------------------------------------------------------------
# Argument parsing helpers
# ---------------------------------------------------------------------------

def parse_count(text: str) -> tuple[int, int]:
    """Parse a "B-S" count such as "3-2"."""
    try:
        balls_str, strikes_str = text.split("-")
        balls, strikes = int(balls_str), int(strikes_str)
    except ValueError:
        raise argparse.ArgumentTypeError(f"count must look like B-S (e.g. 1-2), got {text!r}")
    if not (0 <= balls <= 3 and 0 <= strikes <= 2):
        raise argparse.ArgumentTypeError(f"count out of range: {text!r}")
    return balls, strikes


def parse_runners(text: str) -> RunnerState:
    """Accept a runner pattern by value ("103") or name ("FIRST_THIRD")."""
    try:
        return RunnerState(text)
    except ValueError:
        pass
    try:
        return RunnerState[text.upper()]
    except KeyError:
        choices = ", ".join(r.value for r in RunnerState)
        raise argparse.ArgumentTypeError(f"unknown runner pattern {text!r} (choose from {choices})")


def _enum_parser(enum_cls):
    def parse(text: str):
        try:
            return enum_cls(text.upper())
        except ValueError:
            choices = ", ".join(m.value for m in enum_cls)
            raise argparse.ArgumentTypeError(f"invalid choice {text!r} (choose from {choices})")
    parse.__name__ = enum_cls.__name__
    return parse


def _add_situation_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--inning", type=int, default=1, help="Inning number (default: 1).")
    parser.add_argument("--half", type=_enum_parser(Half), default=Half.TOP,
                        help="TOP or BOTTOM (default: TOP).")
    parser.add_argument("--outs", type=int, default=0, help="Outs before the play (0-2).")
    parser.add_argument("--runners", type=parse_runners, default=RunnerState.NONE,
                        help="Runner pattern, e.g. 000, 100, 023, 123.")
    score = parser.add_mutually_exclusive_group()
    score.add_argument("--score-diff", type=_enum_parser(ScoreDiff), default=ScoreDiff.TIE,
                       help="Score bucket for the offense (default: TIE).")
    score.add_argument("--score-margin", type=int, default=None,
                       help="Offense runs minus defense runs, bucketed into a score bucket.")
    parser.add_argument("--count", type=parse_count, default=(0, 0),
                        help="Ball-strike count before the play (default: 0-0).")
    parser.add_argument("--offense", default=None, help="Offense team name.")
    parser.add_argument("--defense", default=None, help="Defense team name.")


def _add_log_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--log", type=Path, default=None,
                        help="Play log JSON file (default: $PEV_LOG_PATH or data/play_log.json).")


def _situation_from_args(args: argparse.Namespace) -> Situation:
    balls, strikes = args.count
    if args.score_margin is not None:
        score_diff = ScoreDiff.from_runs(args.score_margin)
    else:
        score_diff = args.score_diff
    return Situation(
        inning=args.inning,
        half=args.half,
        outs=args.outs,
        runners=args.runners,
        score_diff=score_diff,
        balls=balls,
        strikes=strikes,
        offense_team=args.offense,
        defense_team=args.defense,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Log plays, score them by PEV, and rank strategies per situation."
    )
    parser.add_argument("--verbose", action="store_true", help="Show info-level logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_re = sub.add_parser("re", help="Run expectancy for a base-out-count state.")
    p_re.add_argument("--outs", type=int, required=True)
    p_re.add_argument("--runners", type=parse_runners, default=RunnerState.NONE)
    p_re.add_argument("--count", type=parse_count, default=(0, 0))

    p_pev = sub.add_parser("pev", help="PEV of a single play.")
    p_pev.add_argument("--runs", type=int, default=0, help="Runs scored on the play.")
    p_pev.add_argument("--before-re", type=float, required=True)
    p_pev.add_argument("--next-outs", type=int, required=True)
    p_pev.add_argument("--next-runners", type=parse_runners, default=RunnerState.NONE)
    p_pev.add_argument("--result", type=_enum_parser(ResultType), required=True)
    p_pev.add_argument("--next-count", type=parse_count, default=(0, 0))

    p_log = sub.add_parser("log", help="Commit a play to the log.")
    _add_situation_args(p_log)
    _add_log_arg(p_log)
    p_log.add_argument("--action", type=_enum_parser(ActionType), required=True)
    p_log.add_argument("--result", type=_enum_parser(ResultType), required=True)
    p_log.add_argument("--runs", type=int, default=0)
    p_log.add_argument("--next-outs", type=int, required=True, help="Outs after the play (3 ends the inning).")
    p_log.add_argument("--next-runners", type=parse_runners, default=RunnerState.NONE)
    p_log.add_argument("--next-count", type=parse_count, default=(0, 0),
                       help="Count after a single-pitch event.")
    p_log.add_argument("--pitches", type=int, default=None, help="Pitches in the plate appearance.")
    p_log.add_argument("--date", default=None, help="ISO date for the record (default: today).")

    p_undo = sub.add_parser("undo", help="Remove the most recent play.")
    _add_log_arg(p_undo)

    p_an = sub.add_parser("analyze", help="Rank strategies for a situation.")
    _add_situation_args(p_an)
    _add_log_arg(p_an)
    p_an.add_argument("--scope", type=_enum_parser(Scope), default=Scope.TEAM,
                      help="TEAM (offense team only) or ALL (default: TEAM).")
    p_an.add_argument("--ai", action="store_true", help="Ask the AI coach for advice.")
    p_an.add_argument("--language", default="English", help="Language of the AI advice.")

    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_re(args: argparse.Namespace) -> int:
    balls, strikes = args.count
    print(f"{run_expectancy(args.outs, args.runners, balls, strikes):.3f}")
    return 0


def cmd_pev(args: argparse.Namespace) -> int:
    balls, strikes = args.next_count
    value = calculate_pev(
        args.runs, args.before_re, args.next_outs, args.next_runners,
        args.result, balls, strikes,
    )
    print(f"{value:+.3f}")
    return 0


def cmd_log(args: argparse.Namespace) -> int:
    path = args.log or get_log_path()
    situation = _situation_from_args(args)
    next_balls, next_strikes = args.next_count
    result = PlayResult(
        action=args.action,
        result_type=args.result,
        runs_scored=args.runs,
        next_outs=args.next_outs,
        next_runners=args.next_runners,
        next_balls=next_balls,
        next_strikes=next_strikes,
        pitch_count=args.pitches,
    )
    session = GameSession(situation, PlayLog.load(path))
    record = session.commit(result, record_date=args.date)
    session.log.save(path)

    print(format_record_line(record))
    print(f"Next: {describe_situation(session.situation)}")
    return 0


def cmd_undo(args: argparse.Namespace) -> int:
    path = args.log or get_log_path()
    log = PlayLog.load(path)
    record = log.undo_last()
    if record is None:
        print("Nothing to undo.")
        return 0
    log.save(path)
    print(f"Removed: {format_record_line(record)}")
    print(f"Restored: {describe_situation(record.situation)}")
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    path = args.log or get_log_path()
    situation = _situation_from_args(args)
    log = PlayLog.load(path)
    stats = recommend_strategies(situation, log.records, scope=args.scope)

    print(describe_situation(situation))
    print(f"Fingerprint: {situation_fingerprint(situation)} ({args.scope.value.lower()} scope)")
    print()
    print(format_strategy_table(stats))

    if args.ai:
        print()
        print(f"AI coach: {get_ai_analysis(situation, stats, language=args.language)}")
    return 0


COMMANDS = {
    "re": cmd_re,
    "pev": cmd_pev,
    "log": cmd_log,
    "undo": cmd_undo,
    "analyze": cmd_analyze,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        return COMMANDS[args.command](args)
    except ValidationError as e:
        print(f"Error: invalid input: {e}", file=sys.stderr)
        return 1
    except PlayLogFormatError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
