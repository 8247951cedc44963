# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Text formatting for situations, committed plays and strategy rankings.

Produces the short strings shown by the CLI and embedded in the AI coach
prompt:
- A compact situation line ("Top 7 (late), 1 out, runner on 2nd, 1-2 count, tied")
- A ranked table of actions for a situation, or a "no data" line
- A one-line summary of a committed play
"""

from __future__ import annotations

from models import Half, PlayRecord, RunnerState, ScoreDiff, Situation, StrategyStat
from strategy import inning_zone

SCORE_DIFF_LABELS: dict[ScoreDiff, str] = {
    ScoreDiff.WIN_BIG: "up 3+",
    ScoreDiff.WIN_SMALL: "up 1-2",
    ScoreDiff.TIE: "tied",
    ScoreDiff.LOSE_SMALL: "down 1-2",
    ScoreDiff.LOSE_BIG: "down 3+",
}

NO_DATA_MESSAGE = "No history for this situation yet."


def describe_runners(runners: RunnerState) -> str:
    """Describe base occupancy, e.g. "runners on 1st & 3rd"."""
    names = ("1st", "2nd", "3rd")
    on_bases = [name for name, occupied in zip(names, runners.occupied()) if occupied]

    if not on_bases:
        return "bases empty"
    if len(on_bases) == 3:
        return "bases loaded"
    if len(on_bases) == 1:
        return f"runner on {on_bases[0]}"
    return f"runners on {' & '.join(on_bases)}"


def describe_situation(situation: Situation) -> str:
    """Build a compact situation string.

    Args:
        situation: The situation to describe.

    Returns:
        A string like "Bot 9 (late), 2 outs, bases loaded, 3-2 count, down 1-2",
        followed by "| Offense vs Defense" when both teams are known.
    """
    half_str = "Top" if situation.half == Half.TOP else "Bot"
    zone = inning_zone(situation.inning).value.lower()
    out_str = "1 out" if situation.outs == 1 else f"{situation.outs} outs"
    text = (
        f"{half_str} {situation.inning} ({zone}), {out_str}, "
        f"{describe_runners(situation.runners)}, "
        f"{situation.balls}-{situation.strikes} count, "
        f"{SCORE_DIFF_LABELS[situation.score_diff]}"
    )
    if situation.offense_team and situation.defense_team:
        text += f" | {situation.offense_team} vs {situation.defense_team}"
    return text


def format_strategy_table(stats: list[StrategyStat]) -> str:
    """Render ranked strategy statistics as a fixed-width table."""
    if not stats:
        return NO_DATA_MESSAGE

    lines = [f"{'#':>2}  {'Action':<12} {'N':>4} {'Avg PEV':>8} {'Success':>8} {'Pitches':>8}"]
    for rank, s in enumerate(stats, 1):
        lines.append(
            f"{rank:>2}  {s.action.value:<12} {s.count:>4} {s.avg_pev:>+8.3f} "
            f"{s.success_rate:>7.0%} {s.avg_pitches:>8.1f}"
        )
    return "\n".join(lines)


def format_record_line(record: PlayRecord) -> str:
    """One-line summary of a committed play."""
    runs = f", {record.runs_scored} run{'s' if record.runs_scored != 1 else ''}" if record.runs_scored else ""
    return (
        f"[{record.date}] {describe_situation(record.situation)} -> "
        f"{record.action.value}: {record.result_type.value}{runs} "
        f"(RE {record.before_re:.2f} -> {record.after_re:.2f}, PEV {record.pev:+.3f})"
    )
