# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Situation fingerprints and per-action strategy aggregation.

Two situations with the same fingerprint (inning zone, score bucket, outs,
runners, count) are treated as strategically equivalent. The aggregator
ranks the actions taken in a fingerprint by their average PEV.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from models import (
    ActionType,
    InningZone,
    PlayRecord,
    Scope,
    Situation,
    StrategyStat,
)


def inning_zone(inning: int) -> InningZone:
    if inning <= 3:
        return InningZone.EARLY
    if inning <= 6:
        return InningZone.MIDDLE
    return InningZone.LATE


def situation_fingerprint(situation: Situation) -> str:
    """Build the aggregation key for a situation.

    Format: ``{zone}_{score_diff}_{outs}_{runners}_{balls}-{strikes}``,
    e.g. ``LATE_TIE_1_020_1-2``.
    """
    zone = inning_zone(situation.inning)
    return (
        f"{zone.value}_{situation.score_diff.value}_{situation.outs}_"
        f"{situation.runners.value}_{situation.balls}-{situation.strikes}"
    )


def filter_records(
    records: Iterable[PlayRecord],
    scope: Scope = Scope.ALL,
    offense_team: Optional[str] = None,
) -> list[PlayRecord]:
    """Restrict the history to one offense, or keep everything.

    ``Scope.TEAM`` without a team name falls back to the full history.
    """
    records = list(records)
    if scope == Scope.ALL or not offense_team:
        return records
    return [r for r in records if r.offense_team == offense_team]


def analyze_strategies(fingerprint: str, records: Iterable[PlayRecord]) -> list[StrategyStat]:
    """Aggregate the records matching ``fingerprint`` per action.

    Returns one StrategyStat per action seen, sorted by average PEV
    (highest first). Actions with equal averages keep first-seen order.
    A missing pitch count counts as one pitch.
    """
    totals: dict[ActionType, dict[str, float]] = {}
    for record in records:
        if record.fingerprint != fingerprint:
            continue
        bucket = totals.setdefault(
            record.action, {"pev": 0.0, "count": 0, "success": 0, "pitches": 0},
        )
        bucket["pev"] += record.pev
        bucket["count"] += 1
        if record.pev > 0:
            bucket["success"] += 1
        bucket["pitches"] += record.pitch_count or 1

    stats = [
        StrategyStat(
            action=action,
            count=int(t["count"]),
            avg_pev=t["pev"] / t["count"],
            success_rate=t["success"] / t["count"],
            avg_pitches=t["pitches"] / t["count"],
        )
        for action, t in totals.items()
    ]
    return sorted(stats, key=lambda s: s.avg_pev, reverse=True)


def recommend_strategies(
    situation: Situation,
    records: Iterable[PlayRecord],
    scope: Scope = Scope.TEAM,
) -> list[StrategyStat]:
    """Rank actions for the current situation from the (scoped) history."""
    scoped = filter_records(records, scope, situation.offense_team)
    return analyze_strategies(situation_fingerprint(situation), scoped)


def total_samples(stats: Iterable[StrategyStat]) -> int:
    return sum(s.count for s in stats)


def best_strategy(stats: list[StrategyStat]) -> Optional[StrategyStat]:
    return stats[0] if stats else None
