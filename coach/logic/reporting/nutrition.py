"""Plan aggregation logic: per-day and per-kind counts, completion and macro sums.

Summary structure (one per day, kind group or period):
{
  'count': int, 'completed_count': int, 'skipped_count': int, 'planned_count': int,
  'completion_ratio': float,           # 0.0 when there are no entries
  'calories': int, 'protein': g, 'carbs': g, 'fats': g
}
Nutrition sums only look at meal payloads; absent fields count as 0.
"""
from collections import OrderedDict
from typing import Dict, Any, Iterable, List, Optional

from coach.domain.PlanEntry import PlanEntry
from coach.utilities.constants import (
    COMPLETED, SKIPPED, PLANNED, MEAL, MACRO_FIELDS, MACRO_PRECISION, WORKOUT_KINDS, MEAL_KINDS
)


def _empty_totals() -> Dict[str, float]:
    return {'calories': 0, 'protein': 0, 'carbs': 0, 'fats': 0}


def _round_totals(totals: Dict[str, float]) -> Dict[str, Any]:
    out = {'calories': int(round(totals.get('calories', 0) or 0))}
    for field in MACRO_FIELDS:
        out[field] = round(totals.get(field, 0) or 0, MACRO_PRECISION)
    return out


def completion_ratio(completed: int, count: int) -> float:
    if count <= 0:
        return 0.0
    return completed / count


def nutrition_totals(entries: Iterable[PlanEntry]) -> Dict[str, Any]:
    totals = _empty_totals()
    for entry in entries:
        if entry.family != MEAL:
            continue
        for field in totals:
            totals[field] += entry.payload.get(field)
    return _round_totals(totals)


def summarize_entries(entries: Iterable[PlanEntry]) -> Dict[str, Any]:
    entries = list(entries)
    count = len(entries)
    completed = sum(1 for e in entries if e.status == COMPLETED)
    summary = {
        'count': count,
        'completed_count': completed,
        'skipped_count': sum(1 for e in entries if e.status == SKIPPED),
        'planned_count': sum(1 for e in entries if e.status == PLANNED),
        'completion_ratio': completion_ratio(completed, count),
    }
    summary.update(nutrition_totals(entries))
    return summary


def summarize_by_kind(entries: Iterable[PlanEntry]) -> Dict[str, Dict[str, Any]]:
    """Group a day's entries by kind, in the canonical kind order (meal slots by time of day)."""
    groups: Dict[str, List[PlanEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.kind, []).append(entry)
    ordered = OrderedDict()
    for kind in WORKOUT_KINDS + MEAL_KINDS:
        if kind in groups:
            ordered[kind] = summarize_entries(groups[kind])
    return ordered


def summarize_grid(cells) -> Dict[str, Dict[str, Any]]:
    return OrderedDict((cell.date, summarize_entries(cell.entries)) for cell in cells)


def period_averages(summaries: Iterable[Dict[str, Any]], days: Optional[int] = None) -> Dict[str, Any]:
    """Average calories and macros per day over a period.

    ``days`` defaults to the number of summaries given; pass 7 to average a
    week where some days have no summary at all.
    """
    summaries = list(summaries)
    n = days if days is not None else len(summaries)
    totals = _empty_totals()
    for s in summaries:
        for field in totals:
            totals[field] += s.get(field, 0) or 0
    if n <= 0:
        return _round_totals(_empty_totals())
    return _round_totals({k: v / n for k, v in totals.items()})


def summarize_period(cells, only_displayed_month: bool = True) -> Dict[str, Any]:
    """Summary over every entry of a grid plus average daily nutrition."""
    selected = [c for c in cells if c.is_in_displayed_month or not only_displayed_month]
    entries = [e for c in selected for e in c.entries]
    summary = summarize_entries(entries)
    summary['days'] = len(selected)
    summary['averages'] = period_averages([nutrition_totals(c.entries) for c in selected])
    return summary


__all__ = [
    "completion_ratio", "nutrition_totals", "summarize_entries", "summarize_by_kind",
    "summarize_grid", "period_averages", "summarize_period"
]
