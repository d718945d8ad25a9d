# -*- coding: utf-8 -*-
"""Goals: per-category progress rules (pure functions over goal data and diet entries)."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from ..diet.aggregator import summarize_entries
from ..diet.models import DietEntry, DietStatus, MacroTotals, NutritionSummary
from .models import DietDayProgress, DietGoalProgressResponse, MacroAdherence, MacroProgress

_MACROS = ("calories", "carbs", "protein", "fat")

# Goal data keys holding the target for each summary macro.
_TARGET_KEYS = {
    "calories": "targetCalories",
    "protein": "targetProteins",
    "fat": "targetFats",
    "carbs": "targetCarbs",
}


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def weight_progress(data: Dict[str, Any]) -> float:
    """Share of the distance from the first recorded weight to the target."""
    try:
        target = float(data["targetWeight"])
        current = float(data["currentWeight"])
    except (KeyError, TypeError, ValueError):
        return 0.0
    history = data.get("previousWeights") or []
    start = float(history[0]["weight"]) if history else current
    if start == target:
        return 100.0 if current == target else 0.0
    return _clamp((start - current) / (start - target) * 100.0)


def diet_progress(data: Dict[str, Any], summary: NutritionSummary) -> float:
    """Calories actually taken for the goal against its calorie target."""
    target = float(data.get("targetCalories") or 0.0)
    if target <= 0:
        return 0.0
    return _clamp(summary.calories / target * 100.0)


def sleep_progress(data: Dict[str, Any], durations: Iterable[float]) -> float:
    """Mean logged sleep duration against the nightly target."""
    target = float(data.get("targetHours") or 0.0)
    values = list(durations)
    if target <= 0 or not values:
        return 0.0
    return _clamp(sum(values) / len(values) / target * 100.0)


def overall_progress(per_goal: Iterable[Optional[float]]) -> int:
    """Rounded mean; `None` entries are ignored."""
    values = [p for p in per_goal if p is not None]
    if not values:
        return 0
    return int(round(sum(values) / len(values)))


def percent_of(actual: float, target: float) -> float:
    """Unclamped percentage rounded to 2 places; 0 when there is no target."""
    if target <= 0:
        return 0.0
    return round(actual / target * 100.0, 2)


def macro_progress(target: float, actual: float) -> MacroProgress:
    return MacroProgress(
        target=target,
        actual=round(actual, 2),
        progress=percent_of(actual, target),
        status="on_track" if actual <= target else "exceeded",
    )


def diet_goal_progress(goal_id: str, data: Dict[str, Any], summary: NutritionSummary) -> DietGoalProgressResponse:
    """Per-macro target/actual/percent for a diet goal, plus their mean."""
    macros = {}
    for name, key in _TARGET_KEYS.items():
        macros[name] = macro_progress(float(data.get(key) or 0.0), getattr(summary, name))
    overall = sum(m.progress for m in macros.values()) / len(macros)
    return DietGoalProgressResponse(
        goal_id=goal_id,
        entry_count=summary.entry_count,
        overall=round(overall, 2),
        **macros,
    )


def _totals(summary: NutritionSummary) -> MacroTotals:
    return MacroTotals(**{name: round(getattr(summary, name), 2) for name in _MACROS})


def _adherence(eaten: NutritionSummary, planned: NutritionSummary, name: str) -> Optional[float]:
    scheduled = getattr(planned, name)
    return percent_of(getattr(eaten, name), scheduled) if scheduled > 0 else None


def daily_diet_progress(entries: Iterable[DietEntry]) -> List[DietDayProgress]:
    """Planned (every entry) vs consumed (taken entries) per meal day, oldest first."""
    per_day: Dict[str, List[DietEntry]] = defaultdict(list)
    for entry in entries:
        per_day[entry.meal_date_and_time[:10]].append(entry)

    days = []
    for day in sorted(per_day):
        planned = summarize_entries(per_day[day])
        taken = [e for e in per_day[day] if e.status == DietStatus.taken]
        consumed = None
        adherence = None
        if taken:
            eaten = summarize_entries(taken)
            consumed = _totals(eaten)
            adherence = MacroAdherence(**{name: _adherence(eaten, planned, name) for name in _MACROS})
        days.append(DietDayProgress(date=day, planned=_totals(planned), consumed=consumed, adherence=adherence))
    return days
