# -*- coding: utf-8 -*-
"""Diet: nutrition aggregation over an already-filtered set of entries.

`summarize_entries` is a pure function: it never touches storage and never
rounds. Callers filter by user/date range/status before handing entries over,
and apply presentation rounding afterwards (see `round_summary`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional

from .models import MacroTotals, MealBreakdown, MealType, NutritionSummary

_MACRO_FIELDS = ("calories", "carbs", "protein", "fat")


@dataclass
class _Agg:
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0

    def add(self, values: Mapping[str, float]) -> None:
        self.calories += values["calories"]
        self.carbs += values["carbs"]
        self.protein += values["protein"]
        self.fat += values["fat"]

    def to_totals(self) -> MacroTotals:
        return MacroTotals(calories=self.calories, carbs=self.carbs, protein=self.protein, fat=self.fat)


def _get(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def _meal_bucket(entry: Any) -> Optional[MealType]:
    meal = _get(entry, "meal")
    if isinstance(meal, MealType):
        return meal
    try:
        return MealType(meal)
    except ValueError:
        return None


def summarize_entries(entries: Iterable[Any]) -> NutritionSummary:
    """Sum calories/carbs/protein/fat over `entries`, overall and per meal.

    Entries may be `DietEntry` models or plain mappings with the same field
    names. An entry whose meal is not a known bucket still counts toward the
    overall totals and `entry_count`, but toward no bucket.
    """
    totals = _Agg()
    buckets: Dict[MealType, _Agg] = {meal: _Agg() for meal in MealType}
    count = 0

    for entry in entries:
        values = {name: float(_get(entry, name)) for name in _MACRO_FIELDS}
        totals.add(values)
        count += 1
        meal = _meal_bucket(entry)
        if meal is not None:
            buckets[meal].add(values)

    return NutritionSummary(
        calories=totals.calories,
        carbs=totals.carbs,
        protein=totals.protein,
        fat=totals.fat,
        entry_count=count,
        meal_breakdown=MealBreakdown(**{meal.value: agg.to_totals() for meal, agg in buckets.items()}),
    )


def _round_totals(totals: MacroTotals, ndigits: int) -> MacroTotals:
    return MacroTotals(**{name: round(getattr(totals, name), ndigits) for name in _MACRO_FIELDS})


def round_summary(summary: NutritionSummary, ndigits: int = 2) -> NutritionSummary:
    """Return a copy of `summary` with every macro value rounded to `ndigits`."""
    breakdown = summary.meal_breakdown
    return NutritionSummary(
        calories=round(summary.calories, ndigits),
        carbs=round(summary.carbs, ndigits),
        protein=round(summary.protein, ndigits),
        fat=round(summary.fat, ndigits),
        entry_count=summary.entry_count,
        meal_breakdown=MealBreakdown(
            **{meal.value: _round_totals(getattr(breakdown, meal.value), ndigits) for meal in MealType}
        ),
    )
