# -*- coding: utf-8 -*-
"""Diet: Pydantic models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BeforeValidator, Field

from ..schemas import CamelModel, FrozenCamelModel


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class DietStatus(str, Enum):
    taken = "taken"
    next = "next"
    overdue = "overdue"
    skipped = "skipped"


class SortField(str, Enum):
    created_at = "createdAt"
    updated_at = "updatedAt"
    calories = "calories"
    food_name = "foodName"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class MacroTotals(FrozenCamelModel):
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0


class MealBreakdown(FrozenCamelModel):
    breakfast: MacroTotals = MacroTotals()
    lunch: MacroTotals = MacroTotals()
    dinner: MacroTotals = MacroTotals()
    snack: MacroTotals = MacroTotals()


class NutritionSummary(FrozenCamelModel):
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    entry_count: int = Field(0, ge=0)
    meal_breakdown: MealBreakdown = MealBreakdown()


def _strip_name(value: object) -> object:
    if isinstance(value, str):
        return value.strip()
    return value


FoodName = Annotated[str, BeforeValidator(_strip_name), Field(min_length=1, max_length=200)]


class DietCreateRequest(CamelModel):
    food_name: FoodName = Field(..., description="Name of the food")
    meal: MealType
    calories: float = Field(..., ge=0, le=10000)
    carbs: float = Field(..., ge=0, le=1000, description="Carbohydrates in grams")
    protein: float = Field(..., ge=0, le=1000, description="Protein in grams")
    fat: float = Field(..., ge=0, le=1000, description="Fat in grams")
    status: DietStatus = DietStatus.next
    goal_id: Optional[str] = Field(None, min_length=1)
    meal_weight: Optional[float] = Field(None, ge=0, description="Weight of the meal in grams")
    meal_date_and_time: Optional[datetime] = Field(None, description="Defaults to creation time")


class DietUpdateRequest(CamelModel):
    food_name: Optional[FoodName] = None
    meal: Optional[MealType] = None
    calories: Optional[float] = Field(None, ge=0, le=10000)
    carbs: Optional[float] = Field(None, ge=0, le=1000)
    protein: Optional[float] = Field(None, ge=0, le=1000)
    fat: Optional[float] = Field(None, ge=0, le=1000)
    status: Optional[DietStatus] = None
    goal_id: Optional[str] = Field(None, description="null clears the goal link")
    meal_weight: Optional[float] = Field(None, ge=0)
    meal_date_and_time: Optional[datetime] = None


class DietBulkMealPlanRequest(CamelModel):
    meals: List[DietCreateRequest] = Field(..., min_length=1, max_length=100)


class DietEntry(CamelModel):
    id: str
    user_id: str
    food_name: str
    meal: MealType
    calories: float
    carbs: float
    protein: float
    fat: float
    status: DietStatus = DietStatus.next
    goal_id: Optional[str] = None
    meal_weight: Optional[float] = None
    meal_date_and_time: str
    created_at: str
    updated_at: str


class DietPage(CamelModel):
    items: List[DietEntry]
    total: int = Field(0, ge=0)
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1)
    total_pages: int = Field(0, ge=0)


class DietDeleteResponse(CamelModel):
    message: str
    entry: DietEntry
