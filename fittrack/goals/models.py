# -*- coding: utf-8 -*-
"""Goals: Pydantic models.

Every goal carries a category-specific `data` document:

- weight:  goalType, targetWeight, currentWeight, previousWeights[{weight, date}]
- diet:    targetCalories, targetProteins, targetFats, targetCarbs
- sleep:   targetHours
- workout: exerciseName, targetMinutes?, targetReps?
"""

from __future__ import annotations

from datetime import date as date_type
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import Field

from ..diet.models import MacroTotals
from ..schemas import CamelModel


class GoalCategory(str, Enum):
    weight = "weight"
    diet = "diet"
    workout = "workout"
    sleep = "sleep"


class GoalStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    overdue = "overdue"


class WeightGoalType(str, Enum):
    gain = "gain"
    loss = "loss"
    maintenance = "maintenance"


class WeightPoint(CamelModel):
    weight: float = Field(..., gt=0)
    date: str = Field(..., description="ISO8601 timestamp")


class WeightGoalData(CamelModel):
    goal_type: WeightGoalType
    target_weight: float = Field(..., gt=0)
    current_weight: float = Field(..., gt=0)
    previous_weights: List[WeightPoint] = Field(default_factory=list)


class DietGoalData(CamelModel):
    target_calories: float = Field(..., gt=0)
    target_proteins: float = Field(..., ge=0)
    target_fats: float = Field(..., ge=0)
    target_carbs: float = Field(..., ge=0)


class SleepGoalData(CamelModel):
    target_hours: float = Field(..., gt=0, le=24)


class WorkoutGoalData(CamelModel):
    exercise_name: str = Field(..., min_length=1, max_length=200)
    target_minutes: Optional[float] = Field(None, gt=0)
    target_reps: Optional[int] = Field(None, gt=0)


GOAL_DATA_MODELS: Dict[GoalCategory, Type[CamelModel]] = {
    GoalCategory.weight: WeightGoalData,
    GoalCategory.diet: DietGoalData,
    GoalCategory.sleep: SleepGoalData,
    GoalCategory.workout: WorkoutGoalData,
}


class GoalCreateRequest(CamelModel):
    category: GoalCategory
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    start_date: date_type
    end_date: Optional[date_type] = None
    target_date: date_type
    status: GoalStatus = GoalStatus.pending
    data: Dict[str, Any] = Field(default_factory=dict, description="Category-specific goal data")


class GoalUpdateRequest(CamelModel):
    category: Optional[GoalCategory] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    start_date: Optional[date_type] = None
    end_date: Optional[date_type] = None
    target_date: Optional[date_type] = None
    status: Optional[GoalStatus] = None
    progress: Optional[float] = Field(None, ge=0, le=100)
    data: Optional[Dict[str, Any]] = None


class WeightUpdateRequest(CamelModel):
    new_weight: float = Field(..., gt=0, le=1000)


class Goal(CamelModel):
    id: str
    user_id: str
    category: GoalCategory
    title: str
    description: Optional[str] = None
    start_date: str
    end_date: Optional[str] = None
    target_date: str
    status: GoalStatus = GoalStatus.pending
    progress: float = Field(0.0, ge=0, le=100)
    data: Dict[str, Any] = Field(default_factory=dict)
    created_at: str
    updated_at: str


class GoalListResponse(CamelModel):
    goals: List[Goal]
    prev: bool = False
    next: bool = False


class GoalCountResponse(CamelModel):
    count: int = Field(0, ge=0)


class GoalProgressResponse(CamelModel):
    progress: int = Field(0, ge=0, le=100)
    completed: int = Field(0, ge=0)
    pending: int = Field(0, ge=0)
    overdue: int = Field(0, ge=0)
    total: int = Field(0, ge=0)


class GoalOverdueResponse(CamelModel):
    modified: int = Field(0, ge=0)


class GoalDeleteResponse(CamelModel):
    message: str
    id: str


class ProgressView(str, Enum):
    day = "day"
    week = "week"
    month = "month"


class MacroProgress(CamelModel):
    target: float = Field(0.0, ge=0)
    actual: float = Field(0.0, ge=0)
    progress: float = Field(0.0, ge=0, description="Percent of target, may exceed 100")
    status: str = Field("on_track", description="on_track | exceeded")


class DietGoalProgressResponse(CamelModel):
    goal_id: str
    entry_count: int = Field(0, ge=0, description="Taken entries linked to the goal")
    calories: MacroProgress
    protein: MacroProgress
    fat: MacroProgress
    carbs: MacroProgress
    overall: float = Field(0.0, ge=0, description="Mean of the four macro percentages")


class MacroAdherence(CamelModel):
    calories: Optional[float] = None
    carbs: Optional[float] = None
    protein: Optional[float] = None
    fat: Optional[float] = None


class DietDayProgress(CamelModel):
    date: str = Field(..., description="YYYY-MM-DD")
    planned: MacroTotals
    consumed: Optional[MacroTotals] = Field(None, description="null when nothing was taken that day")
    adherence: Optional[MacroAdherence] = None


class DietDailyProgressResponse(CamelModel):
    view: ProgressView
    start_date: str
    end_date: str
    days: List[DietDayProgress]
