# -*- coding: utf-8 -*-
"""Goals: API endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import (
    DietDailyProgressResponse,
    DietGoalProgressResponse,
    Goal,
    GoalCategory,
    GoalCountResponse,
    GoalCreateRequest,
    GoalDeleteResponse,
    GoalListResponse,
    GoalOverdueResponse,
    GoalProgressResponse,
    GoalStatus,
    GoalUpdateRequest,
    ProgressView,
    WeightUpdateRequest,
)
from .storage import (
    add_goal,
    count_goals,
    delete_goal,
    get_diet_daily_progress,
    get_diet_goal_progress,
    get_goal,
    get_overall_progress,
    list_goals,
    mark_overdue,
    toggle_completion,
    upcoming_goals,
    update_current_weight,
    update_goal,
)

router = APIRouter(prefix="/api/goals", tags=["Goals"])


@router.post("", response_model=Goal, summary="Add a goal")
def create(request: GoalCreateRequest, user: dict = Depends(get_current_user)):
    return add_goal(user["id"], request)


@router.get("", response_model=GoalListResponse, summary="List goals (newest first)")
def list_(
    category: GoalCategory | None = Query(default=None),
    status: GoalStatus | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=10, ge=1, le=100),
    user: dict = Depends(get_current_user),
):
    return list_goals(user["id"], category=category, status=status, skip=skip, limit=limit)


@router.get("/count", response_model=GoalCountResponse, summary="Count goals")
def count(
    category: GoalCategory | None = Query(default=None),
    status: GoalStatus | None = Query(default=None),
    user: dict = Depends(get_current_user),
):
    return GoalCountResponse(count=count_goals(user["id"], category=category, status=status))


@router.get("/progress", response_model=GoalProgressResponse, summary="Overall goal progress")
def progress(user: dict = Depends(get_current_user)):
    return get_overall_progress(user["id"])


@router.get(
    "/diet-progress",
    response_model=DietDailyProgressResponse,
    summary="Planned vs consumed nutrition per day over the last day, week or month",
)
def diet_daily_progress(
    view: ProgressView = Query(default=ProgressView.week),
    goal_id: str | None = Query(default=None, alias="goalId", description="Only entries linked to this goal"),
    user: dict = Depends(get_current_user),
):
    return get_diet_daily_progress(user["id"], view, goal_id=goal_id)


@router.get("/upcoming", response_model=List[Goal], summary="Pending goals whose target date is still ahead")
def upcoming(user: dict = Depends(get_current_user)):
    return upcoming_goals(user["id"])


@router.post("/overdue", response_model=GoalOverdueResponse, summary="Mark past-due pending goals as overdue")
def overdue(user: dict = Depends(get_current_user)):
    return GoalOverdueResponse(modified=mark_overdue(user["id"]))


@router.get("/{goal_id}", response_model=Goal, summary="Get a goal")
def get_one(goal_id: str, user: dict = Depends(get_current_user)):
    return get_goal(user["id"], goal_id)


@router.patch("/{goal_id}", response_model=Goal, summary="Update goal details")
def update(goal_id: str, request: GoalUpdateRequest, user: dict = Depends(get_current_user)):
    return update_goal(user["id"], goal_id, request)


@router.delete("/{goal_id}", response_model=GoalDeleteResponse, summary="Delete a goal")
def delete(goal_id: str, user: dict = Depends(get_current_user)):
    delete_goal(user["id"], goal_id)
    return GoalDeleteResponse(message="Goal deleted successfully", id=goal_id)


@router.post("/{goal_id}/toggle-completion", response_model=Goal, summary="Toggle a goal's completion status")
def toggle(goal_id: str, user: dict = Depends(get_current_user)):
    return toggle_completion(user["id"], goal_id)


@router.put("/{goal_id}/weight", response_model=Goal, summary="Record a new current weight for a weight goal")
def weight(goal_id: str, request: WeightUpdateRequest, user: dict = Depends(get_current_user)):
    return update_current_weight(user["id"], goal_id, request.new_weight)


@router.get(
    "/{goal_id}/diet-progress",
    response_model=DietGoalProgressResponse,
    summary="Per-macro progress of a diet goal from its taken entries",
)
def diet_goal_progress(goal_id: str, user: dict = Depends(get_current_user)):
    return get_diet_goal_progress(user["id"], goal_id)
