# -*- coding: utf-8 -*-
"""Diet: API endpoints."""

from __future__ import annotations

from datetime import date as date_type
from typing import List

from fastapi import APIRouter, Depends, Query

from ..auth.security import ensure_same_user, get_current_user
from ..config import settings
from .aggregator import round_summary
from .models import (
    DietBulkMealPlanRequest,
    DietCreateRequest,
    DietDeleteResponse,
    DietEntry,
    DietPage,
    DietStatus,
    DietUpdateRequest,
    MealType,
    NutritionSummary,
    SortField,
    SortOrder,
)
from .storage import (
    MAX_LIMIT,
    create_bulk_entries,
    create_entry,
    delete_entry,
    get_entry,
    get_nutrition_summary,
    list_entries,
    list_entries_for_date,
    list_today_entries,
    search_entries,
    update_entry,
)

router = APIRouter(prefix="/api/diets", tags=["Diet"])


class PageParams:
    """Shared pagination/sort query parameters."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=20, ge=1, le=MAX_LIMIT),
        sort_by: SortField = Query(default=SortField.created_at, alias="sortBy"),
        sort_order: SortOrder = Query(default=SortOrder.desc, alias="sortOrder"),
    ) -> None:
        self.page = page
        self.limit = limit
        self.sort_by = sort_by
        self.sort_order = sort_order

    def as_kwargs(self) -> dict:
        return {"page": self.page, "limit": self.limit, "sort_by": self.sort_by, "sort_order": self.sort_order}


def _summary(user_id: str, start: str | None, end: str | None, status: DietStatus | None) -> NutritionSummary:
    summary = get_nutrition_summary(user_id, start=start, end=end, status=status)
    return round_summary(summary, settings.summary_decimals)


@router.post("", response_model=DietEntry, summary="Create a diet entry")
def create(request: DietCreateRequest, user: dict = Depends(get_current_user)):
    return create_entry(user["id"], request)


@router.get("", response_model=DietPage, summary="List diet entries with filters and pagination")
def list_(
    meal: MealType | None = Query(default=None),
    status: DietStatus | None = Query(default=None),
    start: date_type | None = Query(default=None, alias="startDate", description="YYYY-MM-DD"),
    end: date_type | None = Query(default=None, alias="endDate", description="YYYY-MM-DD"),
    paging: PageParams = Depends(),
    user: dict = Depends(get_current_user),
):
    return list_entries(
        user["id"],
        meal=meal,
        status=status,
        start=start.isoformat() if start else None,
        end=end.isoformat() if end else None,
        **paging.as_kwargs(),
    )


@router.post("/bulk-meal-plan", response_model=List[DietEntry], summary="Create several diet entries for a meal plan")
def create_bulk_meal_plan(request: DietBulkMealPlanRequest, user: dict = Depends(get_current_user)):
    return create_bulk_entries(user["id"], request.meals)


@router.get("/summary", response_model=NutritionSummary, summary="Nutrition summary for the current user")
def my_summary(
    start: date_type | None = Query(default=None, alias="startDate", description="YYYY-MM-DD"),
    end: date_type | None = Query(default=None, alias="endDate", description="YYYY-MM-DD"),
    status: DietStatus | None = Query(default=None, description="e.g. taken"),
    user: dict = Depends(get_current_user),
):
    return _summary(
        user["id"],
        start.isoformat() if start else None,
        end.isoformat() if end else None,
        status,
    )


@router.get("/user/{user_id}", response_model=DietPage, summary="All diet entries for a user")
def user_entries(user_id: str, paging: PageParams = Depends(), user: dict = Depends(get_current_user)):
    ensure_same_user(user_id, user)
    return list_entries(user_id, **paging.as_kwargs())


@router.get("/user/{user_id}/summary", response_model=NutritionSummary, summary="Nutrition summary for a user")
def user_summary(
    user_id: str,
    start: date_type | None = Query(default=None, alias="startDate", description="YYYY-MM-DD"),
    end: date_type | None = Query(default=None, alias="endDate", description="YYYY-MM-DD"),
    status: DietStatus | None = Query(default=None, description="e.g. taken"),
    user: dict = Depends(get_current_user),
):
    ensure_same_user(user_id, user)
    return _summary(
        user_id,
        start.isoformat() if start else None,
        end.isoformat() if end else None,
        status,
    )


@router.get("/user/{user_id}/today", response_model=DietPage, summary="Today's diet entries for a user")
def user_today(user_id: str, paging: PageParams = Depends(), user: dict = Depends(get_current_user)):
    ensure_same_user(user_id, user)
    return list_today_entries(user_id, **paging.as_kwargs())


@router.get("/user/{user_id}/date/{date}", response_model=DietPage, summary="Diet entries for a specific date")
def user_by_date(
    user_id: str,
    date: date_type,
    paging: PageParams = Depends(),
    user: dict = Depends(get_current_user),
):
    ensure_same_user(user_id, user)
    return list_entries_for_date(user_id, date.isoformat(), **paging.as_kwargs())


@router.get("/search/{user_id}", response_model=DietPage, summary="Search diet entries by food name")
def search(
    user_id: str,
    q: str = Query(..., min_length=1, max_length=100, description="Case-insensitive food name fragment"),
    paging: PageParams = Depends(),
    user: dict = Depends(get_current_user),
):
    ensure_same_user(user_id, user)
    return search_entries(user_id, q, **paging.as_kwargs())


@router.get("/{diet_id}", response_model=DietEntry, summary="Get a diet entry")
def get_one(diet_id: str, user: dict = Depends(get_current_user)):
    return get_entry(user["id"], diet_id)


@router.put("/{diet_id}", response_model=DietEntry, summary="Update a diet entry")
def update(diet_id: str, request: DietUpdateRequest, user: dict = Depends(get_current_user)):
    return update_entry(user["id"], diet_id, request)


@router.delete("/{diet_id}", response_model=DietDeleteResponse, summary="Delete a diet entry")
def delete(diet_id: str, user: dict = Depends(get_current_user)):
    entry = delete_entry(user["id"], diet_id)
    return DietDeleteResponse(message="Diet entry deleted successfully", entry=entry)
