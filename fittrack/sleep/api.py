# -*- coding: utf-8 -*-
"""Sleep: API endpoints."""

from __future__ import annotations

from datetime import date as date_type
from typing import List

from fastapi import APIRouter, Depends, Query

from ..auth.security import ensure_same_user, get_current_user
from .models import SleepBulkRequest, SleepCreateRequest, SleepDeleteResponse, SleepRecord, SleepStats, SleepUpdateRequest
from .storage import (
    create_record,
    create_records,
    delete_record,
    get_record,
    get_stats,
    list_records,
    list_records_for_date,
    update_record,
)

router = APIRouter(prefix="/api/sleep", tags=["Sleep"])


@router.post("", response_model=SleepRecord, summary="Log a sleep record")
def create(request: SleepCreateRequest, user: dict = Depends(get_current_user)):
    return create_record(user["id"], request)


@router.get("", response_model=List[SleepRecord], summary="List the current user's sleep records")
def list_(
    start: date_type | None = Query(default=None, alias="startDate", description="YYYY-MM-DD"),
    end: date_type | None = Query(default=None, alias="endDate", description="YYYY-MM-DD"),
    user: dict = Depends(get_current_user),
):
    return list_records(
        user["id"],
        start=start.isoformat() if start else None,
        end=end.isoformat() if end else None,
    )


@router.post("/bulk", response_model=List[SleepRecord], summary="Log several sleep records at once")
def create_bulk(request: SleepBulkRequest, user: dict = Depends(get_current_user)):
    return create_records(user["id"], request.records)


@router.get("/date/{date}", response_model=List[SleepRecord], summary="Sleep records for one date")
def by_date(date: date_type, user: dict = Depends(get_current_user)):
    return list_records_for_date(user["id"], date.isoformat())


@router.get("/stats/{user_id}", response_model=SleepStats, summary="Sleep statistics for a user")
def stats(
    user_id: str,
    start: date_type | None = Query(default=None, alias="startDate", description="YYYY-MM-DD"),
    end: date_type | None = Query(default=None, alias="endDate", description="YYYY-MM-DD"),
    user: dict = Depends(get_current_user),
):
    ensure_same_user(user_id, user)
    return get_stats(
        user_id,
        start=start.isoformat() if start else None,
        end=end.isoformat() if end else None,
    )


@router.get("/user/{user_id}", response_model=List[SleepRecord], summary="All sleep records for a user")
def user_records(user_id: str, user: dict = Depends(get_current_user)):
    ensure_same_user(user_id, user)
    return list_records(user_id)


@router.get("/{sleep_id}", response_model=SleepRecord, summary="Get a sleep record")
def get_one(sleep_id: str, user: dict = Depends(get_current_user)):
    return get_record(user["id"], sleep_id)


@router.put("/{sleep_id}", response_model=SleepRecord, summary="Update a sleep record")
def update(sleep_id: str, request: SleepUpdateRequest, user: dict = Depends(get_current_user)):
    return update_record(user["id"], sleep_id, request)


@router.delete("/{sleep_id}", response_model=SleepDeleteResponse, summary="Delete a sleep record")
def delete(sleep_id: str, user: dict = Depends(get_current_user)):
    record = delete_record(user["id"], sleep_id)
    return SleepDeleteResponse(message="Sleep entry deleted successfully", record=record)
