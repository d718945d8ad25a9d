# -*- coding: utf-8 -*-
"""Sleep: Pydantic models."""

from __future__ import annotations

from datetime import date as date_type
from typing import List, Optional

from pydantic import Field

from ..schemas import CamelModel


class SleepCreateRequest(CamelModel):
    duration: float = Field(..., gt=0, le=24, description="Hours slept")
    date: date_type = Field(..., description="YYYY-MM-DD")
    goal_id: Optional[str] = Field(None, min_length=1)


class SleepUpdateRequest(CamelModel):
    duration: Optional[float] = Field(None, gt=0, le=24)
    date: Optional[date_type] = None
    goal_id: Optional[str] = Field(None, description="null clears the goal link")


class SleepBulkRequest(CamelModel):
    records: List[SleepCreateRequest] = Field(..., min_length=1, max_length=100)


class SleepRecord(CamelModel):
    id: str
    user_id: str
    duration: float
    date: str
    goal_id: Optional[str] = None
    created_at: str
    updated_at: str


class SleepStats(CamelModel):
    count: int = Field(0, ge=0)
    total_hours: float = Field(0.0, ge=0)
    average_hours: float = Field(0.0, ge=0)
    min_hours: float = Field(0.0, ge=0)
    max_hours: float = Field(0.0, ge=0)


class SleepDeleteResponse(CamelModel):
    message: str
    record: SleepRecord
