# -*- coding: utf-8 -*-
"""Sleep: SQLite storage and per-user statistics."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date as date_type, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings
from ..errors import ApiError
from .models import SleepCreateRequest, SleepRecord, SleepStats, SleepUpdateRequest

logger = logging.getLogger(__name__)

_NOT_FOUND = "Sleep entry not found"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _row_to_record(row: sqlite3.Row) -> SleepRecord:
    return SleepRecord(
        id=row["id"],
        user_id=row["user_id"],
        duration=row["duration"],
        date=row["date"],
        goal_id=row["goal_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _insert(conn: sqlite3.Connection, user_id: str, request: SleepCreateRequest) -> SleepRecord:
    now = _utc_now()
    record = SleepRecord(
        id=str(uuid4()),
        user_id=user_id,
        duration=request.duration,
        date=request.date.isoformat(),
        goal_id=request.goal_id,
        created_at=now,
        updated_at=now,
    )
    conn.execute(
        """
        INSERT INTO sleep_records (id, user_id, duration, date, goal_id, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (record.id, user_id, record.duration, record.date, record.goal_id, now, now),
    )
    return record


def create_record(user_id: str, request: SleepCreateRequest) -> SleepRecord:
    with db_conn(settings.app_db_path) as conn:
        record = _insert(conn, user_id, request)
    logger.info("sleep record created id=%s user=%s", record.id, user_id)
    return record


def create_records(user_id: str, requests: Iterable[SleepCreateRequest]) -> List[SleepRecord]:
    with db_conn(settings.app_db_path) as conn:
        records = [_insert(conn, user_id, r) for r in requests]
    logger.info("sleep records created user=%s count=%d", user_id, len(records))
    return records


def get_record(user_id: str, record_id: str) -> SleepRecord:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT * FROM sleep_records WHERE id = ? AND user_id = ?",
            (record_id, user_id),
        ).fetchone()
    if not row:
        raise ApiError(_NOT_FOUND, 404)
    return _row_to_record(row)


def update_record(user_id: str, record_id: str, request: SleepUpdateRequest) -> SleepRecord:
    updates: Dict[str, Any] = {}
    for name, value in request.model_dump(exclude_unset=True).items():
        if value is None and name != "goal_id":
            continue
        if isinstance(value, date_type):
            value = value.isoformat()
        updates[name] = value
    if not updates:
        raise ApiError("At least one field (duration, date, goalId) must be provided", 400)

    updates["updated_at"] = _utc_now()
    assignments = ", ".join(f"{column} = ?" for column in updates)
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute(
            f"UPDATE sleep_records SET {assignments} WHERE id = ? AND user_id = ?",
            list(updates.values()) + [record_id, user_id],
        )
        if cur.rowcount == 0:
            raise ApiError(_NOT_FOUND, 404)
        row = conn.execute("SELECT * FROM sleep_records WHERE id = ?", (record_id,)).fetchone()
    return _row_to_record(row)


def delete_record(user_id: str, record_id: str) -> SleepRecord:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT * FROM sleep_records WHERE id = ? AND user_id = ?",
            (record_id, user_id),
        ).fetchone()
        if not row:
            raise ApiError(_NOT_FOUND, 404)
        conn.execute("DELETE FROM sleep_records WHERE id = ?", (record_id,))
    logger.info("sleep record deleted id=%s user=%s", record_id, user_id)
    return _row_to_record(row)


def list_records(
    user_id: str,
    *,
    start: Optional[str] = None,
    end: Optional[str] = None,
    goal_id: Optional[str] = None,
) -> List[SleepRecord]:
    sql = "SELECT * FROM sleep_records WHERE user_id = ?"
    params: List[Any] = [user_id]
    if start:
        sql += " AND date >= ?"
        params.append(start)
    if end:
        sql += " AND date <= ?"
        params.append(end)
    if goal_id:
        sql += " AND goal_id = ?"
        params.append(goal_id)
    sql += " ORDER BY date DESC, created_at DESC"

    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(sql, params).fetchall()
    return [_row_to_record(r) for r in rows]


def list_records_for_date(user_id: str, date: str) -> List[SleepRecord]:
    return list_records(user_id, start=date, end=date)


def compute_stats(records: Iterable[SleepRecord]) -> SleepStats:
    durations = [r.duration for r in records]
    if not durations:
        return SleepStats()
    total = sum(durations)
    return SleepStats(
        count=len(durations),
        total_hours=round(total, 2),
        average_hours=round(total / len(durations), 2),
        min_hours=min(durations),
        max_hours=max(durations),
    )


def get_stats(user_id: str, *, start: Optional[str] = None, end: Optional[str] = None) -> SleepStats:
    return compute_stats(list_records(user_id, start=start, end=end))
