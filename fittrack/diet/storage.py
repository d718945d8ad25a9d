# -*- coding: utf-8 -*-
"""Diet: SQLite storage (query layer feeding the nutrition aggregator)."""

from __future__ import annotations

import logging
import math
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings
from ..errors import ApiError
from .aggregator import summarize_entries
from .models import (
    DietCreateRequest,
    DietEntry,
    DietPage,
    DietStatus,
    DietUpdateRequest,
    MealType,
    NutritionSummary,
    SortField,
    SortOrder,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

_DUPLICATE_MESSAGE = "Diet entry already exists for this meal and food"

_SORT_COLUMNS = {
    SortField.created_at: "created_at",
    SortField.updated_at: "updated_at",
    SortField.calories: "calories",
    SortField.food_name: "food_name",
}

_UPDATABLE_COLUMNS = {
    "food_name": "food_name",
    "meal": "meal",
    "calories": "calories",
    "carbs": "carbs",
    "protein": "protein",
    "fat": "fat",
    "status": "status",
    "goal_id": "goal_id",
    "meal_weight": "meal_weight",
    "meal_date_and_time": "meal_date_and_time",
}

# Fields that may be explicitly set to null to clear them.
_NULLABLE_FIELDS = {"goal_id", "meal_weight"}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _iso(value: Optional[datetime], default: str) -> str:
    if value is None:
        return default
    return value.isoformat().replace("+00:00", "Z")


def _row_to_entry(row: sqlite3.Row) -> DietEntry:
    return DietEntry(
        id=row["id"],
        user_id=row["user_id"],
        food_name=row["food_name"],
        meal=row["meal"],
        calories=row["calories"],
        carbs=row["carbs"],
        protein=row["protein"],
        fat=row["fat"],
        status=row["status"],
        goal_id=row["goal_id"],
        meal_weight=row["meal_weight"],
        meal_date_and_time=row["meal_date_and_time"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def sanitize_options(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sort_by: Optional[SortField] = None,
    sort_order: Optional[SortOrder] = None,
) -> Tuple[int, int, SortField, SortOrder]:
    page = max(1, page or DEFAULT_PAGE)
    limit = min(MAX_LIMIT, max(1, limit or DEFAULT_LIMIT))
    return page, limit, sort_by or SortField.created_at, sort_order or SortOrder.desc


def _insert(conn: sqlite3.Connection, user_id: str, request: DietCreateRequest) -> DietEntry:
    now = _utc_now()
    entry = DietEntry(
        id=str(uuid4()),
        user_id=user_id,
        food_name=request.food_name,
        meal=request.meal,
        calories=request.calories,
        carbs=request.carbs,
        protein=request.protein,
        fat=request.fat,
        status=request.status,
        goal_id=request.goal_id,
        meal_weight=request.meal_weight,
        meal_date_and_time=_iso(request.meal_date_and_time, now),
        created_at=now,
        updated_at=now,
    )
    conn.execute(
        """
        INSERT INTO diet_entries (
            id, user_id, food_name, meal, calories, carbs, protein, fat,
            status, goal_id, meal_weight, meal_date_and_time, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            entry.id,
            entry.user_id,
            entry.food_name,
            entry.meal.value,
            entry.calories,
            entry.carbs,
            entry.protein,
            entry.fat,
            entry.status.value,
            entry.goal_id,
            entry.meal_weight,
            entry.meal_date_and_time,
            entry.created_at,
            entry.updated_at,
        ),
    )
    return entry


def create_entry(user_id: str, request: DietCreateRequest) -> DietEntry:
    try:
        with db_conn(settings.app_db_path) as conn:
            entry = _insert(conn, user_id, request)
    except sqlite3.IntegrityError as exc:
        raise ApiError(_DUPLICATE_MESSAGE, 409) from exc
    logger.info("diet entry created id=%s user=%s meal=%s", entry.id, user_id, entry.meal.value)
    return entry


def create_bulk_entries(user_id: str, requests: List[DietCreateRequest]) -> List[DietEntry]:
    """Insert a whole meal plan in one transaction; any duplicate rolls back all of it."""
    if not requests:
        raise ApiError("Meals array is required and must not be empty", 400)
    try:
        with db_conn(settings.app_db_path) as conn:
            created = [_insert(conn, user_id, r) for r in requests]
    except sqlite3.IntegrityError as exc:
        raise ApiError(_DUPLICATE_MESSAGE, 409) from exc
    logger.info("meal plan created user=%s entries=%d", user_id, len(created))
    return created


def get_entry(user_id: str, entry_id: str) -> DietEntry:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT * FROM diet_entries WHERE id = ? AND user_id = ?",
            (entry_id, user_id),
        ).fetchone()
    if not row:
        raise ApiError("Diet entry not found", 404)
    return _row_to_entry(row)


def update_entry(user_id: str, entry_id: str, request: DietUpdateRequest) -> DietEntry:
    updates: Dict[str, Any] = {}
    for name, value in request.model_dump(exclude_unset=True).items():
        if value is None and name not in _NULLABLE_FIELDS:
            continue
        if isinstance(value, (MealType, DietStatus)):
            value = value.value
        elif isinstance(value, datetime):
            value = _iso(value, "")
        updates[_UPDATABLE_COLUMNS[name]] = value
    if not updates:
        raise ApiError("No updates provided", 400)

    updates["updated_at"] = _utc_now()
    assignments = ", ".join(f"{column} = ?" for column in updates)
    params: List[Any] = list(updates.values()) + [entry_id, user_id]
    try:
        with db_conn(settings.app_db_path) as conn:
            cur = conn.execute(
                f"UPDATE diet_entries SET {assignments} WHERE id = ? AND user_id = ?",
                params,
            )
            if cur.rowcount == 0:
                raise ApiError("Diet entry not found", 404)
            row = conn.execute("SELECT * FROM diet_entries WHERE id = ?", (entry_id,)).fetchone()
    except sqlite3.IntegrityError as exc:
        raise ApiError(_DUPLICATE_MESSAGE, 409) from exc
    return _row_to_entry(row)


def delete_entry(user_id: str, entry_id: str) -> DietEntry:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT * FROM diet_entries WHERE id = ? AND user_id = ?",
            (entry_id, user_id),
        ).fetchone()
        if not row:
            raise ApiError("Diet entry not found", 404)
        conn.execute("DELETE FROM diet_entries WHERE id = ?", (entry_id,))
    logger.info("diet entry deleted id=%s user=%s", entry_id, user_id)
    return _row_to_entry(row)


def _where(
    user_id: str,
    *,
    meal: Optional[MealType] = None,
    status: Optional[DietStatus] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    goal_id: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[str, List[Any]]:
    clauses = ["user_id = ?"]
    params: List[Any] = [user_id]
    if meal:
        clauses.append("meal = ?")
        params.append(MealType(meal).value)
    if status:
        clauses.append("status = ?")
        params.append(DietStatus(status).value)
    # Day-granular inclusive range on the YYYY-MM-DD prefix of the meal time.
    if start:
        clauses.append("substr(meal_date_and_time, 1, 10) >= ?")
        params.append(start[:10])
    if end:
        clauses.append("substr(meal_date_and_time, 1, 10) <= ?")
        params.append(end[:10])
    if goal_id:
        clauses.append("goal_id = ?")
        params.append(goal_id)
    if search:
        escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        clauses.append("lower(food_name) LIKE ? ESCAPE '\\'")
        params.append(f"%{escaped.lower()}%")
    return " AND ".join(clauses), params


def _paged(
    where: str,
    params: List[Any],
    *,
    page: Optional[int],
    limit: Optional[int],
    sort_by: Optional[SortField],
    sort_order: Optional[SortOrder],
) -> DietPage:
    page, limit, sort_by, sort_order = sanitize_options(page, limit, sort_by, sort_order)
    column = _SORT_COLUMNS[SortField(sort_by)]
    direction = "ASC" if SortOrder(sort_order) == SortOrder.asc else "DESC"
    with db_conn(settings.app_db_path) as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM diet_entries WHERE {where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM diet_entries WHERE {where} ORDER BY {column} {direction}, id ASC LIMIT ? OFFSET ?",
            params + [limit, (page - 1) * limit],
        ).fetchall()
    return DietPage(
        items=[_row_to_entry(r) for r in rows],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )


def list_entries(
    user_id: str,
    *,
    meal: Optional[MealType] = None,
    status: Optional[DietStatus] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sort_by: Optional[SortField] = None,
    sort_order: Optional[SortOrder] = None,
) -> DietPage:
    where, params = _where(user_id, meal=meal, status=status, start=start, end=end)
    return _paged(where, params, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


def list_entries_for_date(user_id: str, date: str, **options: Any) -> DietPage:
    return list_entries(user_id, start=date, end=date, **options)


def list_today_entries(user_id: str, **options: Any) -> DietPage:
    return list_entries_for_date(user_id, _today(), **options)


def search_entries(
    user_id: str,
    query: str,
    *,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sort_by: Optional[SortField] = None,
    sort_order: Optional[SortOrder] = None,
) -> DietPage:
    where, params = _where(user_id, search=query.strip())
    return _paged(where, params, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


def query_entries(
    user_id: str,
    *,
    status: Optional[DietStatus] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    goal_id: Optional[str] = None,
) -> List[DietEntry]:
    """Unpaginated filtered query, the input side of the aggregator."""
    where, params = _where(user_id, status=status, start=start, end=end, goal_id=goal_id)
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            f"SELECT * FROM diet_entries WHERE {where} ORDER BY meal_date_and_time ASC",
            params,
        ).fetchall()
    return [_row_to_entry(r) for r in rows]


def get_nutrition_summary(
    user_id: str,
    *,
    start: Optional[str] = None,
    end: Optional[str] = None,
    status: Optional[DietStatus] = None,
) -> NutritionSummary:
    entries = query_entries(user_id, status=status, start=start, end=end)
    summary = summarize_entries(entries)
    logger.debug(
        "nutrition summary user=%s start=%s end=%s status=%s entries=%d",
        user_id,
        start,
        end,
        status,
        summary.entry_count,
    )
    return summary
