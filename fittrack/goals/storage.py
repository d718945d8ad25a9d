# -*- coding: utf-8 -*-
"""Goals: SQLite storage, status rules and overall progress."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import date as date_type, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from pydantic import ValidationError

from ..app_db import db_conn
from ..config import settings
from ..diet.aggregator import summarize_entries
from ..diet.models import DietStatus
from ..diet.storage import query_entries
from ..errors import ApiError
from ..sleep.storage import list_records
from .models import (
    GOAL_DATA_MODELS,
    DietDailyProgressResponse,
    DietGoalProgressResponse,
    Goal,
    GoalCategory,
    GoalCreateRequest,
    GoalListResponse,
    GoalProgressResponse,
    GoalStatus,
    GoalUpdateRequest,
    ProgressView,
)
from .progress import (
    daily_diet_progress,
    diet_goal_progress,
    diet_progress,
    overall_progress,
    sleep_progress,
    weight_progress,
)

logger = logging.getLogger(__name__)

_NOT_FOUND = "Goal not found"
_DUPLICATE_MESSAGE = "Goal already exists for this category and start date"
_NULLABLE_FIELDS = {"description", "end_date"}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _status_for_target(target_date: str) -> GoalStatus:
    return GoalStatus.overdue if target_date < _today() else GoalStatus.pending


def validate_goal_data(category: GoalCategory, data: Dict[str, Any]) -> Dict[str, Any]:
    model = GOAL_DATA_MODELS[GoalCategory(category)]
    try:
        parsed = model.model_validate(data)
    except ValidationError as exc:
        errors = [
            {"message": f"data.{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"}
            for err in exc.errors()
        ]
        raise ApiError(f"Invalid data for {GoalCategory(category).value} goal", 400, errors) from exc
    return parsed.model_dump(by_alias=True, mode="json")


def _row_to_goal(row: sqlite3.Row) -> Goal:
    try:
        data = json.loads(row["data_json"] or "{}")
    except ValueError:
        data = {}
    return Goal(
        id=row["id"],
        user_id=row["user_id"],
        category=row["category"],
        title=row["title"],
        description=row["description"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        target_date=row["target_date"],
        status=row["status"],
        progress=row["progress"],
        data=data,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _fetch(conn: sqlite3.Connection, user_id: str, goal_id: str) -> sqlite3.Row:
    row = conn.execute(
        "SELECT * FROM goals WHERE id = ? AND user_id = ?",
        (goal_id, user_id),
    ).fetchone()
    if not row:
        raise ApiError(_NOT_FOUND, 404)
    return row


def add_goal(user_id: str, request: GoalCreateRequest) -> Goal:
    data = validate_goal_data(request.category, request.data)
    target_date = request.target_date.isoformat()
    status = request.status
    if status == GoalStatus.pending:
        status = _status_for_target(target_date)

    now = _utc_now()
    goal = Goal(
        id=str(uuid4()),
        user_id=user_id,
        category=request.category,
        title=request.title,
        description=request.description,
        start_date=request.start_date.isoformat(),
        end_date=request.end_date.isoformat() if request.end_date else None,
        target_date=target_date,
        status=status,
        progress=0.0,
        data=data,
        created_at=now,
        updated_at=now,
    )
    try:
        with db_conn(settings.app_db_path) as conn:
            conn.execute(
                """
                INSERT INTO goals (
                    id, user_id, category, title, description, start_date, end_date,
                    target_date, status, progress, data_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    goal.id,
                    user_id,
                    goal.category.value,
                    goal.title,
                    goal.description,
                    goal.start_date,
                    goal.end_date,
                    goal.target_date,
                    goal.status.value,
                    goal.progress,
                    json.dumps(data, ensure_ascii=False),
                    now,
                    now,
                ),
            )
    except sqlite3.IntegrityError as exc:
        raise ApiError(_DUPLICATE_MESSAGE, 409) from exc
    logger.info("goal created id=%s user=%s category=%s", goal.id, user_id, goal.category.value)
    return goal


def get_goal(user_id: str, goal_id: str) -> Goal:
    with db_conn(settings.app_db_path) as conn:
        return _row_to_goal(_fetch(conn, user_id, goal_id))


def delete_goal(user_id: str, goal_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute("DELETE FROM goals WHERE id = ? AND user_id = ?", (goal_id, user_id))
        if cur.rowcount == 0:
            raise ApiError(_NOT_FOUND, 404)
    logger.info("goal deleted id=%s user=%s", goal_id, user_id)


def _save(conn: sqlite3.Connection, goal_id: str, updates: Dict[str, Any]) -> None:
    updates["updated_at"] = _utc_now()
    assignments = ", ".join(f"{column} = ?" for column in updates)
    conn.execute(f"UPDATE goals SET {assignments} WHERE id = ?", list(updates.values()) + [goal_id])


def update_goal(user_id: str, goal_id: str, request: GoalUpdateRequest) -> Goal:
    fields = request.model_dump(exclude_unset=True)
    try:
        with db_conn(settings.app_db_path) as conn:
            current = _row_to_goal(_fetch(conn, user_id, goal_id))
            updates: Dict[str, Any] = {}
            for name, value in fields.items():
                if name == "data" or (value is None and name not in _NULLABLE_FIELDS):
                    continue
                if isinstance(value, (GoalCategory, GoalStatus)):
                    value = value.value
                elif isinstance(value, date_type):
                    value = value.isoformat()
                updates[name] = value
            if not updates and fields.get("data") is None:
                raise ApiError("No updates provided", 400)

            category = GoalCategory(updates.get("category") or current.category)
            if fields.get("data") is not None:
                updates["data_json"] = json.dumps(validate_goal_data(category, fields["data"]), ensure_ascii=False)
            elif category != current.category:
                # Category switches must carry data matching the new category.
                validate_goal_data(category, current.data)

            # Moving the schedule re-derives pending/overdue; completed goals stay completed.
            if ("start_date" in updates or "target_date" in updates) and current.status in (
                GoalStatus.pending,
                GoalStatus.overdue,
            ):
                target = updates.get("target_date") or current.target_date
                updates["status"] = _status_for_target(target).value

            _save(conn, goal_id, updates)
            goal = _row_to_goal(_fetch(conn, user_id, goal_id))
    except sqlite3.IntegrityError as exc:
        raise ApiError(_DUPLICATE_MESSAGE, 409) from exc
    return goal


def _filters(user_id: str, category: Optional[GoalCategory], status: Optional[GoalStatus]) -> Tuple[str, List[Any]]:
    where = "user_id = ?"
    params: List[Any] = [user_id]
    if category:
        where += " AND category = ?"
        params.append(GoalCategory(category).value)
    if status:
        where += " AND status = ?"
        params.append(GoalStatus(status).value)
    return where, params


def list_goals(
    user_id: str,
    *,
    category: Optional[GoalCategory] = None,
    status: Optional[GoalStatus] = None,
    skip: int = 0,
    limit: int = 10,
) -> GoalListResponse:
    where, params = _filters(user_id, category, status)
    with db_conn(settings.app_db_path) as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM goals WHERE {where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM goals WHERE {where} ORDER BY created_at DESC, id ASC LIMIT ? OFFSET ?",
            params + [limit, skip],
        ).fetchall()
    return GoalListResponse(
        goals=[_row_to_goal(r) for r in rows],
        prev=skip > 0,
        next=skip + limit < total,
    )


def count_goals(
    user_id: str,
    *,
    category: Optional[GoalCategory] = None,
    status: Optional[GoalStatus] = None,
) -> int:
    where, params = _filters(user_id, category, status)
    with db_conn(settings.app_db_path) as conn:
        return int(conn.execute(f"SELECT COUNT(*) FROM goals WHERE {where}", params).fetchone()[0])


def toggle_completion(user_id: str, goal_id: str) -> Goal:
    """pending/overdue -> completed; completed -> pending, or overdue once the target date has passed."""
    with db_conn(settings.app_db_path) as conn:
        current = _row_to_goal(_fetch(conn, user_id, goal_id))
        if current.status in (GoalStatus.pending, GoalStatus.overdue):
            updates = {"status": GoalStatus.completed.value, "end_date": _today()}
        else:
            updates = {"status": _status_for_target(current.target_date).value}
        _save(conn, goal_id, updates)
        goal = _row_to_goal(_fetch(conn, user_id, goal_id))
    logger.info("goal status changed id=%s %s -> %s", goal_id, current.status.value, goal.status.value)
    return goal


def upcoming_goals(user_id: str) -> List[Goal]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT * FROM goals
            WHERE user_id = ? AND status = 'pending' AND target_date >= ?
            ORDER BY target_date ASC
            """,
            (user_id, _today()),
        ).fetchall()
    return [_row_to_goal(r) for r in rows]


def mark_overdue(user_id: str) -> int:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute(
            """
            UPDATE goals SET status = 'overdue', updated_at = ?
            WHERE user_id = ? AND status = 'pending' AND target_date < ?
            """,
            (_utc_now(), user_id, _today()),
        )
        modified = cur.rowcount
    if modified:
        logger.info("goals marked overdue user=%s count=%d", user_id, modified)
    return modified


def update_current_weight(user_id: str, goal_id: str, new_weight: float) -> Goal:
    with db_conn(settings.app_db_path) as conn:
        goal = _row_to_goal(_fetch(conn, user_id, goal_id))
        if goal.category != GoalCategory.weight:
            raise ApiError("Only weight goals allowed for this function", 400)
        if not goal.data:
            raise ApiError("Goal data is missing", 400)

        data = dict(goal.data)
        history = list(data.get("previousWeights") or [])
        if data.get("currentWeight") is not None:
            history.append({"weight": data["currentWeight"], "date": _utc_now()})
        data["previousWeights"] = history
        data["currentWeight"] = new_weight

        _save(conn, goal_id, {"data_json": json.dumps(data, ensure_ascii=False)})
        return _row_to_goal(_fetch(conn, user_id, goal_id))


def _pending_goal_progress(user_id: str, goal: Goal) -> float:
    if goal.category == GoalCategory.weight:
        return weight_progress(goal.data)
    if goal.category == GoalCategory.diet:
        entries = query_entries(user_id, status=DietStatus.taken, goal_id=goal.id)
        return diet_progress(goal.data, summarize_entries(entries))
    if goal.category == GoalCategory.sleep:
        return sleep_progress(goal.data, (r.duration for r in list_records(user_id, goal_id=goal.id)))
    return max(0.0, min(100.0, goal.progress))


def get_overall_progress(user_id: str) -> GoalProgressResponse:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute("SELECT * FROM goals WHERE user_id = ?", (user_id,)).fetchall()
    goals = [_row_to_goal(r) for r in rows]

    counts = {status: 0 for status in GoalStatus}
    per_goal: List[float] = []
    for goal in goals:
        counts[goal.status] += 1
        if goal.status == GoalStatus.completed:
            per_goal.append(100.0)
        elif goal.status == GoalStatus.overdue:
            per_goal.append(0.0)
        else:
            per_goal.append(_pending_goal_progress(user_id, goal))

    return GoalProgressResponse(
        progress=overall_progress(per_goal),
        completed=counts[GoalStatus.completed],
        pending=counts[GoalStatus.pending],
        overdue=counts[GoalStatus.overdue],
        total=len(goals),
    )


# Days covered by each view, ending today.
_VIEW_DAYS = {ProgressView.day: 1, ProgressView.week: 7, ProgressView.month: 30}


def get_diet_goal_progress(user_id: str, goal_id: str) -> DietGoalProgressResponse:
    goal = get_goal(user_id, goal_id)
    if goal.category != GoalCategory.diet:
        raise ApiError("Category must be diet", 400)
    entries = query_entries(user_id, status=DietStatus.taken, goal_id=goal.id)
    return diet_goal_progress(goal.id, goal.data, summarize_entries(entries))


def get_diet_daily_progress(
    user_id: str,
    view: ProgressView = ProgressView.week,
    *,
    goal_id: Optional[str] = None,
) -> DietDailyProgressResponse:
    if goal_id:
        get_goal(user_id, goal_id)
    end = datetime.now(timezone.utc).date()
    start = end - timedelta(days=_VIEW_DAYS[view] - 1)
    entries = query_entries(user_id, start=start.isoformat(), end=end.isoformat(), goal_id=goal_id)
    logger.debug("diet daily progress user=%s view=%s entries=%d", user_id, view.value, len(entries))
    return DietDailyProgressResponse(
        view=view,
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        days=daily_diet_progress(entries),
    )
