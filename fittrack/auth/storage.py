# -*- coding: utf-8 -*-
"""Auth: user rows and profile details."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date as date_type, datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings
from ..errors import ApiError
from .models import ProfileUpdateRequest

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("username", "phone_num", "dob", "country", "height", "weight")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _fetch_one(sql: str, params: tuple) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(sql, params).fetchone()
    return dict(row) if row else None


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    return _fetch_one("SELECT * FROM users WHERE email = ?", (email.strip().lower(),))


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    return _fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))


def create_user(*, email: str, password_hash: str, username: Optional[str] = None) -> Dict[str, Any]:
    now = _utc_now()
    user = {
        "id": str(uuid4()),
        "email": email.strip().lower(),
        "password_hash": password_hash,
        "username": username,
        "phone_num": None,
        "dob": None,
        "country": None,
        "height": None,
        "weight": None,
        "created_at": now,
        "updated_at": now,
    }
    columns = ", ".join(user)
    placeholders = ", ".join("?" for _ in user)
    try:
        with db_conn(settings.app_db_path) as conn:
            conn.execute(f"INSERT INTO users ({columns}) VALUES ({placeholders})", tuple(user.values()))
    except sqlite3.IntegrityError as exc:
        raise ApiError("User already exists with this email", 409) from exc
    logger.info("user registered id=%s", user["id"])
    return user


def update_profile(user_id: str, request: ProfileUpdateRequest) -> Dict[str, Any]:
    updates: Dict[str, Any] = {}
    for name, value in request.model_dump(exclude_unset=True).items():
        if name not in _PROFILE_FIELDS:
            continue
        updates[name] = value.isoformat() if isinstance(value, date_type) else value
    if not updates:
        raise ApiError("No updates provided", 400)

    updates["updated_at"] = _utc_now()
    assignments = ", ".join(f"{column} = ?" for column in updates)
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute(f"UPDATE users SET {assignments} WHERE id = ?", list(updates.values()) + [user_id])
        if cur.rowcount == 0:
            raise ApiError("User not found", 404)
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    return dict(row)
