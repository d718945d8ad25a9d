# -*- coding: utf-8 -*-
"""SQLite connection helpers and the application schema.

Every feature table is keyed by a text uuid and scoped by `user_id`.
Uniqueness rules live here as unique indexes; storage modules translate
`sqlite3.IntegrityError` into client errors.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        username TEXT,
        phone_num TEXT,
        dob TEXT,
        country TEXT,
        height REAL,
        weight REAL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS goals (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        category TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        start_date TEXT NOT NULL,
        end_date TEXT,
        target_date TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        progress REAL NOT NULL DEFAULT 0,
        data_json TEXT NOT NULL DEFAULT '{}',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_goals_user_category_start ON goals(user_id, category, start_date)",
    "CREATE INDEX IF NOT EXISTS ix_goals_user_status_target ON goals(user_id, status, target_date)",
    """
    CREATE TABLE IF NOT EXISTS diet_entries (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        food_name TEXT NOT NULL,
        meal TEXT NOT NULL,
        calories REAL NOT NULL,
        carbs REAL NOT NULL,
        protein REAL NOT NULL,
        fat REAL NOT NULL,
        status TEXT NOT NULL DEFAULT 'next',
        goal_id TEXT,
        meal_weight REAL,
        meal_date_and_time TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_diet_user_meal_food ON diet_entries(user_id, meal, food_name)",
    "CREATE INDEX IF NOT EXISTS ix_diet_user_meal_time ON diet_entries(user_id, meal_date_and_time)",
    "CREATE INDEX IF NOT EXISTS ix_diet_user_goal ON diet_entries(user_id, goal_id)",
    """
    CREATE TABLE IF NOT EXISTS sleep_records (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        duration REAL NOT NULL,
        date TEXT NOT NULL,
        goal_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_sleep_user_date ON sleep_records(user_id, date)",
)


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_app_db(db_path: Path) -> None:
    with db_conn(db_path) as conn:
        for statement in _SCHEMA:
            conn.execute(statement)


@contextmanager
def db_conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Yield a connection that commits on success and rolls back on error."""
    conn = connect(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
