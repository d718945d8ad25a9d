# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Tuple
from uuid import uuid4

from fastapi.testclient import TestClient


def _day(offset: int) -> str:
    return (datetime.now(timezone.utc).date() + timedelta(days=offset)).isoformat()


def _weight_goal(start_offset: int = 0, target_offset: int = 30) -> dict:
    return {
        "category": "weight",
        "title": "Lose 10 kg",
        "startDate": _day(start_offset),
        "targetDate": _day(target_offset),
        "data": {"goalType": "loss", "targetWeight": 70, "currentWeight": 80},
    }


class TestGoalsApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="fittrack-test-"))
        data_root = cls._tmp / "data"
        os.environ["FITTRACK_DATA_ROOT"] = str(data_root)
        os.environ["FITTRACK_DB_PATH"] = str(data_root / "fittrack.db")
        os.environ["FITTRACK_JWT_SECRET"] = "test-secret"

        for name in list(sys.modules.keys()):
            if name.startswith("fittrack."):
                sys.modules.pop(name, None)

        from fittrack.api import app  # noqa: WPS433

        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _new_user(self) -> Tuple[str, Dict[str, str]]:
        resp = self.client.post(
            "/api/auth/register",
            json={"email": f"{uuid4().hex[:12]}@example.com", "password": "password123"},
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['token']}"}

    def _create(self, headers: Dict[str, str], payload: dict) -> dict:
        resp = self.client.post("/api/goals", json=payload, headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def test_create_and_status_from_target_date(self) -> None:
        user_id, headers = self._new_user()

        goal = self._create(headers, _weight_goal())
        self.assertEqual(goal["userId"], user_id)
        self.assertEqual(goal["status"], "pending")
        self.assertEqual(goal["progress"], 0)
        self.assertEqual(goal["data"]["targetWeight"], 70)
        self.assertEqual(goal["data"]["previousWeights"], [])

        late = self._create(headers, _weight_goal(start_offset=-60, target_offset=-1))
        self.assertEqual(late["status"], "overdue")

        resp = self.client.post("/api/goals", json=_weight_goal(), headers=headers)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["message"], "Goal already exists for this category and start date")

    def test_category_data_is_validated(self) -> None:
        _, headers = self._new_user()
        payload = {
            "category": "diet",
            "title": "Eat better",
            "startDate": _day(0),
            "targetDate": _day(30),
            "data": {"targetCalories": 2000},
        }
        resp = self.client.post("/api/goals", json=payload, headers=headers)
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["message"], "Invalid data for diet goal")
        self.assertEqual(len(body["errors"]), 3)

        payload["data"] = {"targetCalories": 2000, "targetProteins": 120, "targetFats": 70, "targetCarbs": 250}
        self.assertEqual(self.client.post("/api/goals", json=payload, headers=headers).status_code, 200)

    def test_get_update_delete(self) -> None:
        _, headers = self._new_user()
        goal = self._create(headers, _weight_goal())

        resp = self.client.patch(
            f"/api/goals/{goal['id']}",
            json={"title": "Lose 8 kg", "description": "slowly"},
            headers=headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["title"], "Lose 8 kg")
        self.assertEqual(resp.json()["description"], "slowly")

        resp = self.client.patch(f"/api/goals/{goal['id']}", json={"targetDate": _day(-2)}, headers=headers)
        self.assertEqual(resp.json()["status"], "overdue")

        resp = self.client.patch(f"/api/goals/{goal['id']}", json={}, headers=headers)
        self.assertEqual(resp.status_code, 400)

        # Nulls for non-clearable fields are dropped, leaving nothing to update.
        before = self.client.get(f"/api/goals/{goal['id']}", headers=headers).json()
        resp = self.client.patch(f"/api/goals/{goal['id']}", json={"title": None, "status": None}, headers=headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"success": False, "message": "No updates provided"})
        after = self.client.get(f"/api/goals/{goal['id']}", headers=headers).json()
        self.assertEqual(after["title"], "Lose 8 kg")
        self.assertEqual(after["updatedAt"], before["updatedAt"])

        resp = self.client.delete(f"/api/goals/{goal['id']}", headers=headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Goal deleted successfully", "id": goal["id"]})

        resp = self.client.get(f"/api/goals/{goal['id']}", headers=headers)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Goal not found")

    def test_goals_are_private(self) -> None:
        _, owner_headers = self._new_user()
        goal = self._create(owner_headers, _weight_goal())

        _, other_headers = self._new_user()
        self.assertEqual(self.client.get(f"/api/goals/{goal['id']}", headers=other_headers).status_code, 404)
        self.assertEqual(
            self.client.post(f"/api/goals/{goal['id']}/toggle-completion", headers=other_headers).status_code,
            404,
        )

    def test_toggle_completion(self) -> None:
        _, headers = self._new_user()
        goal = self._create(headers, _weight_goal())

        resp = self.client.post(f"/api/goals/{goal['id']}/toggle-completion", headers=headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "completed")
        self.assertEqual(resp.json()["endDate"], _day(0))

        resp = self.client.post(f"/api/goals/{goal['id']}/toggle-completion", headers=headers)
        self.assertEqual(resp.json()["status"], "pending")

    def test_mark_overdue_and_upcoming(self) -> None:
        _, headers = self._new_user()
        stale = self._create(headers, _weight_goal(start_offset=-10, target_offset=5))
        fresh = self._create(headers, _weight_goal(start_offset=0, target_offset=10))

        from fittrack.app_db import db_conn  # noqa: WPS433
        from fittrack.config import settings  # noqa: WPS433

        with db_conn(settings.app_db_path) as conn:
            conn.execute("UPDATE goals SET target_date = ? WHERE id = ?", (_day(-1), stale["id"]))

        resp = self.client.get("/api/goals/upcoming", headers=headers)
        self.assertEqual([g["id"] for g in resp.json()], [fresh["id"]])

        resp = self.client.post("/api/goals/overdue", headers=headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"modified": 1})
        self.assertEqual(self.client.get(f"/api/goals/{stale['id']}", headers=headers).json()["status"], "overdue")

        resp = self.client.post("/api/goals/overdue", headers=headers)
        self.assertEqual(resp.json(), {"modified": 0})

    def test_list_count_and_page_flags(self) -> None:
        _, headers = self._new_user()
        for offset in (0, 1, 2):
            self._create(headers, _weight_goal(start_offset=offset, target_offset=30))
        self._create(
            headers,
            {
                "category": "sleep",
                "title": "Sleep 8h",
                "startDate": _day(0),
                "targetDate": _day(30),
                "data": {"targetHours": 8},
            },
        )

        resp = self.client.get("/api/goals", params={"category": "weight", "limit": 2}, headers=headers)
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(len(body["goals"]), 2)
        self.assertFalse(body["prev"])
        self.assertTrue(body["next"])

        resp = self.client.get("/api/goals", params={"category": "weight", "skip": 2, "limit": 2}, headers=headers)
        body = resp.json()
        self.assertEqual(len(body["goals"]), 1)
        self.assertTrue(body["prev"])
        self.assertFalse(body["next"])

        self.assertEqual(self.client.get("/api/goals/count", headers=headers).json(), {"count": 4})
        resp = self.client.get("/api/goals/count", params={"category": "sleep"}, headers=headers)
        self.assertEqual(resp.json(), {"count": 1})

    def test_weight_update_keeps_history(self) -> None:
        _, headers = self._new_user()
        goal = self._create(headers, _weight_goal())

        resp = self.client.put(f"/api/goals/{goal['id']}/weight", json={"newWeight": 78}, headers=headers)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["currentWeight"], 78)
        self.assertEqual([p["weight"] for p in data["previousWeights"]], [80])

        resp = self.client.put(f"/api/goals/{goal['id']}/weight", json={"newWeight": 76}, headers=headers)
        self.assertEqual([p["weight"] for p in resp.json()["data"]["previousWeights"]], [80, 78])

        sleep_goal = self._create(
            headers,
            {
                "category": "sleep",
                "title": "Sleep 8h",
                "startDate": _day(0),
                "targetDate": _day(30),
                "data": {"targetHours": 8},
            },
        )
        resp = self.client.put(f"/api/goals/{sleep_goal['id']}/weight", json={"newWeight": 70}, headers=headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Only weight goals allowed for this function")

    def test_overall_progress(self) -> None:
        _, headers = self._new_user()
        self.assertEqual(
            self.client.get("/api/goals/progress", headers=headers).json(),
            {"progress": 0, "completed": 0, "pending": 0, "overdue": 0, "total": 0},
        )

        weight = self._create(headers, _weight_goal())
        self.client.put(f"/api/goals/{weight['id']}/weight", json={"newWeight": 75}, headers=headers)

        diet = self._create(
            headers,
            {
                "category": "diet",
                "title": "2000 kcal",
                "startDate": _day(0),
                "targetDate": _day(30),
                "data": {"targetCalories": 2000, "targetProteins": 120, "targetFats": 70, "targetCarbs": 250},
            },
        )
        meal = {
            "foodName": "Chicken rice",
            "meal": "lunch",
            "calories": 500,
            "carbs": 60,
            "protein": 35,
            "fat": 12,
            "status": "taken",
            "goalId": diet["id"],
        }
        self.assertEqual(self.client.post("/api/diets", json=meal, headers=headers).status_code, 200)
        planned = dict(meal, foodName="Planned dinner", meal="dinner", status="next")
        self.assertEqual(self.client.post("/api/diets", json=planned, headers=headers).status_code, 200)

        sleep_goal = self._create(
            headers,
            {
                "category": "sleep",
                "title": "Sleep 8h",
                "startDate": _day(0),
                "targetDate": _day(30),
                "data": {"targetHours": 8},
            },
        )
        self.client.post(f"/api/goals/{sleep_goal['id']}/toggle-completion", headers=headers)

        resp = self.client.get("/api/goals/progress", headers=headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(),
            {"progress": 58, "completed": 1, "pending": 2, "overdue": 0, "total": 3},
        )

    def _diet_goal(self, headers: Dict[str, str]) -> dict:
        return self._create(
            headers,
            {
                "category": "diet",
                "title": "2000 kcal",
                "startDate": _day(0),
                "targetDate": _day(30),
                "data": {"targetCalories": 2000, "targetProteins": 120, "targetFats": 70, "targetCarbs": 250},
            },
        )

    def _meal(self, headers: Dict[str, str], **fields) -> dict:
        payload = {"foodName": "Chicken rice", "meal": "lunch", "calories": 500, "carbs": 50, "protein": 30, "fat": 35}
        payload.update(fields)
        resp = self.client.post("/api/diets", json=payload, headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def test_diet_goal_progress(self) -> None:
        _, headers = self._new_user()
        goal = self._diet_goal(headers)

        resp = self.client.get(f"/api/goals/{goal['id']}/diet-progress", headers=headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["entryCount"], 0)
        self.assertEqual(resp.json()["overall"], 0)

        self._meal(headers, status="taken", goalId=goal["id"])
        # Planned, unlinked or not yet taken entries do not count.
        self._meal(headers, foodName="Planned dinner", meal="dinner", status="next", goalId=goal["id"])
        self._meal(headers, foodName="Other lunch", status="taken")

        resp = self.client.get(f"/api/goals/{goal['id']}/diet-progress", headers=headers)
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["goalId"], goal["id"])
        self.assertEqual(body["entryCount"], 1)
        self.assertEqual(body["calories"], {"target": 2000, "actual": 500, "progress": 25.0, "status": "on_track"})
        self.assertEqual(body["protein"]["progress"], 25.0)
        self.assertEqual(body["fat"]["progress"], 50.0)
        self.assertEqual(body["carbs"]["progress"], 20.0)
        self.assertEqual(body["overall"], 30.0)

        weight = self._create(headers, _weight_goal())
        resp = self.client.get(f"/api/goals/{weight['id']}/diet-progress", headers=headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Category must be diet")

        _, other_headers = self._new_user()
        resp = self.client.get(f"/api/goals/{goal['id']}/diet-progress", headers=other_headers)
        self.assertEqual(resp.status_code, 404)

    def test_diet_daily_progress(self) -> None:
        _, headers = self._new_user()
        goal = self._diet_goal(headers)

        self._meal(headers, status="taken", goalId=goal["id"])
        self._meal(headers, foodName="Planned dinner", meal="dinner", status="next", calories=700)
        self._meal(headers, foodName="Old lunch", status="taken", mealDateAndTime=f"{_day(-3)}T12:00:00Z")
        self._meal(headers, foodName="Older lunch", status="taken", mealDateAndTime=f"{_day(-20)}T12:00:00Z")

        resp = self.client.get("/api/goals/diet-progress", headers=headers)
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["view"], "week")
        self.assertEqual((body["startDate"], body["endDate"]), (_day(-6), _day(0)))
        self.assertEqual([d["date"] for d in body["days"]], [_day(-3), _day(0)])
        today = body["days"][1]
        self.assertEqual(today["planned"]["calories"], 1200)
        self.assertEqual(today["consumed"]["calories"], 500)
        self.assertEqual(today["adherence"]["calories"], 41.67)

        resp = self.client.get("/api/goals/diet-progress", params={"view": "month"}, headers=headers)
        self.assertEqual(len(resp.json()["days"]), 3)

        resp = self.client.get("/api/goals/diet-progress", params={"view": "day"}, headers=headers)
        self.assertEqual([d["date"] for d in resp.json()["days"]], [_day(0)])

        resp = self.client.get("/api/goals/diet-progress", params={"goalId": goal["id"]}, headers=headers)
        days = resp.json()["days"]
        self.assertEqual(len(days), 1)
        self.assertEqual(days[0]["planned"]["calories"], 500)

        resp = self.client.get("/api/goals/diet-progress", params={"view": "year"}, headers=headers)
        self.assertEqual(resp.status_code, 400)


if __name__ == "__main__":
    unittest.main()
