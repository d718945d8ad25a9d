# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient


class TestAuthApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="fittrack-test-"))
        data_root = cls._tmp / "data"
        os.environ["FITTRACK_DATA_ROOT"] = str(data_root)
        os.environ["FITTRACK_DB_PATH"] = str(data_root / "fittrack.db")
        os.environ["FITTRACK_JWT_SECRET"] = "test-secret"

        # Ensure settings/app reflect the env vars above.
        for name in list(sys.modules.keys()):
            if name.startswith("fittrack."):
                sys.modules.pop(name, None)

        from fittrack.api import app  # noqa: WPS433 (import inside test for env control)

        cls.app = app
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def test_health_is_public(self) -> None:
        with TestClient(self.app) as anon:
            resp = anon.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"ok": True})

    def test_auth_required(self) -> None:
        with TestClient(self.app) as anon:
            resp = anon.get("/api/diets")
            self.assertEqual(resp.status_code, 401)
            self.assertEqual(resp.json(), {"success": False, "message": "Not authenticated"})

            resp = anon.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
            self.assertEqual(resp.status_code, 401)
            self.assertEqual(resp.json()["message"], "Invalid token")

    def test_cors_preflight_skips_auth(self) -> None:
        with TestClient(self.app) as anon:
            resp = anon.options(
                "/api/diets",
                headers={"Origin": "http://example.com", "Access-Control-Request-Method": "GET"},
            )
            self.assertEqual(resp.status_code, 200)
            self.assertIn(resp.headers["access-control-allow-origin"], ("*", "http://example.com"))

            # The actual request is still gated.
            self.assertEqual(anon.get("/api/diets", headers={"Origin": "http://example.com"}).status_code, 401)

    def test_register_login_me(self) -> None:
        email = "Ada@Example.com"
        password = "password123"

        resp = self.client.post("/api/auth/register", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["user"]["email"], "ada@example.com")
        self.assertIn("createdAt", body["user"])
        token = body["token"]

        resp = self.client.post("/api/auth/register", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["message"], "User already exists with this email")

        resp = self.client.post("/api/auth/login", json={"email": email, "password": "wrong-password"})
        self.assertEqual(resp.status_code, 401)
        self.assertFalse(resp.json()["success"])

        resp = self.client.post("/api/auth/login", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200)

        with TestClient(self.app) as bearer:
            resp = bearer.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.json()["id"], body["user"]["id"])

    def test_profile_update(self) -> None:
        resp = self.client.post(
            "/api/auth/register",
            json={"email": "grace@example.com", "password": "password123", "username": "grace"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["expiresAt"].endswith("Z"))
        headers = {"Authorization": f"Bearer {resp.json()['token']}"}

        resp = self.client.put(
            "/api/auth/me",
            json={"country": "UK", "height": 170.5, "weight": 62, "dob": "1990-05-01"},
            headers=headers,
        )
        self.assertEqual(resp.status_code, 200)
        profile = resp.json()
        self.assertEqual(profile["username"], "grace")
        self.assertEqual(profile["country"], "UK")
        self.assertEqual(profile["height"], 170.5)
        self.assertEqual(profile["dob"], "1990-05-01")
        self.assertIsNone(profile["phoneNum"])
        self.assertNotIn("passwordHash", profile)

        resp = self.client.put("/api/auth/me", json={}, headers=headers)
        self.assertEqual(resp.status_code, 400)

        resp = self.client.put("/api/auth/me", json={"height": 0}, headers=headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Validation failed")

    def test_expired_token_and_logout(self) -> None:
        from datetime import datetime, timedelta, timezone  # noqa: WPS433

        import jwt  # noqa: WPS433

        expired = jwt.encode(
            {"sub": "someone", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            "test-secret",
            algorithm="HS256",
        )
        with TestClient(self.app) as anon:
            resp = anon.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
            self.assertEqual(resp.status_code, 401)
            self.assertEqual(resp.json()["message"], "Token expired")

            resp = anon.post("/api/auth/register", json={"email": "linus@example.com", "password": "password123"})
            self.assertEqual(resp.status_code, 200)
            # The session cookie alone authenticates.
            self.assertEqual(anon.get("/api/auth/me").status_code, 200)

            resp = anon.post("/api/auth/logout")
            self.assertEqual(resp.json(), {"message": "Logged out successfully"})
            anon.cookies.clear()
            self.assertEqual(anon.get("/api/auth/me").status_code, 401)

    def test_register_validation(self) -> None:
        resp = self.client.post("/api/auth/register", json={"email": "nobody", "password": "short"})
        self.assertEqual(resp.status_code, 400)
        payload = resp.json()
        self.assertEqual(payload["message"], "Validation failed")
        self.assertEqual(len(payload["errors"]), 2)


if __name__ == "__main__":
    unittest.main()
