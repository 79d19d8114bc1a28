# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

# Keep the import-time DB init out of the working tree.
os.environ.setdefault("GASTRO_DATA_ROOT", tempfile.mkdtemp(prefix="gastro-import-"))

from fastapi.testclient import TestClient  # noqa: E402

from gastrohealth.api import app  # noqa: E402
from gastrohealth.app_db import init_app_db  # noqa: E402
from gastrohealth.config import settings  # noqa: E402
from gastrohealth.gemini.client import GeminiError  # noqa: E402

PROFILE = {"condition": "IBS", "dietaryGoal": "reduce bloating", "allergies": ["peanut"]}


class ApiTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="gastro-test-"))
        cls._saved = (settings.app_db_path, settings.jwt_secret)
        settings.app_db_path = cls._tmp / "gastrohealth.db"
        settings.jwt_secret = "test-secret"
        init_app_db(settings.app_db_path)
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        settings.app_db_path, settings.jwt_secret = cls._saved
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def signup(self, email: str, password: str = "password123") -> dict:
        resp = self.client.post("/api/register", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        resp = self.client.post("/api/login", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def auth(self, token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}


class TestAuth(ApiTestCase):
    def test_health_is_public(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"ok": True})

    def test_register_login_me(self) -> None:
        resp = self.client.post("/api/register", json={"email": "Demo@Example.com", "password": "password123"})
        self.assertEqual(resp.status_code, 200)
        self.assertIn("message", resp.json())

        resp = self.client.post("/api/login", json={"email": "demo@example.com", "password": "password123"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data["token"])
        self.assertEqual(data["user"], {"email": "demo@example.com", "profile": None, "hasApiKey": False})
        self.assertEqual(data["symptoms"], [])

        resp = self.client.get("/api/me", headers=self.auth(data["token"]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"], data["user"])

    def test_duplicate_registration_is_400(self) -> None:
        self.signup("dup@example.com")
        resp = self.client.post("/api/register", json={"email": "dup@example.com", "password": "password123"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Email already registered"})

    def test_bad_password_is_401(self) -> None:
        self.signup("wrongpw@example.com")
        resp = self.client.post("/api/login", json={"email": "wrongpw@example.com", "password": "nope"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid email or password"})

    def test_validation_errors_use_error_body(self) -> None:
        resp = self.client.post("/api/register", json={"email": "short@example.com", "password": "123"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("password", resp.json()["error"])

    def test_auth_required(self) -> None:
        for method, path in (("get", "/api/me"), ("post", "/api/symptoms"), ("post", "/api/gemini/meal-plan")):
            with self.subTest(path=path):
                resp = getattr(self.client, method)(path)
                self.assertEqual(resp.status_code, 401)
                self.assertEqual(resp.json(), {"error": "Not authenticated"})

    def test_tampered_token_is_401(self) -> None:
        token = self.signup("tamper@example.com")["token"]
        header, payload, sig = token.split(".")
        resp = self.client.get("/api/me", headers=self.auth(f"{header}.{payload}.{sig[:-2]}xx"))
        self.assertEqual(resp.status_code, 401)
        resp = self.client.get("/api/me", headers=self.auth("not-a-jwt"))
        self.assertEqual(resp.status_code, 401)


class TestProfileAndSymptoms(ApiTestCase):
    def test_profile_and_api_key_show_up_in_me(self) -> None:
        token = self.signup("profile@example.com")["token"]

        resp = self.client.post("/api/profile", json={"profile": PROFILE}, headers=self.auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["condition"], "IBS")
        self.assertEqual(resp.json()["dietaryGoal"], "reduce bloating")

        resp = self.client.post("/api/api-key", json={"apiKey": "  AIza-test  "}, headers=self.auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertIn("message", resp.json())

        user = self.client.get("/api/me", headers=self.auth(token)).json()["user"]
        self.assertTrue(user["hasApiKey"])
        self.assertEqual(user["profile"]["allergies"], ["peanut"])

    def test_profile_requires_condition(self) -> None:
        token = self.signup("nocondition@example.com")["token"]
        resp = self.client.post("/api/profile", json={"profile": {"condition": ""}}, headers=self.auth(token))
        self.assertEqual(resp.status_code, 400)

    def test_empty_api_key_rejected(self) -> None:
        token = self.signup("emptykey@example.com")["token"]
        resp = self.client.post("/api/api-key", json={"apiKey": "   "}, headers=self.auth(token))
        self.assertEqual(resp.status_code, 400)

    def test_symptom_list_grows_in_order(self) -> None:
        token = self.signup("symptoms@example.com")["token"]
        names = ["bloating", "heartburn", "cramps"]
        previous: list = []
        for name in names:
            resp = self.client.post(
                "/api/symptoms",
                json={"symptom": {"symptom": name, "severity": 4, "foods": ["coffee"], "id": "client-id"}},
                headers=self.auth(token),
            )
            self.assertEqual(resp.status_code, 200)
            current = resp.json()
            self.assertEqual(len(current), len(previous) + 1)
            self.assertEqual(current[: len(previous)], previous)
            self.assertEqual(current[-1]["symptom"], name)
            self.assertNotEqual(current[-1]["id"], "client-id")
            self.assertTrue(current[-1]["date"])
            previous = current

        me = self.client.get("/api/me", headers=self.auth(token)).json()
        self.assertEqual([s["symptom"] for s in me["symptoms"]], names)

    def test_symptoms_are_per_user(self) -> None:
        first = self.signup("first@example.com")["token"]
        second = self.signup("second@example.com")["token"]
        self.client.post("/api/symptoms", json={"symptom": {"symptom": "nausea"}}, headers=self.auth(first))
        me = self.client.get("/api/me", headers=self.auth(second)).json()
        self.assertEqual(me["symptoms"], [])


class TestGeminiProxy(ApiTestCase):
    def setUp(self) -> None:
        self.token = self.signup(f"gemini-{self._testMethodName}@example.com")["token"]
        self.client.post("/api/profile", json={"profile": PROFILE}, headers=self.auth(self.token))

    def with_key(self) -> None:
        self.client.post("/api/api-key", json={"apiKey": "AIza-test"}, headers=self.auth(self.token))

    def test_missing_key_is_400(self) -> None:
        resp = self.client.post(
            "/api/gemini/suggest-recipe",
            json={"profile": PROFILE, "request": "low FODMAP dinner"},
            headers=self.auth(self.token),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Gemini API key not configured"})

    def test_meal_plan_normalized(self) -> None:
        self.with_key()
        parsed = {
            "title": "Gentle week",
            "plan": [{"day": "Monday", "meals": [{"type": "breakfast", "name": "Oatmeal"}]}],
            "tips": "1. Eat slowly\n2. Avoid late meals",
        }
        with mock.patch("gastrohealth.gemini.api.generate_json", return_value=parsed) as gen:
            resp = self.client.post(
                "/api/gemini/meal-plan",
                json={"profile": PROFILE, "symptoms": [{"symptom": "bloating", "severity": 6}]},
                headers=self.auth(self.token),
            )
        self.assertEqual(resp.status_code, 200, resp.text)
        plan = resp.json()
        self.assertEqual(plan["title"], "Gentle week")
        self.assertEqual(plan["days"][0]["meals"][0], {"meal": "breakfast", "dish": "Oatmeal", "notes": None})
        self.assertEqual(plan["tips"], ["Eat slowly", "Avoid late meals"])
        self.assertEqual(gen.call_args.kwargs["api_key"], "AIza-test")
        self.assertIn("bloating", gen.call_args.kwargs["prompt"])

    def test_check_food_with_image(self) -> None:
        self.with_key()
        parsed = {"verdict": "Not recommended", "reason": "High fat", "substitutes": ["grilled chicken"]}
        with mock.patch("gastrohealth.gemini.api.generate_json", return_value=parsed) as gen:
            resp = self.client.post(
                "/api/gemini/check-food",
                json={
                    "profile": PROFILE,
                    "foodName": "fried chicken",
                    "foodImage": {"mimeType": "image/png", "data": "iVBORw0KGgoAAAANSUhEUg=="},
                },
                headers=self.auth(self.token),
            )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(
            resp.json(),
            {"foodName": "fried chicken", "verdict": "avoid", "reason": "High fat", "alternatives": ["grilled chicken"]},
        )
        self.assertEqual(gen.call_args.kwargs["image"]["mimeType"], "image/png")

    def test_check_food_bad_image_is_400(self) -> None:
        self.with_key()
        resp = self.client.post(
            "/api/gemini/check-food",
            json={"profile": PROFILE, "foodName": "toast", "foodImage": {"mimeType": "image/png", "data": "!!!!not-base64!!!!"}},
            headers=self.auth(self.token),
        )
        self.assertEqual(resp.status_code, 400)

    def test_analyze_and_recipe(self) -> None:
        self.with_key()
        with mock.patch("gastrohealth.gemini.api.generate_json", return_value={"analysis": "Coffee precedes heartburn."}):
            resp = self.client.post(
                "/api/gemini/analyze-triggers",
                json={"profile": PROFILE, "symptoms": [{"symptom": "heartburn", "foods": ["coffee"]}]},
                headers=self.auth(self.token),
            )
        self.assertEqual(resp.json(), {"analysis": "Coffee precedes heartburn."})

        recipe = {"recipe": {"title": "Rice congee", "ingredients": ["rice", "ginger"], "steps": ["Simmer", "Serve"]}}
        with mock.patch("gastrohealth.gemini.api.generate_json", return_value=recipe):
            resp = self.client.post(
                "/api/gemini/suggest-recipe",
                json={"profile": PROFILE, "request": "something soothing"},
                headers=self.auth(self.token),
            )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["name"], "Rice congee")
        self.assertEqual(resp.json()["instructions"], ["Simmer", "Serve"])

    def test_upstream_failures_are_502_not_auth_errors(self) -> None:
        self.with_key()
        for side_effect in (GeminiError("PERMISSION_DENIED (403): API key not valid"), ValueError("no JSON")):
            with self.subTest(side_effect=side_effect):
                with mock.patch("gastrohealth.gemini.api.generate_json", side_effect=side_effect):
                    resp = self.client.post(
                        "/api/gemini/analyze-triggers",
                        json={"profile": PROFILE, "symptoms": []},
                        headers=self.auth(self.token),
                    )
                self.assertEqual(resp.status_code, 502)
                self.assertIn("error", resp.json())


if __name__ == "__main__":
    unittest.main()
