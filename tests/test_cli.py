# -*- coding: utf-8 -*-

from __future__ import annotations

import io
import json
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

os.environ.setdefault("GASTRO_DATA_ROOT", tempfile.mkdtemp(prefix="gastro-import-"))

from fastapi.testclient import TestClient  # noqa: E402

from gastrohealth.api import app  # noqa: E402
from gastrohealth.app_db import init_app_db  # noqa: E402
from gastrohealth.client import cli  # noqa: E402
from gastrohealth.client.gateway import ApiGatewayClient  # noqa: E402
from gastrohealth.config import settings  # noqa: E402


class CliTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="gastro-cli-"))
        cls._saved_db = settings.app_db_path
        settings.app_db_path = cls._tmp / "gastrohealth.db"
        init_app_db(settings.app_db_path)
        cls.http = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        cls.http.close()
        settings.app_db_path = cls._saved_db
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def setUp(self) -> None:
        self.token_path = self._tmp / self._testMethodName / "token"
        patcher = mock.patch.object(
            cli,
            "ApiGatewayClient",
            side_effect=lambda tokens, base_url=None: ApiGatewayClient(tokens, http_client=self.http),
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def run_cli(self, *argv: str):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli.main(["--token-path", str(self.token_path), *argv])
        return code, out.getvalue(), err.getvalue()


class TestCli(CliTestCase):
    def test_status_without_token(self) -> None:
        code, out, _ = self.run_cli("status")
        self.assertEqual(code, 0)
        self.assertIn('"state": "unauthenticated"', out)
        self.assertIn("Not logged in", out)

    def test_feature_commands_need_login(self) -> None:
        code, _, err = self.run_cli("symptom", "bloating")
        self.assertEqual(code, 1)
        self.assertIn("Not logged in", err)

    def test_invalid_profile_rejected_locally(self) -> None:
        code, _, err = self.run_cli("profile", "--condition", "IBS", "--age", "200")
        self.assertEqual(code, 1)
        self.assertIn("invalid profile", err)

    def test_bad_login_reports_server_message(self) -> None:
        code, _, err = self.run_cli("login", "nobody@example.com", "--password", "whatever")
        self.assertEqual(code, 1)
        self.assertIn("Invalid email or password", err)
        self.assertFalse(self.token_path.exists())

    def test_onboarding_to_symptom_log(self) -> None:
        email = "cli@example.com"
        self.assertEqual(self.run_cli("register", email, "--password", "password123")[0], 0)

        code, out, _ = self.run_cli("login", email, "--password", "password123")
        self.assertEqual(code, 0)
        self.assertIn("Complete your profile", out)
        self.assertTrue(self.token_path.exists())

        code, _, err = self.run_cli("api-key", "AIza-cli")
        self.assertEqual(code, 1)
        self.assertIn("Complete your profile", err)

        code, out, _ = self.run_cli("profile", "--condition", "GERD", "--allergy", "nuts")
        self.assertEqual(code, 0)
        self.assertIn("Add your Gemini API key", out)

        self.assertEqual(self.run_cli("api-key", "AIza-cli")[0], 0)

        code, out, _ = self.run_cli("symptom", "heartburn", "--severity", "7", "--food", "coffee")
        self.assertEqual(code, 0)
        logged = json.loads(out)
        self.assertEqual(logged[-1]["symptom"], "heartburn")
        self.assertEqual(logged[-1]["foods"], ["coffee"])

        code, out, _ = self.run_cli("status")
        status = json.loads(out)
        self.assertEqual(status["state"], "active")
        self.assertEqual(status["symptomCount"], 1)

        code, _, err = self.run_cli("symptom", "heartburn", "--severity", "12")
        self.assertEqual(code, 1)
        self.assertIn("Severity must be between 1 and 10.", err)

        code, out, _ = self.run_cli("logout")
        self.assertEqual(code, 0)
        self.assertFalse(self.token_path.exists())

    def test_unwritable_token_path_reports_error(self) -> None:
        self.assertEqual(self.run_cli("register", "readonly@example.com", "--password", "password123")[0], 0)
        blocker = self._tmp / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        self.token_path = blocker / "token"
        code, _, err = self.run_cli("login", "readonly@example.com", "--password", "password123")
        self.assertEqual(code, 1)
        self.assertIn("Error: ", err)

    def test_stale_token_is_dropped(self) -> None:
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text("stale.token.value", encoding="utf-8")
        code, out, _ = self.run_cli("status")
        self.assertEqual(code, 0)
        self.assertIn('"state": "unauthenticated"', out)
        self.assertFalse(self.token_path.exists())


if __name__ == "__main__":
    unittest.main()
