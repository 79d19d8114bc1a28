# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import unittest
from unittest import mock

import httpx

from gastrohealth.config import settings
from gastrohealth.gemini.client import GeminiError, generate_json

_RealClient = httpx.Client


def _answer(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class GeminiClientTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder = lambda request: httpx.Response(200, json=_answer('{"analysis": "ok"}'))

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.responder(request)

        def factory(*args, **kwargs) -> httpx.Client:
            kwargs["transport"] = httpx.MockTransport(handler)
            return _RealClient(*args, **kwargs)

        patcher = mock.patch("gastrohealth.gemini.client.httpx.Client", side_effect=factory)
        patcher.start()
        self.addCleanup(patcher.stop)

    def call(self, **kwargs) -> dict:
        return generate_json(api_key="AIza-test", system_prompt="You are a dietitian.", prompt="Plan my week", **kwargs)


class TestRequestShape(GeminiClientTestCase):
    def test_payload_and_headers(self) -> None:
        self.assertEqual(self.call(), {"analysis": "ok"})
        request = self.requests[0]
        self.assertEqual(request.headers["x-goog-api-key"], "AIza-test")
        self.assertTrue(str(request.url).endswith(f"/models/{settings.gemini_model}:generateContent"))
        body = json.loads(request.content)
        self.assertEqual(body["systemInstruction"]["parts"][0]["text"], "You are a dietitian.")
        self.assertEqual(body["contents"][0]["parts"], [{"text": "Plan my week"}])
        self.assertEqual(body["generationConfig"]["responseMimeType"], "application/json")

    def test_image_is_sent_inline(self) -> None:
        self.call(image={"mimeType": "image/jpeg", "data": "AAAABBBBCCCCDDDD"})
        parts = json.loads(self.requests[0].content)["contents"][0]["parts"]
        self.assertEqual(parts[1], {"inlineData": {"mimeType": "image/jpeg", "data": "AAAABBBBCCCCDDDD"}})

    def test_multi_part_answer_is_joined(self) -> None:
        self.responder = lambda r: httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": '{"analysis": '}, {"text": '"joined"}'}]}}]}
        )
        self.assertEqual(self.call(), {"analysis": "joined"})


class TestFailures(GeminiClientTestCase):
    def test_google_error_body(self) -> None:
        self.responder = lambda r: httpx.Response(
            403, json={"error": {"code": 403, "message": "API key not valid.", "status": "PERMISSION_DENIED"}}
        )
        with self.assertRaises(GeminiError) as ctx:
            self.call()
        self.assertEqual(str(ctx.exception), "PERMISSION_DENIED (403): API key not valid.")

    def test_plain_error_body(self) -> None:
        self.responder = lambda r: httpx.Response(503, text="Service Unavailable")
        with self.assertRaisesRegex(GeminiError, "Gemini HTTP 503"):
            self.call()

    def test_transport_error(self) -> None:
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        self.responder = boom
        with self.assertRaisesRegex(GeminiError, "unreachable"):
            self.call()

    def test_blocked_prompt(self) -> None:
        self.responder = lambda r: httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})
        with self.assertRaisesRegex(GeminiError, "SAFETY"):
            self.call()

    def test_empty_and_unparseable_answers(self) -> None:
        self.responder = lambda r: httpx.Response(200, json={"candidates": []})
        with self.assertRaisesRegex(ValueError, "empty answer"):
            self.call()
        self.responder = lambda r: httpx.Response(200, json=_answer("Sorry, I can't do that."))
        with self.assertRaises(ValueError):
            self.call()


if __name__ == "__main__":
    unittest.main()
