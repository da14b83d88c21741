"""Chat endpoint tests."""

import pytest
from fastapi.testclient import TestClient

from src.features.chat.errors import DEFAULT_ERROR_MESSAGE, UNAVAILABLE_POINTER
from src.features.chat.fallback import FALLBACK_RESPONSES, FallbackCategory
from src.features.chat.service import (
    EMPTY_RESPONSE_TEXT,
    FALLBACK_ONLY_MESSAGE,
    PORTFOLIO_SYSTEM_PROMPT,
    QUOTA_FALLBACK_MESSAGE,
    get_chat_service,
)
from src.main import app

SKILLS_TEXT = FALLBACK_RESPONSES[FallbackCategory.SKILLS]


class TestFallbackOnlyMode:
    """No Gemini API key configured."""

    def test_skills_prompt_uses_fallback(self, client, gemini):
        response = client.post("/chat", json={"prompt": "what are your skills?"})
        assert response.status_code == 200
        assert response.json() == {
            "text": SKILLS_TEXT,
            "fallback": True,
            "message": FALLBACK_ONLY_MESSAGE,
        }
        assert gemini.calls == []

    def test_legacy_input_key(self, client):
        response = client.post("/chat", json={"input": "How can I contact you?"})
        assert response.status_code == 200
        assert response.json()["text"] == FALLBACK_RESPONSES[FallbackCategory.CONTACT]

    @pytest.mark.parametrize("path", ["/chat", "/chat/fallback"])
    @pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": "   "}, {"input": ""}])
    def test_missing_prompt_is_400(self, client, path, body):
        response = client.post(path, json=body)
        assert response.status_code == 400
        assert "error" in response.json()

    def test_non_json_body_is_400(self, client):
        response = client.post("/chat", content=b"not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert "error" in response.json()


class TestWithGemini:
    """Gemini API key configured."""

    @pytest.fixture
    def gemini(self, configured_gemini):
        return configured_gemini

    def test_success_returns_gemini_text(self, client, gemini):
        response = client.post("/chat", json={"prompt": "Tell me about yourself"})
        assert response.status_code == 200
        assert response.json() == {"text": "Hello from Gemini", "fallback": False}
        assert gemini.calls == [
            {"message": "Tell me about yourself", "system_prompt": PORTFOLIO_SYSTEM_PROMPT}
        ]

    def test_empty_gemini_text_uses_placeholder(self, client, gemini):
        gemini.reply = ""
        response = client.post("/chat", json={"prompt": "hi"})
        assert response.status_code == 200
        assert response.json()["text"] == EMPTY_RESPONSE_TEXT

    def test_quota_error_falls_back(self, client, gemini, api_error):
        gemini.error = api_error(429, "RESOURCE_EXHAUSTED")
        response = client.post("/chat", json={"prompt": "what are your skills?"})
        assert response.status_code == 200
        assert response.json() == {
            "text": SKILLS_TEXT,
            "fallback": True,
            "message": QUOTA_FALLBACK_MESSAGE,
        }

    def test_auth_error_is_500_without_fallback_text(self, client, gemini, api_error):
        gemini.error = api_error(401, "Unauthorized")
        response = client.post("/chat", json={"prompt": "what are your skills?"})
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "AI service configuration issue. Please contact support."
        assert "contact form" in body["fallback"]
        assert "text" not in body

    def test_other_error_is_500_with_raw_message(self, client, gemini):
        gemini.error = ConnectionError("upstream unreachable")
        response = client.post("/chat", json={"prompt": "hello"})
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "upstream unreachable"
        assert "temporarily unavailable" in body["fallback"]

    def test_fallback_endpoint_never_calls_gemini(self, client, gemini):
        response = client.post("/chat/fallback", json={"prompt": "Tell me about your projects"})
        assert response.status_code == 200
        assert response.json()["fallback"] is True
        assert response.json()["text"] == FALLBACK_RESPONSES[FallbackCategory.PROJECTS]
        assert gemini.calls == []

    def test_missing_prompt_does_not_call_gemini(self, client, gemini):
        response = client.post("/chat", json={"prompt": ""})
        assert response.status_code == 400
        assert gemini.calls == []


class TestRateLimiting:

    def test_21st_request_is_rejected(self, client):
        headers = {"X-Forwarded-For": "1.2.3.4"}
        for _ in range(20):
            response = client.post("/chat", json={"prompt": "hi"}, headers=headers)
            assert response.status_code == 200

        response = client.post("/chat", json={"prompt": "hi"}, headers=headers)
        assert response.status_code == 429
        assert response.json() == {"error": "Rate limit exceeded. Please try again later."}

    def test_endpoints_share_the_limit(self, client):
        headers = {"X-Forwarded-For": "5.6.7.8"}
        for _ in range(10):
            assert client.post("/chat", json={"prompt": "hi"}, headers=headers).status_code == 200
            assert client.post("/chat/fallback", json={"prompt": "hi"}, headers=headers).status_code == 200
        assert client.post("/chat/fallback", json={"prompt": "hi"}, headers=headers).status_code == 429

    def test_other_client_not_affected(self, client):
        for _ in range(21):
            client.post("/chat", json={"prompt": "hi"}, headers={"X-Forwarded-For": "1.2.3.4"})

        response = client.post("/chat", json={"prompt": "hi"}, headers={"X-Forwarded-For": "9.9.9.9"})
        assert response.status_code == 200


class TestErrorShape:
    """Every failure is rendered as JSON with an `error` key."""

    def test_wrong_method_is_405(self, client):
        response = client.get("/chat")
        assert response.status_code == 405
        assert "error" in response.json()
        assert "POST" in response.headers["allow"]

    def test_wrong_method_on_fallback_is_405(self, client):
        response = client.get("/chat/fallback")
        assert response.status_code == 405
        assert "error" in response.json()

    @pytest.mark.parametrize("body", [{"prompt": 123}, ["x"], "just a string"])
    def test_wrong_typed_body(self, client, body):
        response = client.post("/chat", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    def test_missing_body(self, client):
        response = client.post("/chat")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing prompt in request body"}

    def test_unexpected_error_is_json_500(self, client):
        class BrokenService:
            def fallback(self, prompt):
                raise RuntimeError("boom")

        app.dependency_overrides[get_chat_service] = lambda: BrokenService()
        with TestClient(app, raise_server_exceptions=False) as broken_client:
            response = broken_client.post("/chat/fallback", json={"prompt": "hi"})

        assert response.status_code == 500
        assert response.json() == {
            "error": DEFAULT_ERROR_MESSAGE,
            "fallback": UNAVAILABLE_POINTER,
        }
