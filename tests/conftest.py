"""Shared pytest fixtures."""

import pytest
from fastapi.testclient import TestClient

from src.core.gemini import GeminiClient
from src.core.rate_limiter import SlidingWindowRateLimiter, get_rate_limiter
from src.features.chat.service import ChatService, get_chat_service
from src.main import app


class FakeGeminiClient(GeminiClient):
    """Gemini client that records prompts instead of calling the API."""

    def __init__(self, api_key: str = "", reply: str = "", error: Exception | None = None):
        super().__init__(api_key=api_key)
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, str | None]] = []

    async def generate(self, message: str, system_prompt: str | None = None) -> str:
        self.calls.append({"message": message, "system_prompt": system_prompt})
        if self.error is not None:
            raise self.error
        return self.reply


class FakeApiError(Exception):
    """Mimics google-genai APIError (`code` + message)."""

    def __init__(self, code: int, message: str):
        super().__init__(f"{code} {message}")
        self.code = code


@pytest.fixture
def gemini() -> FakeGeminiClient:
    """Unconfigured fake Gemini client (fallback-only mode)."""
    return FakeGeminiClient()


@pytest.fixture
def limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(window_ms=60_000, max_requests=20)


@pytest.fixture
def client(gemini, limiter):
    """Test client with fake Gemini and a fresh rate limiter."""
    app.dependency_overrides[get_chat_service] = lambda: ChatService(gemini=gemini)
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def configured_gemini() -> FakeGeminiClient:
    """Fake Gemini client with an API key set."""
    return FakeGeminiClient(api_key="test-key", reply="Hello from Gemini")


@pytest.fixture
def api_error():
    """Factory for upstream API errors: api_error(429, "Quota exceeded")."""
    return FakeApiError
