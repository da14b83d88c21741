"""Gemini API client using the Google Gen AI SDK (API key auth)."""

import asyncio
import logging
from functools import lru_cache

from google import genai
from google.genai import types

from src.config import get_settings

logger = logging.getLogger(__name__)


class GeminiNotConfiguredError(RuntimeError):
    """Raised when a Gemini call is attempted without an API key."""

    pass


class GeminiClient:
    """Wrapper for Gemini text generation."""

    # Generation parameters for the portfolio assistant
    TEMPERATURE = 0.7
    TOP_P = 0.95
    MAX_OUTPUT_TOKENS = 500

    def __init__(
        self,
        api_key: str = "",
        model_id: str = "gemini-2.0-flash",
        timeout_seconds: float = 10.0,
    ):
        self._api_key = api_key.strip()
        self.model_id = model_id
        self.timeout_seconds = timeout_seconds
        self._client: genai.Client | None = None

    def __repr__(self) -> str:
        return f"GeminiClient(model_id={self.model_id!r}, configured={self.is_configured})"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @property
    def client(self) -> genai.Client:
        """Get or create the SDK client."""
        if not self.is_configured:
            raise GeminiNotConfiguredError("Gemini API key is not configured")
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate(self, message: str, system_prompt: str | None = None) -> str:
        """
        Generate a single-turn response.

        The system prompt is prepended to the user message as plain text,
        not sent as a separate system instruction.

        Args:
            message: User's message
            system_prompt: Context instructions placed before the message

        Returns:
            Model's response text (empty string if the model returned none)

        Raises:
            TimeoutError: if the call exceeds timeout_seconds
        """
        full_prompt = f"{system_prompt}\n\nUser: {message}" if system_prompt else message

        response = await asyncio.wait_for(
            self.client.aio.models.generate_content(
                model=self.model_id,
                contents=full_prompt,
                config=types.GenerateContentConfig(
                    temperature=self.TEMPERATURE,
                    top_p=self.TOP_P,
                    max_output_tokens=self.MAX_OUTPUT_TOKENS,
                ),
            ),
            timeout=self.timeout_seconds,
        )

        return response.text or ""


@lru_cache
def get_gemini_client() -> GeminiClient:
    """Get cached Gemini client instance (dependency injection)."""
    settings = get_settings()
    gemini = GeminiClient(
        api_key=settings.gemini_api_key,
        model_id=settings.gemini_model,
        timeout_seconds=settings.gemini_timeout_seconds,
    )
    if not gemini.is_configured:
        logger.warning("GEMINI_API_KEY not set; chat runs in fallback-only mode")
    return gemini
