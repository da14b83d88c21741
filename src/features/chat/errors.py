"""Chat error taxonomy and upstream error classification."""

CONTACT_FORM_POINTER = "Please use the contact form to reach out directly for any questions."
UNAVAILABLE_POINTER = (
    "AI chat is temporarily unavailable. Please use the contact form for direct communication."
)
DEFAULT_ERROR_MESSAGE = "An error occurred while processing your request."


class ChatError(Exception):
    """Base error rendered as a JSON body by the app exception handler."""

    status_code = 500

    def __init__(self, error: str, fallback: str | None = None):
        super().__init__(error)
        self.error = error
        self.fallback = fallback

    def to_dict(self) -> dict[str, str]:
        body = {"error": self.error}
        if self.fallback is not None:
            body["fallback"] = self.fallback
        return body


class InvalidInputError(ChatError):
    """Missing or empty prompt."""

    status_code = 400


class RateLimitedError(ChatError):
    """Local per-client limiter tripped."""

    status_code = 429

    def __init__(self, error: str = "Rate limit exceeded. Please try again later."):
        super().__init__(error)


class UpstreamQuotaExceededError(ChatError):
    """Gemini quota or rate limit hit. Recovered with a canned response."""

    status_code = 429


class UpstreamAuthError(ChatError):
    """Gemini rejected the API key or the service is misconfigured."""

    def __init__(self, error: str = "AI service configuration issue. Please contact support."):
        super().__init__(error, fallback=CONTACT_FORM_POINTER)


class UpstreamError(ChatError):
    """Any other Gemini failure (network, timeout, malformed response)."""

    def __init__(self, error: str = DEFAULT_ERROR_MESSAGE):
        super().__init__(error, fallback=UNAVAILABLE_POINTER)


def _status_of(exc: Exception) -> int | None:
    # google-genai APIError exposes `code`; other HTTP clients use status/status_code
    for attr in ("code", "status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_upstream_error(exc: Exception) -> ChatError:
    """
    Map a raw upstream exception onto the chat error taxonomy.

    Args:
        exc: Exception raised by the Gemini client

    Returns:
        UpstreamQuotaExceededError, UpstreamAuthError or UpstreamError
    """
    status = _status_of(exc)
    message = str(exc)
    lowered = message.lower()

    if status == 429 or "quota" in lowered or "rate limit" in lowered:
        return UpstreamQuotaExceededError(message or "Upstream quota exceeded")

    if status == 401 or "api key" in lowered:
        return UpstreamAuthError()

    if isinstance(exc, TimeoutError) and not message:
        message = "AI service did not respond in time."

    return UpstreamError(message or DEFAULT_ERROR_MESSAGE)
