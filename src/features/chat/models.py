"""Pydantic models for chat feature."""

from pydantic import BaseModel


class ChatRequest(BaseModel):
    """Chat request model. `input` is accepted for older widget builds."""

    prompt: str | None = None
    input: str | None = None

    @property
    def text(self) -> str:
        return self.prompt or self.input or ""


class ChatResponse(BaseModel):
    """Chat response model."""

    text: str
    fallback: bool | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """Error body returned for 4xx/5xx responses."""

    error: str
    fallback: str | None = None
