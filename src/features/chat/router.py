"""Chat API endpoints."""

from fastapi import APIRouter, Depends, Request

from src.core.rate_limiter import (
    SlidingWindowRateLimiter,
    get_client_identity,
    get_rate_limiter,
)

from .errors import RateLimitedError
from .models import ChatRequest, ChatResponse, ErrorResponse
from .service import ChatService, get_chat_service

router = APIRouter(
    prefix="/chat",
    tags=["chat"],
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def enforce_rate_limit(
    request: Request,
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
) -> str:
    """Admit the caller or raise RateLimitedError. Returns the client identity."""
    identity = get_client_identity(request)
    if not limiter.admit(identity):
        raise RateLimitedError()
    return identity


@router.post("", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(
    body: ChatRequest,
    identity: str = Depends(enforce_rate_limit),
    service: ChatService = Depends(get_chat_service),
):
    """
    Send a prompt and get a response.

    Uses Gemini when configured. Falls back to canned keyword-matched
    answers when Gemini is unconfigured or out of quota.
    """
    return await service.chat(body.text)


@router.post("/fallback", response_model=ChatResponse, response_model_exclude_none=True)
async def chat_fallback(
    body: ChatRequest,
    identity: str = Depends(enforce_rate_limit),
    service: ChatService = Depends(get_chat_service),
):
    """Canned keyword-matched answer only. Gemini is never called."""
    return service.fallback(body.text)
