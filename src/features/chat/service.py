"""Chat service: Gemini with keyword fallback."""

import logging
import time

from src.core.gemini import GeminiClient, get_gemini_client

from .errors import (
    InvalidInputError,
    UpstreamQuotaExceededError,
    classify_upstream_error,
)
from .fallback import get_fallback_response
from .models import ChatResponse

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_TEXT = "Sorry, no response text."
FALLBACK_ONLY_MESSAGE = "Basic chat response (AI service unavailable)"
QUOTA_FALLBACK_MESSAGE = "Response generated using basic chat (AI temporarily unavailable)"

PORTFOLIO_SYSTEM_PROMPT = """You are an AI chat support assistant for a portfolio website. Your primary role is to help visitors learn about the developer's skills, projects, and experience, but you can also provide general assistance and engage in friendly conversation.

PORTFOLIO INFORMATION:
SKILLS:
- Frontend: React, Blazor WebAssembly, HTML5, CSS3, JavaScript, TailwindCSS
- Backend: ASP.NET Core, C#, Entity Framework Core
- Databases: SQLite, Microsoft SQL Server
- Authentication: Auth0, ASP.NET Core Identity
- Tools: Git, VS Code, Visual Studio, Azure

PROJECTS:
1. E-commerce Platform
   - Built with ASP.NET Core MVC
   - Integrates with international platforms for domestic delivery
   - Features: secure auth, database management, payment systems
   - Tech: C#, .NET, Entity Framework Core, TailwindCSS

2. Authentication & Authorization System
   - Implements Auth0 with OAuth, JWT, MFA
   - Role-based access control (RBAC)
   - React frontend with TailwindCSS
   - SQLite database integration

3. Blazor Web App
   - Single Page Application using Blazor WebAssembly
   - .NET Core backend with API integration
   - Responsive UI with TailwindCSS
   - Client-side SQLite storage

EXPERIENCE:
- Full Stack Developer with focus on .NET ecosystem
- Expertise in building secure, scalable web applications
- Strong background in authentication and authorization systems
- Experience with modern frontend frameworks and responsive design

CHAT SUPPORT GUIDELINES:
1. Prioritize questions about the portfolio, skills, projects, and experience
2. For portfolio-related questions, provide detailed, technical information
3. For general questions, be helpful and engaging while steering back to portfolio topics when appropriate
4. Be friendly, professional, and conversational
5. If someone asks about hiring or collaboration, encourage them to reach out via contact information
6. Keep responses concise but informative
7. Use a warm, approachable tone that reflects well on the developer"""


def require_prompt(prompt: str | None) -> str:
    """Reject missing, empty and whitespace-only prompts."""
    if not prompt or not prompt.strip():
        raise InvalidInputError("Missing prompt in request body")
    return prompt


class ChatService:
    """Service for portfolio chat."""

    def __init__(self, gemini: GeminiClient):
        self.gemini = gemini

    def fallback(self, prompt: str, message: str = FALLBACK_ONLY_MESSAGE) -> ChatResponse:
        """Answer with the canned keyword-matched response. Never calls Gemini."""
        prompt = require_prompt(prompt)
        return ChatResponse(
            text=get_fallback_response(prompt),
            fallback=True,
            message=message,
        )

    async def chat(self, prompt: str) -> ChatResponse:
        """
        Answer a visitor prompt with Gemini, degrading to canned responses.

        Args:
            prompt: Visitor's question

        Returns:
            Chat response; `fallback` is set when the canned responder answered

        Raises:
            InvalidInputError: prompt missing or blank
            UpstreamAuthError: Gemini rejected the credentials
            UpstreamError: any other Gemini failure
        """
        prompt = require_prompt(prompt)

        if not self.gemini.is_configured:
            return self.fallback(prompt)

        start_time = time.time()
        try:
            text = await self.gemini.generate(
                message=prompt,
                system_prompt=PORTFOLIO_SYSTEM_PROMPT,
            )
        except Exception as e:
            error = classify_upstream_error(e)
            if isinstance(error, UpstreamQuotaExceededError):
                logger.warning("Gemini quota exceeded, using fallback: %s", e)
                return self.fallback(prompt, message=QUOTA_FALLBACK_MESSAGE)
            logger.exception("Gemini API error (%s)", type(error).__name__)
            raise error from e

        response_time_ms = int((time.time() - start_time) * 1000)
        logger.info("Gemini responded in %d ms", response_time_ms)

        return ChatResponse(text=text or EMPTY_RESPONSE_TEXT, fallback=False)


def get_chat_service() -> ChatService:
    """Get chat service instance."""
    return ChatService(gemini=get_gemini_client())
