"""Keyword-matched canned responses used when Gemini is unavailable."""

from enum import Enum


class FallbackCategory(str, Enum):
    """Topic a prompt is classified into."""

    SKILLS = "skills"
    PROJECTS = "projects"
    EXPERIENCE = "experience"
    CONTACT = "contact"
    DEFAULT = "default"


# Checked in order, first match wins
KEYWORDS: list[tuple[FallbackCategory, tuple[str, ...]]] = [
    (FallbackCategory.SKILLS, ("skill", "technology", "tech stack")),
    (FallbackCategory.PROJECTS, ("project", "work", "portfolio")),
    (FallbackCategory.EXPERIENCE, ("experience", "background", "career")),
    (FallbackCategory.CONTACT, ("contact", "hire", "email")),
]

FALLBACK_RESPONSES: dict[FallbackCategory, str] = {
    FallbackCategory.SKILLS: (
        "I specialize in full-stack development with React, Blazor WebAssembly, "
        "ASP.NET Core, C#, and modern web technologies. I have experience with "
        "databases like SQLite and SQL Server, plus authentication systems like Auth0."
    ),
    FallbackCategory.PROJECTS: (
        "I've built several key projects: an e-commerce platform with ASP.NET Core, "
        "an authentication system with Auth0 and React, and a Blazor WebAssembly SPA. "
        "Each showcases different aspects of modern web development."
    ),
    FallbackCategory.EXPERIENCE: (
        "I'm a Full Stack Developer focused on the .NET ecosystem, with expertise in "
        "building secure, scalable web applications and strong experience in "
        "authentication systems and responsive design."
    ),
    FallbackCategory.CONTACT: (
        "Thanks for your interest! Please use the contact form on this website to "
        "reach out directly. I'd love to discuss potential opportunities or answer "
        "any specific questions about my work."
    ),
    FallbackCategory.DEFAULT: (
        "Thanks for visiting my portfolio! I'm a full-stack developer specializing "
        "in .NET technologies. Feel free to explore my projects or use the contact "
        "form to get in touch."
    ),
}


def classify(prompt: str) -> FallbackCategory:
    """Classify prompt by case-insensitive keyword substring match."""
    text = prompt.lower()
    for category, keywords in KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return FallbackCategory.DEFAULT


def respond(category: FallbackCategory) -> str:
    return FALLBACK_RESPONSES[category]


def get_fallback_response(prompt: str) -> str:
    """Get canned response text for a prompt."""
    return respond(classify(prompt))
