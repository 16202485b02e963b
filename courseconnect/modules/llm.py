"""Model provider selection shared by every pydantic-ai agent.

Imports for the providers are kept lazy to avoid import-time errors when
credentials or optional provider extras are missing.
"""

from __future__ import annotations

from courseconnect.core.config import settings


class ModelNotConfigured(RuntimeError):
    """Raised when the selected provider has no API key."""


def _build_google_model(model_name: str | None = None):
    """Build Google Gemini model for pydantic-ai (lazy import)."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    if not settings.gemini_api_key:
        raise ModelNotConfigured(
            "Gemini API key not configured. Set GEMINI_API_KEY in your environment."
        )
    provider = GoogleProvider(api_key=settings.gemini_api_key)
    return GoogleModel(model_name or settings.google_model, provider=provider)


def _build_openrouter_model(model_name: str | None = None):
    """Build OpenRouter model via OpenAI-compatible provider (lazy import)."""
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    if not settings.openrouter_api_key:
        raise ModelNotConfigured(
            "OpenRouter API key not configured. Set OPENROUTER_API_KEY in your environment."
        )

    provider = OpenAIProvider(
        api_key=settings.openrouter_api_key,
        base_url="https://openrouter.ai/api/v1",
    )
    return OpenAIChatModel(model_name or settings.openrouter_model, provider=provider)


def build_model():
    provider = (settings.model_provider or "google").lower()
    if provider == "openrouter":
        return _build_openrouter_model()
    return _build_google_model()
