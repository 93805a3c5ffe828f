"""
AI Providers Package
Article Translator - the opaque translation backend

Usage:
    from ai_providers import create_provider, AIMessage
    from config.settings import settings

    provider = create_provider(settings)
    response = await provider.complete(
        messages=[AIMessage(role="user", content="<p>Bonjour</p>")],
        system_prompt="Translate to English."
    )
    print(response.content)
"""

from .base import (
    BaseAIProvider,
    AIProviderType,
    AIMessage,
    AIResponse,
    AIConfig,
    ProviderError,
    ProviderRateLimitError,
    ProviderConnectionError,
    ProviderTimeoutError,
    ProviderResponseError,
)

from .openai_provider import OpenAIProvider, create_provider

__all__ = [
    # Base classes
    "BaseAIProvider",
    "AIProviderType",
    "AIMessage",
    "AIResponse",
    "AIConfig",

    # Errors
    "ProviderError",
    "ProviderRateLimitError",
    "ProviderConnectionError",
    "ProviderTimeoutError",
    "ProviderResponseError",

    # Providers
    "OpenAIProvider",
    "create_provider",
]

__version__ = "1.0.0"
