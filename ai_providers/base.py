"""
Base AI Provider - Abstract Interface
Article Translator - the opaque text-in, text-out translation call
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any
from dataclasses import dataclass
from enum import Enum


class AIProviderType(Enum):
    """Supported AI Providers"""
    OPENAI = "openai"


@dataclass
class AIMessage:
    """Unified message format across providers"""
    role: str  # "user", "assistant", "system"
    content: str


@dataclass
class AIResponse:
    """Unified response format"""
    content: str
    model: str
    provider: AIProviderType
    usage: Optional[Dict[str, int]] = None  # tokens used
    finish_reason: Optional[str] = None
    raw_response: Optional[Any] = None


@dataclass
class AIConfig:
    """Provider configuration"""
    api_key: str
    model: str
    max_tokens: int = 4000
    temperature: float = 0.3
    timeout: float = 60.0
    max_retries: int = 0
    base_url: Optional[str] = None  # For custom endpoints


class ProviderError(Exception):
    """Base exception for provider call failures"""
    pass


class ProviderRateLimitError(ProviderError):
    """Provider rejected the call because of rate limits or quota"""
    pass


class ProviderConnectionError(ProviderError):
    """Provider could not be reached"""
    pass


class ProviderTimeoutError(ProviderError):
    """Provider did not answer within the configured timeout"""
    pass


class ProviderResponseError(ProviderError):
    """Provider answered with an error status or an unusable body"""
    pass


class BaseAIProvider(ABC):
    """
    Abstract base class for AI providers.
    All providers must implement these methods and raise ProviderError
    subclasses for every failure of the remote call.
    """

    def __init__(self, config: AIConfig):
        self.config = config
        self._client = None

    @property
    @abstractmethod
    def provider_type(self) -> AIProviderType:
        """Return the provider type"""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the client connection"""
        pass

    @abstractmethod
    async def complete(
        self,
        messages: List[AIMessage],
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Generate a completion from the AI model.

        Args:
            messages: List of conversation messages
            system_prompt: Optional system prompt
            **kwargs: Provider-specific parameters

        Returns:
            AIResponse with the generated content

        Raises:
            ProviderError: On any failure of the remote call
        """
        pass

    async def close(self) -> None:
        """Release the underlying client, if any"""
        self._client = None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} model={self.config.model}>"
