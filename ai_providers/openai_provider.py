"""
OpenAI Provider - chat completion models
Article Translator - the opaque translation call
"""

from typing import Optional, List, Dict, Any

import openai
from openai import AsyncOpenAI

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


class OpenAIProvider(BaseAIProvider):
    """
    OpenAI GPT Provider

    Maps every SDK failure onto the ProviderError family so callers never
    depend on openai exception types.
    """

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.OPENAI

    async def initialize(self) -> None:
        """Initialize OpenAI client"""
        self._client = AsyncOpenAI(
            api_key=self.config.api_key,
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
        )

    def _convert_messages(
        self,
        messages: List[AIMessage],
        system_prompt: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Convert AIMessage to OpenAI format"""
        converted = []
        if system_prompt:
            converted.append({"role": "system", "content": system_prompt})
        for msg in messages:
            converted.append({"role": msg.role, "content": msg.content})
        return converted

    async def complete(
        self,
        messages: List[AIMessage],
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """Generate completion using OpenAI"""
        if not self._client:
            await self.initialize()

        api_messages = self._convert_messages(messages, system_prompt)

        try:
            response = await self._client.chat.completions.create(
                model=kwargs.get("model", self.config.model),
                max_tokens=kwargs.get("max_tokens", self.config.max_tokens),
                temperature=kwargs.get("temperature", self.config.temperature),
                messages=api_messages
            )
        except openai.RateLimitError as e:
            raise ProviderRateLimitError(str(e)) from e
        except openai.APITimeoutError as e:
            raise ProviderTimeoutError(str(e)) from e
        except openai.APIConnectionError as e:
            raise ProviderConnectionError(str(e)) from e
        except openai.APIStatusError as e:
            raise ProviderResponseError(f"HTTP {e.status_code}: {e.message}") from e
        except openai.OpenAIError as e:
            raise ProviderError(str(e)) from e

        if not response.choices:
            raise ProviderResponseError("OpenAI returned no choices")

        choice = response.choices[0]

        return AIResponse(
            content=choice.message.content or "",
            model=response.model,
            provider=self.provider_type,
            usage={
                "input_tokens": response.usage.prompt_tokens,
                "output_tokens": response.usage.completion_tokens
            } if response.usage else None,
            finish_reason=choice.finish_reason,
            raw_response=response
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._client = None


def create_provider(settings) -> BaseAIProvider:
    """
    Build the configured provider from Settings.

    The API key is read lazily by the SDK on the first call, so a server can
    start (and serve health checks) without one.
    """
    if settings.provider != AIProviderType.OPENAI.value:
        raise ValueError(f"Unsupported provider: {settings.provider}")

    config = AIConfig(
        api_key=settings.openai_api_key,
        model=settings.model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        timeout=settings.request_timeout,
        max_retries=settings.provider_max_retries,
        base_url=settings.openai_base_url,
    )
    return OpenAIProvider(config)
