#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Translation Gateway for Article Translator.

Wraps the opaque translation provider for one HTML fragment at a time:
- Builds the "translate text only, keep the markup" instruction
- Cleans tag-name artifacts from the raw output
- Turns provider failures into TranslationFailure values

There are no retries here; pacing between chunks is the orchestrator's job.

Usage:
    from core.translator import TranslationGateway, TranslationFailure

    gateway = TranslationGateway(provider)
    outcome = await gateway.translate("<p>Bonjour</p>", part=1, total=3)
    if isinstance(outcome, TranslationFailure):
        print(outcome.kind, outcome.message)
"""

from dataclasses import dataclass
from typing import Optional, Union

from ai_providers.base import (
    AIMessage,
    BaseAIProvider,
    ProviderConnectionError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from config.constants import (
    TRANSLATION_MAX_TOKENS,
    TRANSLATION_TARGET_LANGUAGE,
    TRANSLATION_TEMPERATURE,
)

from .html_cleaner import clean_translated_html
from .prompts import build_system_prompt

from config.logging_config import get_logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class TranslationFailure:
    """
    A failed translation call.

    Attributes:
        message: Underlying error message.
        kind: rate_limit | network | timeout | malformed | provider
    """
    message: str
    kind: str = "provider"


class TranslationError(Exception):
    """Raised by translate_or_raise() when the call fails"""

    def __init__(self, failure: TranslationFailure):
        super().__init__(failure.message)
        self.failure = failure


def classify_failure(error: Exception) -> TranslationFailure:
    """Map a provider exception onto a TranslationFailure"""
    if isinstance(error, ProviderRateLimitError):
        kind = "rate_limit"
    elif isinstance(error, ProviderTimeoutError):
        kind = "timeout"
    elif isinstance(error, ProviderConnectionError):
        kind = "network"
    elif isinstance(error, ProviderResponseError):
        kind = "malformed"
    else:
        kind = "provider"
    return TranslationFailure(message=str(error) or error.__class__.__name__, kind=kind)


class TranslationGateway:
    """
    One-fragment translation through a provider.

    Attributes:
        provider: Provider implementing BaseAIProvider.complete().
        target_language: Language named in the instruction.
        max_tokens: Completion budget per call.
        temperature: Sampling temperature.
    """

    def __init__(
        self,
        provider: BaseAIProvider,
        target_language: str = TRANSLATION_TARGET_LANGUAGE,
        max_tokens: int = TRANSLATION_MAX_TOKENS,
        temperature: float = TRANSLATION_TEMPERATURE,
    ):
        self.provider = provider
        self.target_language = target_language
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def translate(
        self,
        fragment: str,
        part: Optional[int] = None,
        total: Optional[int] = None,
    ) -> Union[str, TranslationFailure]:
        """
        Translate one HTML fragment.

        Args:
            fragment: HTML to translate.
            part: 1-based fragment number (job path only).
            total: Fragment count (job path only).

        Returns:
            Cleaned translated HTML, or a TranslationFailure.
        """
        system_prompt = build_system_prompt(self.target_language, part, total)
        try:
            response = await self.provider.complete(
                messages=[AIMessage(role="user", content=fragment)],
                system_prompt=system_prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            # Any failure of the call stays local to this fragment
            failure = classify_failure(e)
            logger.warning(
                f"Translation call failed ({failure.kind}, {e.__class__.__name__}): {failure.message}"
            )
            return failure

        if not response.content or not response.content.strip():
            logger.warning("Translation call returned empty content")
            return TranslationFailure(message="Translator returned empty content", kind="malformed")

        return clean_translated_html(response.content)

    async def translate_or_raise(self, text: str) -> str:
        """Translate without chunk context; raise TranslationError on failure."""
        outcome = await self.translate(text)
        if isinstance(outcome, TranslationFailure):
            raise TranslationError(outcome)
        return outcome
