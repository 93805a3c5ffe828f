#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings

from .constants import (
    API_RATE_LIMIT,
    CHUNK_DELAY_SECONDS,
    DEFAULT_CORS_ORIGINS,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DIRECT_TRANSLATION_THRESHOLD,
    FETCH_TIMEOUT_SECONDS,
    JOB_CLEANUP_DELAY_SECONDS,
    JOB_MAX_AGE_SECONDS,
    JOB_SWEEP_INTERVAL_SECONDS,
    MAX_CHUNK_LENGTH,
    TRANSLATION_MAX_TOKENS,
    TRANSLATION_MODEL,
    TRANSLATION_TARGET_LANGUAGE,
    TRANSLATION_TEMPERATURE,
    TRANSLATION_TIMEOUT_SECONDS,
    WEBSOCKET_HEARTBEAT,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== API Keys ==========
    openai_api_key: str = ""
    openai_base_url: Optional[str] = None

    # ========== Provider & Model ==========
    provider: str = "openai"
    model: str = TRANSLATION_MODEL
    temperature: float = TRANSLATION_TEMPERATURE
    max_tokens: int = TRANSLATION_MAX_TOKENS
    request_timeout: float = TRANSLATION_TIMEOUT_SECONDS
    # Retry policy belongs to the chunk pacing, not to the SDK
    provider_max_retries: int = 0
    target_language: str = TRANSLATION_TARGET_LANGUAGE

    # ========== Chunking & Pacing ==========
    max_chunk_length: int = MAX_CHUNK_LENGTH
    direct_translation_threshold: int = DIRECT_TRANSLATION_THRESHOLD
    chunk_delay_seconds: float = CHUNK_DELAY_SECONDS

    # ========== Job Lifecycle ==========
    job_cleanup_delay_seconds: float = JOB_CLEANUP_DELAY_SECONDS
    job_max_age_seconds: float = JOB_MAX_AGE_SECONDS
    sweep_interval_seconds: float = JOB_SWEEP_INTERVAL_SECONDS

    # ========== Push Channel ==========
    websocket_heartbeat_seconds: float = WEBSOCKET_HEARTBEAT

    # ========== Scraping ==========
    fetch_timeout_seconds: float = FETCH_TIMEOUT_SECONDS

    # ========== Server ==========
    rate_limit: str = API_RATE_LIMIT
    cors_origins: List[str] = list(DEFAULT_CORS_ORIGINS)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model


# Global settings instance
settings = Settings()
