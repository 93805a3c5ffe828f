#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI Web Server - REST API for Article Translator.

This module provides the REST API and WebSocket endpoints for the
article translation service, including:
- Article import (fetch a URL and extract readable HTML)
- Translation (direct for short texts, chunked background jobs otherwise)
- Job status polling
- Real-time progress updates via WebSocket
- Health check

Usage:
    # Start server
    uvicorn api.main:app --host 0.0.0.0 --port 5000

    # Or run directly
    python -m api.main

API Documentation:
    - OpenAPI docs: http://localhost:5000/docs
    - ReDoc: http://localhost:5000/redoc

Key Endpoints:
    GET /api/health - Health check
    GET /api/import?url=... - Import article content
    POST /api/translate - Translate HTML (direct or background job)
    GET /api/translation-status/{translation_id} - Poll job progress
    WS /ws - WebSocket for real-time updates

Configuration:
    Environment variables:
    - OPENAI_API_KEY: OpenAI API key
    - RATE_LIMIT: API rate limit for /api/translate (default: "60/minute")
    - CORS_ORIGINS: JSON list of allowed origins
"""

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from pathlib import Path
import sys
import time
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import settings
from core.notifier import ConnectionManager
from core.orchestrator import FastPathResult, TranslationOrchestrator, create_orchestrator
from core.scheduler import AsyncioScheduler
from core.scraper import (
    ArticleExtractionError,
    ArticleFetchError,
    InvalidUrlError,
    fetch_article,
)
from core.translator import TranslationError
from api.models import (
    DirectTranslationResponse,
    HealthResponse,
    ImportResponse,
    NotFoundResponse,
    TranslateRequest,
    TranslationJobResponse,
    TranslationStatusResponse,
)

from config.logging_config import get_logger
logger = get_logger(__name__)

API_VERSION = "1.0.0"


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Article Translator API",
    description="Scrape articles and translate them to English with live progress",
    version=API_VERSION,
)

# Rate limiting (configurable via RATE_LIMIT env var)
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit]
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# Global state
# =============================================================================

scheduler = AsyncioScheduler()
manager = ConnectionManager(heartbeat_interval=settings.websocket_heartbeat_seconds)
orchestrator = create_orchestrator(settings, notifier=manager, scheduler=scheduler)


def get_orchestrator() -> TranslationOrchestrator:
    return orchestrator


def get_notifier() -> ConnectionManager:
    return manager


@app.on_event("startup")
async def start_background_tasks():
    """Start the job expiry sweep and the WebSocket heartbeat."""
    orchestrator.start()
    scheduler.every(
        manager.heartbeat_interval,
        manager.check_heartbeats,
        name="websocket-heartbeat",
    )
    logger.info(f"Article Translator API started (version {API_VERSION})")


@app.on_event("shutdown")
async def stop_background_tasks():
    """Cancel running jobs and timers, release the provider client."""
    await orchestrator.stop()
    scheduler.cancel_all()
    await orchestrator.gateway.provider.close()
    logger.info("Article Translator API stopped")


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health", response_model=HealthResponse)
@app.get("/api/health", response_model=HealthResponse)
async def health_check(
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Basic health check endpoint"""
    return HealthResponse(
        version=API_VERSION,
        timestamp=time.time(),
        active_jobs=len(orchestrator.store),
        connected_clients=len(notifier),
    )


# =============================================================================
# Article Import
# =============================================================================

@app.get("/api/import", response_model=ImportResponse)
async def import_article(url: Optional[str] = None):
    """
    Fetch a page and return its readable article HTML.

    Errors:
        400 - URL missing or not http(s)
        404 - No readable content on the page
        502 - Page could not be downloaded
    """
    try:
        content = await fetch_article(url, timeout=settings.fetch_timeout_seconds)
    except InvalidUrlError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ArticleExtractionError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ArticleFetchError as e:
        raise HTTPException(status_code=502, detail=f"Failed to import article: {e}")

    return ImportResponse(content=content)


# =============================================================================
# Translation
# =============================================================================

@app.post("/api/translate")
@limiter.limit(settings.rate_limit)
async def translate(
    request: Request,
    body: TranslateRequest,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """
    Translate HTML to English.

    Texts shorter than the direct threshold are translated immediately and
    returned as ``{"translatedText"}``. Longer texts start a background job;
    the response carries the ``translationId`` to poll and progress is
    pushed to ``clientId`` over the WebSocket.
    """
    if not body.text or not body.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")

    try:
        outcome = await orchestrator.submit(body.text, client_id=body.client_id)
    except TranslationError as e:
        logger.error(f"Direct translation failed ({e.failure.kind}): {e}")
        raise HTTPException(status_code=502, detail=f"Translation failed: {e}")

    if isinstance(outcome, FastPathResult):
        return DirectTranslationResponse(translated_text=outcome.translated_text)

    return TranslationJobResponse(
        translation_id=outcome.translation_id,
        message="Translation started. Connect to the WebSocket or poll for progress.",
        total_chunks=outcome.total_chunks,
        poll_url=f"/api/translation-status/{outcome.translation_id}",
    )


@app.get(
    "/api/translation-status/{translation_id}",
    response_model=TranslationStatusResponse,
    responses={404: {"model": NotFoundResponse}},
)
async def translation_status(
    translation_id: str,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """Current progress of a translation job, or 404 if unknown/expired."""
    snapshot = orchestrator.store.snapshot(translation_id)
    if snapshot is None:
        return JSONResponse(status_code=404, content=NotFoundResponse().model_dump())
    return snapshot.to_dict()


# =============================================================================
# WebSocket Endpoint - Real-time Updates
# =============================================================================

@app.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    notifier: ConnectionManager = Depends(get_notifier),
):
    """
    WebSocket endpoint for translation progress.

    Sends a ``connected`` ack with the client id, answers ``ping`` frames
    and relays translation events for jobs submitted with that id.
    """
    client_id = await notifier.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            await notifier.handle_message(client_id, raw)
    except WebSocketDisconnect:
        pass
    finally:
        notifier.disconnect(client_id)


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Article Translator API Server...")
    logger.info(f"API Documentation: http://localhost:{settings.port}/docs")

    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")
