#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Translation Orchestrator - drives chunked translation jobs.

Short texts are translated in one call and returned directly. Longer texts
become a job: the document is chunked, a job record is stored, and a
background task translates the chunks strictly in order, writing each
cleaned fragment to its slot and pushing progress to the submitting client.

A job is cancelled only by deleting it from the store; the background task
checks for the job before every chunk and stops quietly once it is gone.

Usage:
    orchestrator = TranslationOrchestrator(store, gateway, notifier, scheduler)
    orchestrator.start()
    outcome = await orchestrator.submit(html, client_id="1700000000000-abcde")
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from config.constants import (
    CHUNK_DELAY_SECONDS,
    DIRECT_TRANSLATION_THRESHOLD,
    JOB_CLEANUP_DELAY_SECONDS,
    JOB_MAX_AGE_SECONDS,
    JOB_SWEEP_INTERVAL_SECONDS,
)

from .chunker import HtmlChunker
from .html_cleaner import join_chunks
from .ids import generate_translation_id
from .job_store import DuplicateJobError, Job, JobStore
from .notifier import ConnectionManager
from .scheduler import AsyncioScheduler
from .translator import TranslationFailure, TranslationGateway

from config.logging_config import get_logger
logger = get_logger(__name__)

# Attempts at finding an unused job id before giving up
MAX_ID_ATTEMPTS = 5


def error_placeholder(index: int, message: str) -> str:
    """Markup stored in place of a chunk whose translation failed"""
    return f'<div class="translation-error">Translation error in part {index + 1}: {message}</div>'


@dataclass(frozen=True)
class FastPathResult:
    """Short text translated synchronously"""
    translated_text: str


@dataclass(frozen=True)
class JobCreated:
    """Long text accepted as a background job"""
    translation_id: str
    total_chunks: int


class TranslationOrchestrator:
    """
    Coordinates chunking, translation, job state and notifications.

    Attributes:
        store: Job registry.
        gateway: Translation gateway for single fragments.
        notifier: Push channel to WebSocket clients.
        scheduler: Timer source for deletions and the periodic sweep.
        chunker: HTML chunker.
        chunk_delay: Pause between consecutive chunk calls (seconds).
        cleanup_delay: Delay before a completed job is deleted (seconds).
        max_age: Age after which the sweep deletes any job (seconds).
        sweep_interval: Period of the expiry sweep (seconds).
        direct_threshold: Texts shorter than this skip the job path.
    """

    def __init__(
        self,
        store: JobStore,
        gateway: TranslationGateway,
        notifier: ConnectionManager,
        scheduler: AsyncioScheduler,
        chunker: Optional[HtmlChunker] = None,
        chunk_delay: float = CHUNK_DELAY_SECONDS,
        cleanup_delay: float = JOB_CLEANUP_DELAY_SECONDS,
        max_age: float = JOB_MAX_AGE_SECONDS,
        sweep_interval: float = JOB_SWEEP_INTERVAL_SECONDS,
        direct_threshold: int = DIRECT_TRANSLATION_THRESHOLD,
        id_factory: Callable[[], str] = generate_translation_id,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.gateway = gateway
        self.notifier = notifier
        self.scheduler = scheduler
        self.chunker = chunker or HtmlChunker()
        self.chunk_delay = chunk_delay
        self.cleanup_delay = cleanup_delay
        self.max_age = max_age
        self.sweep_interval = sweep_interval
        self.direct_threshold = direct_threshold
        self._id_factory = id_factory
        self._sleep = sleep

        self._tasks: Dict[str, asyncio.Task] = {}
        self._sweep_task = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self):
        """Register the periodic expiry sweep."""
        if self._sweep_task is None:
            self._sweep_task = self.scheduler.every(
                self.sweep_interval, self.sweep, name="translation-job-sweep"
            )
            logger.info(
                f"Job sweep scheduled every {self.sweep_interval}s "
                f"(max age {self.max_age}s)"
            )

    async def stop(self):
        """Cancel the sweep and any job still being translated."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            self._sweep_task = None

        pending = list(self._tasks.values())
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info(f"Cancelled {len(pending)} running translation jobs")

    def sweep(self) -> int:
        """Delete jobs older than ``max_age``."""
        return self.store.sweep_expired(self.max_age)

    @property
    def active_jobs(self) -> List[str]:
        return list(self._tasks.keys())

    async def wait_for(self, job_id: str):
        """Wait for a job's background task to finish (no-op if none)."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    # =========================================================================
    # Submission
    # =========================================================================

    async def submit(
        self,
        text: str,
        client_id: Optional[str] = None,
    ) -> Union[FastPathResult, JobCreated]:
        """
        Translate ``text`` directly or start a background job.

        Raises:
            TranslationError: When the direct translation call fails.
        """
        if len(text) < self.direct_threshold:
            logger.info(f"Direct translation of {len(text)} characters")
            translated = await self.gateway.translate_or_raise(text)
            return FastPathResult(translated_text=translated)

        fragments = self.chunker.create_chunks(text)
        job = self._create_job(len(fragments))
        logger.info(
            f"Created translation job {job.id}: {len(text)} characters "
            f"in {len(fragments)} chunks"
        )

        task = asyncio.get_running_loop().create_task(
            self._process_job(job.id, fragments, client_id),
            name=f"translation-{job.id}",
        )
        self._tasks[job.id] = task
        task.add_done_callback(lambda _t, job_id=job.id: self._tasks.pop(job_id, None))

        return JobCreated(translation_id=job.id, total_chunks=len(fragments))

    def _create_job(self, chunk_count: int) -> Job:
        for _ in range(MAX_ID_ATTEMPTS):
            try:
                return self.store.create(self._id_factory(), chunk_count)
            except DuplicateJobError:
                logger.debug("Job id collision, generating a new one")
        raise DuplicateJobError(f"No free job id after {MAX_ID_ATTEMPTS} attempts")

    # =========================================================================
    # Background processing
    # =========================================================================

    async def _process_job(self, job_id: str, fragments: List[str], client_id: Optional[str]):
        """
        Translate every fragment in order. Never raises (except on cancel).
        """
        total = len(fragments)
        try:
            snapshot = self.store.snapshot(job_id)
            if snapshot is None:
                return
            await self.notifier.send_translation_start(client_id, snapshot)

            for index, fragment in enumerate(fragments):
                if not self.store.exists(job_id):
                    logger.info(f"Job {job_id} was deleted, stopping at chunk {index + 1}/{total}")
                    return

                outcome = await self.gateway.translate(fragment, part=index + 1, total=total)
                if isinstance(outcome, TranslationFailure):
                    logger.error(
                        f"Job {job_id}: chunk {index + 1}/{total} failed "
                        f"({outcome.kind}): {outcome.message}"
                    )
                    text = error_placeholder(index, outcome.message)
                else:
                    text = outcome

                job = self.store.update(job_id, lambda j, i=index, t=text: j.fill_chunk(i, t))
                if job is None:
                    logger.info(f"Job {job_id} was deleted during chunk {index + 1}/{total}")
                    return

                snapshot = self.store.snapshot(job_id)
                if snapshot is not None:
                    await self.notifier.send_translation_update(client_id, snapshot, index)

                if index < total - 1:
                    await self._sleep(self.chunk_delay)

            job = self.store.update(job_id, self._complete)
            if job is None:
                logger.info(f"Job {job_id} was deleted before completion")
                return
            logger.info(f"Translation job {job_id} completed ({total} chunks)")

            snapshot = self.store.snapshot(job_id)
            if snapshot is not None:
                await self.notifier.send_translation_complete(client_id, snapshot)

            self.scheduler.call_later(self.cleanup_delay, lambda: self.store.delete(job_id))

        except asyncio.CancelledError:
            logger.info(f"Translation job {job_id} cancelled")
            raise
        except Exception as e:
            logger.exception(f"Translation job {job_id} failed: {e}")
            self._fail(job_id, str(e))
            await self.notifier.send_error(client_id, str(e), translation_id=job_id)

    def _complete(self, job: Job):
        job.mark_completed(join_chunks(job.chunks), self.store.now())

    def _fail(self, job_id: str, message: str):
        def mark(job: Job):
            if not job.is_terminal:
                job.mark_failed(message, self.store.now())
        self.store.update(job_id, mark)


def create_orchestrator(
    settings,
    notifier: ConnectionManager,
    scheduler: AsyncioScheduler,
    gateway: Optional[TranslationGateway] = None,
    store: Optional[JobStore] = None,
) -> TranslationOrchestrator:
    """Wire an orchestrator from Settings."""
    if gateway is None:
        from ai_providers import create_provider
        gateway = TranslationGateway(
            create_provider(settings),
            target_language=settings.target_language,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )

    return TranslationOrchestrator(
        store=store or JobStore(),
        gateway=gateway,
        notifier=notifier,
        scheduler=scheduler,
        chunker=HtmlChunker(max_chunk_length=settings.max_chunk_length),
        chunk_delay=settings.chunk_delay_seconds,
        cleanup_delay=settings.job_cleanup_delay_seconds,
        max_age=settings.job_max_age_seconds,
        sweep_interval=settings.sweep_interval_seconds,
        direct_threshold=settings.direct_translation_threshold,
    )
