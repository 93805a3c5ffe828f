#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Job Store - In-memory registry of chunked translation jobs

Jobs live only for the lifetime of the process. A job is written by exactly
one background task; the status endpoint and the push channel only read it,
through the same JobSnapshot projection.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from config.logging_config import get_logger
logger = get_logger(__name__)


class JobStatus(str, Enum):
    """Job status states"""
    PROCESSING = "processing"    # Chunks are being translated
    COMPLETED = "completed"      # All chunks filled, result joined
    ERROR = "error"              # Aborted by an unexpected failure


class JobStoreError(Exception):
    """Base exception for job store errors"""
    pass


class DuplicateJobError(JobStoreError):
    """A live job already uses this id"""
    pass


class JobStateError(JobStoreError):
    """A mutation would break a job invariant"""
    pass


@dataclass
class Job:
    """A chunked translation job"""

    id: str
    chunks: List[Optional[str]]
    created_at: float
    status: JobStatus = JobStatus.PROCESSING
    result: Optional[str] = None
    error: Optional[str] = None
    completed_at: Optional[float] = None

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)

    @property
    def completed_count(self) -> int:
        return sum(1 for chunk in self.chunks if chunk is not None)

    @property
    def is_terminal(self) -> bool:
        return self.status != JobStatus.PROCESSING

    def fill_chunk(self, index: int, text: str):
        """Store the translated text for one slot (each slot fills once)"""
        if self.is_terminal:
            raise JobStateError(f"Job {self.id} is {self.status.value}")
        if text is None:
            raise JobStateError(f"Chunk {index} of job {self.id} cannot be emptied")
        if not 0 <= index < len(self.chunks):
            raise JobStateError(f"Chunk index {index} out of range for job {self.id}")
        if self.chunks[index] is not None:
            raise JobStateError(f"Chunk {index} of job {self.id} is already filled")
        self.chunks[index] = text

    def mark_completed(self, result: str, now: float):
        """Mark job as completed"""
        if self.is_terminal:
            raise JobStateError(f"Job {self.id} is already {self.status.value}")
        missing = [i for i, chunk in enumerate(self.chunks) if chunk is None]
        if missing:
            raise JobStateError(f"Job {self.id} still has untranslated chunks: {missing}")
        self.result = result
        self.status = JobStatus.COMPLETED
        self.completed_at = now

    def mark_failed(self, error: str, now: float):
        """Mark job as failed"""
        if self.is_terminal:
            raise JobStateError(f"Job {self.id} is already {self.status.value}")
        self.error = error
        self.status = JobStatus.ERROR
        self.completed_at = now


@dataclass(frozen=True)
class JobSnapshot:
    """Point-in-time view of a job, shared by polling and push delivery"""

    id: str
    status: JobStatus
    completed: int
    total: int
    completed_chunks: Tuple[Tuple[int, str], ...] = field(default_factory=tuple)
    translated_text: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire format used by the status endpoint"""
        return {
            "id": self.id,
            "status": self.status.value,
            "progress": {
                "completed": self.completed,
                "total": self.total,
            },
            "completedChunks": [
                {"index": index, "text": text}
                for index, text in self.completed_chunks
            ],
            "translatedText": self.translated_text,
            "error": self.error,
        }


def build_snapshot(job: Job) -> JobSnapshot:
    """Project a job onto its snapshot (the only projection of job state)"""
    filled = tuple(
        (index, text) for index, text in enumerate(job.chunks) if text is not None
    )
    return JobSnapshot(
        id=job.id,
        status=job.status,
        completed=len(filled),
        total=job.total_chunks,
        completed_chunks=filled,
        translated_text=job.result if job.status == JobStatus.COMPLETED else None,
        error=job.error if job.status == JobStatus.ERROR else None,
    )


class JobStore:
    """
    Thread-safe in-memory job registry.

    Args:
        clock: Returns the current time in seconds (injectable for tests).
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def create(self, job_id: str, chunk_count: int) -> Job:
        """
        Register a new job with ``chunk_count`` empty slots.

        Raises:
            DuplicateJobError: If ``job_id`` is already live.
            ValueError: If ``chunk_count`` is not positive.
        """
        if chunk_count < 1:
            raise ValueError("chunk_count must be at least 1")
        with self._lock:
            if job_id in self._jobs:
                raise DuplicateJobError(f"Job already exists: {job_id}")
            job = Job(id=job_id, chunks=[None] * chunk_count, created_at=self._clock())
            self._jobs[job_id] = job
        logger.debug(f"Created job {job_id} with {chunk_count} chunks")
        return job

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def exists(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs

    def update(self, job_id: str, mutator: Callable[[Job], Any]) -> Optional[Job]:
        """
        Apply ``mutator`` to a live job.

        Returns:
            The mutated job, or None if the job was deleted (not an error).
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            mutator(job)
            return job

    def delete(self, job_id: str) -> bool:
        """Remove a job; returns False if it was already gone."""
        with self._lock:
            removed = self._jobs.pop(job_id, None) is not None
        if removed:
            logger.debug(f"Deleted job {job_id}")
        return removed

    def sweep_expired(self, max_age: float, now: Optional[float] = None) -> int:
        """
        Delete every job created more than ``max_age`` seconds ago.

        Returns:
            Number of jobs removed.
        """
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                job_id for job_id, job in self._jobs.items()
                if now - job.created_at > max_age
            ]
            for job_id in expired:
                del self._jobs[job_id]
        if expired:
            logger.info(f"Cleaned up {len(expired)} old translation jobs")
        return len(expired)

    def snapshot(self, job_id: str) -> Optional[JobSnapshot]:
        with self._lock:
            job = self._jobs.get(job_id)
            return build_snapshot(job) if job is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
