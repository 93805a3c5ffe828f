"""
Core translation engine: chunking, job state, orchestration and delivery.
"""

from .chunker import HtmlChunker, chunk_html
from .html_cleaner import clean_translated_html, join_chunks
from .job_store import (
    DuplicateJobError,
    Job,
    JobSnapshot,
    JobStateError,
    JobStatus,
    JobStore,
    JobStoreError,
    build_snapshot,
)
from .notifier import ConnectionManager
from .orchestrator import (
    FastPathResult,
    JobCreated,
    TranslationOrchestrator,
    create_orchestrator,
)
from .scheduler import AsyncioScheduler
from .translator import TranslationError, TranslationFailure, TranslationGateway

__all__ = [
    "HtmlChunker",
    "chunk_html",
    "clean_translated_html",
    "join_chunks",
    "DuplicateJobError",
    "Job",
    "JobSnapshot",
    "JobStateError",
    "JobStatus",
    "JobStore",
    "JobStoreError",
    "build_snapshot",
    "ConnectionManager",
    "FastPathResult",
    "JobCreated",
    "TranslationOrchestrator",
    "create_orchestrator",
    "AsyncioScheduler",
    "TranslationError",
    "TranslationFailure",
    "TranslationGateway",
]
