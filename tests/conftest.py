"""
Pytest configuration and shared fixtures for Article Translator tests.
"""
import os
import sys
import pytest
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock

# Keep the API rate limit out of the way and never read a developer's key
os.environ["RATE_LIMIT"] = "10000/minute"
os.environ["OPENAI_API_KEY"] = "test_openai_key"

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from ai_providers.base import AIConfig, AIProviderType, AIResponse, BaseAIProvider
from core.chunker import HtmlChunker
from core.job_store import JobStore
from core.notifier import ConnectionManager
from core.orchestrator import TranslationOrchestrator
from core.translator import TranslationGateway


# ============================================================================
# Test doubles
# ============================================================================

class FakeProvider(BaseAIProvider):
    """
    Provider double. ``responder(text)`` returns the translated text or an
    exception instance to raise. The default echoes the input.
    """

    def __init__(self, responder: Optional[Callable[[str], Any]] = None):
        super().__init__(AIConfig(api_key="test_openai_key", model="fake-model"))
        self.responder = responder or (lambda text: text)
        self.calls: List[Dict[str, Any]] = []

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.OPENAI

    async def initialize(self) -> None:
        pass

    async def complete(self, messages, system_prompt=None, **kwargs) -> AIResponse:
        text = messages[-1].content
        self.calls.append({"text": text, "system_prompt": system_prompt, **kwargs})
        result = self.responder(text)
        if isinstance(result, Exception):
            raise result
        return AIResponse(content=result, model="fake-model", provider=AIProviderType.OPENAI)


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeScheduler:
    """Records timers instead of running them; fire them with run_delayed()"""

    def __init__(self):
        self.delayed: List[tuple] = []
        self.periodic: List[tuple] = []
        self.cancelled = False

    def call_later(self, delay, callback):
        self.delayed.append((delay, callback))
        return Mock()

    def every(self, interval, callback, name="periodic"):
        self.periodic.append((interval, callback, name))
        return Mock()

    def run_delayed(self):
        pending, self.delayed = self.delayed, []
        for _delay, callback in pending:
            callback()

    def cancel_all(self):
        self.cancelled = True
        self.delayed.clear()
        self.periodic.clear()


class FakeWebSocket:
    """Collects sent frames; set ``fail`` to make sends raise"""

    def __init__(self, fail: bool = False):
        self.accepted = False
        self.closed = False
        self.fail = fail
        self.sent: List[Dict[str, Any]] = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("connection lost")
        self.sent.append(message)

    async def close(self, code: int = 1000):
        self.closed = True

    def of_type(self, message_type: str) -> List[Dict[str, Any]]:
        return [m for m in self.sent if m.get("type") == message_type]


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture
def make_websocket():
    """Factory for FakeWebSocket instances."""
    return FakeWebSocket


@pytest.fixture
def job_store(fake_clock):
    return JobStore(clock=fake_clock)


@pytest.fixture
def gateway(fake_provider):
    return TranslationGateway(fake_provider)


@pytest.fixture
def notifier():
    return ConnectionManager(heartbeat_interval=30)


@pytest.fixture
def orchestrator(job_store, gateway, notifier, fake_scheduler):
    """Orchestrator with no inter-chunk pause and controllable timers."""
    return TranslationOrchestrator(
        store=job_store,
        gateway=gateway,
        notifier=notifier,
        scheduler=fake_scheduler,
        chunker=HtmlChunker(max_chunk_length=10000),
        chunk_delay=0,
    )


@pytest.fixture
def paragraph_document():
    """Build HTML made of ``count`` paragraphs of exactly ``size`` characters."""
    def _build(count: int, size: int = 100) -> str:
        body = size - len("<p></p>")
        return "".join(
            f"<p>{(str(i % 10) * body)}</p>" for i in range(count)
        )
    return _build


# ============================================================================
# Session-level Setup
# ============================================================================

def pytest_configure(config):
    """Register markers."""
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests through the HTTP/WebSocket API")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Auto-add 'unit' marker to test files in tests/unit/
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        # Auto-add 'integration' marker to test files in tests/integration/
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
