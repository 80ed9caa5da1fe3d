"""
Pytest configuration and shared fixtures for Sabre tests.
"""

import io
import threading
import time
from collections.abc import Sequence
from pathlib import Path

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from sabre_core import Sabre
from sabre_core.compiler import CodeBlockGenerator, GenerationResult, LanguageProvider
from sabre_core.logging import LogConfig, SabreLogger
from sabre_core.types import LogFormat, LogLevel

# =============================================================================
# Helpers
# =============================================================================


class CountingGenerator:
    """Code block generator that counts generate() calls.

    An optional delay widens the window in which concurrent callers can
    race for the same key.
    """

    def __init__(self, delay: float = 0.0):
        self.inner = CodeBlockGenerator()
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def generate(
        self,
        content: str,
        file_name: str,
        model_type_name: str,
        namespace_imports: Sequence[str],
    ) -> GenerationResult:
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return self.inner.generate(content, file_name, model_type_name, namespace_imports)


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def sabre() -> Sabre:
    """Engine with default settings and its own cache."""
    return Sabre()


@pytest.fixture
def counting_generator() -> CountingGenerator:
    return CountingGenerator()


@pytest.fixture
def counting_sabre(counting_generator: CountingGenerator) -> Sabre:
    """Engine whose only provider counts generate+compile cycles."""
    provider = LanguageProvider(extensions=[".pyt"], generator=counting_generator)
    return Sabre(providers=[provider])


# =============================================================================
# Observability Fixtures
# =============================================================================


@pytest.fixture
def log_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def json_logger(log_output: io.StringIO) -> SabreLogger:
    """Logger writing JSON lines at DEBUG level into log_output."""
    return SabreLogger(LogConfig(level=LogLevel.DEBUG, format=LogFormat.JSON, output=log_output))


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter: InMemorySpanExporter):
    """SDK tracer exporting finished spans into span_exporter."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider.get_tracer("sabre_core.tests")


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "slow: Slow tests")
