"""
hwstats Test Configuration and Fixtures
=======================================
Shared fixtures and configuration for all tests.

© 2026 Sudheer Ibrahim Daniel Devu. All Rights Reserved.
"""

import threading
import time
import pytest
from typing import Any, List, Optional

from hwstats.collectors.source import TelemetrySource
from hwstats.core.schema import CPUStats, GPUStats


# =============================================================================
# Fake telemetry source
# =============================================================================

class FakeSource(TelemetrySource):
    """
    Scriptable telemetry source.

    Records call times and optionally delays or fails each query.
    """

    def __init__(
        self,
        cpu: Any = None,
        gpu: Any = None,
        cpu_delay: float = 0.0,
        gpu_delay: float = 0.0,
        cpu_error: Optional[BaseException] = None,
        gpu_error: Optional[BaseException] = None,
    ):
        self.cpu = cpu if cpu is not None else CPUStats((10, 30), (20,), 20)
        self.gpu = gpu if gpu is not None else GPUStats(55, 61, 1200, "fake")
        self.cpu_delay = cpu_delay
        self.gpu_delay = gpu_delay
        self.cpu_error = cpu_error
        self.gpu_error = gpu_error

        self._lock = threading.Lock()
        self.cpu_calls: List[float] = []
        self.gpu_calls: List[float] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def _enter(self, calls: List[float]) -> None:
        with self._lock:
            calls.append(time.monotonic())
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)

    def _exit(self) -> None:
        with self._lock:
            self.in_flight -= 1

    def query_cpu(self) -> Any:
        self._enter(self.cpu_calls)
        try:
            if self.cpu_delay:
                time.sleep(self.cpu_delay)
            if self.cpu_error is not None:
                raise self.cpu_error
            return self.cpu
        finally:
            self._exit()

    def query_gpu(self) -> Any:
        self._enter(self.gpu_calls)
        try:
            if self.gpu_delay:
                time.sleep(self.gpu_delay)
            if self.gpu_error is not None:
                raise self.gpu_error
            return self.gpu
        finally:
            self._exit()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_source() -> FakeSource:
    """Source whose queries succeed instantly."""
    return FakeSource()


@pytest.fixture
def make_source():
    """Factory for FakeSource with custom delays or failures."""
    return FakeSource


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_config() -> dict:
    """Sample configuration dictionary."""
    return {
        "sampler": {
            "gpu_backend": "rocm",
            "gpu_device_id": 1,
            "cache_ttl_ms": 250,
            "query_timeout_s": 5,
            "log_level": "debug",
        }
    }


@pytest.fixture
def sampler_factory():
    """Build samplers and make sure every one is stopped after the test."""
    from hwstats.sampler.sampler import TelemetrySampler

    created = []

    def make(source, interval_ms: float = 100, **kwargs):
        sampler = TelemetrySampler(source, interval_ms=interval_ms, **kwargs)
        created.append(sampler)
        return sampler

    yield make

    for sampler in created:
        sampler.close(timeout=2.0)


# =============================================================================
# Test Markers
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow running")
    config.addinivalue_line("markers", "gpu: marks tests requiring a GPU telemetry tool")
    config.addinivalue_line("markers", "integration: marks integration tests")


# =============================================================================
# Skip Conditions
# =============================================================================

def has_gpu_tool() -> bool:
    """Check if any GPU telemetry tool is on PATH."""
    import shutil
    return any(shutil.which(t) for t in ("rocm-smi", "nvidia-smi", "ioreg"))


skip_no_gpu = pytest.mark.skipif(
    not has_gpu_tool(),
    reason="No GPU telemetry tool available"
)
