"""
Telemetry Sources
The two-query capability the sampler polls, plus the default host source.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from hwstats.collectors.cpu_sampler import CPUCollector
from hwstats.collectors.gpu_sampler import GPUCollector
from hwstats.collectors.thermal_sampler import ThermalCollector
from hwstats.core.config import SamplerConfig
from hwstats.core.schema import CPUStats, GPUStats
from hwstats.core.utils import get_monotonic_s, ms_to_s

logger = logging.getLogger(__name__)


class TelemetrySource(ABC):
    """
    Provides CPU and GPU readings.

    Both queries may block and may raise; the sampler calls them from
    worker threads and turns any exception into a failed tick.
    """

    @abstractmethod
    def query_cpu(self) -> Any:
        """Return the current CPU reading."""

    @abstractmethod
    def query_gpu(self) -> Any:
        """Return the current GPU reading."""


class CallableSource(TelemetrySource):
    """Adapts two plain callables to the TelemetrySource interface."""

    def __init__(self, cpu: Callable[[], Any], gpu: Callable[[], Any]):
        self._cpu = cpu
        self._gpu = gpu

    def query_cpu(self) -> Any:
        return self._cpu()

    def query_gpu(self) -> Any:
        return self._gpu()


class CachedQuery:
    """
    Wraps a query with a short-lived result cache.

    Repeated calls inside ``ttl_ms`` return the previous reading without
    touching the hardware. Exceptions are never cached.
    """

    def __init__(
        self,
        query: Callable[[], Any],
        ttl_ms: float = 500,
        clock: Callable[[], float] = get_monotonic_s,
    ):
        self.query = query
        self.ttl_s = ms_to_s(ttl_ms)
        self.clock = clock

        self._lock = threading.Lock()
        self._value: Any = None
        self._updated_at: Optional[float] = None

    def __call__(self) -> Any:
        with self._lock:
            now = self.clock()
            if self._updated_at is not None and now - self._updated_at < self.ttl_s:
                return self._value

            value = self.query()
            self._value = value
            self._updated_at = self.clock()
            return value

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._updated_at = None


class HostTelemetrySource(TelemetrySource):
    """
    Default source backed by psutil and the installed GPU vendor tool.

    The CPU reading carries temperature and fan data when
    ``config.read_thermal`` is set. A failing sensor read is logged and
    leaves those fields empty; it never fails the CPU query.
    """

    def __init__(
        self,
        config: Optional[SamplerConfig] = None,
        cpu_collector: Optional[CPUCollector] = None,
        gpu_collector: Optional[GPUCollector] = None,
        thermal_collector: Optional[ThermalCollector] = None,
    ):
        self.config = config if config is not None else SamplerConfig()
        self.cpu_collector = cpu_collector if cpu_collector is not None else CPUCollector()
        self.gpu_collector = gpu_collector if gpu_collector is not None else GPUCollector(
            backend=self.config.gpu_backend,
            device_id=self.config.gpu_device_id,
            timeout_s=self.config.query_timeout_s,
        )

        ttl_ms = self.config.cache_ttl_ms
        self._cpu = CachedQuery(self.cpu_collector.query, ttl_ms=ttl_ms)
        self._gpu = CachedQuery(self.gpu_collector.query, ttl_ms=ttl_ms)

        self._thermal: Optional[CachedQuery] = None
        if self.config.read_thermal:
            if thermal_collector is None:
                thermal_collector = ThermalCollector(num_cores=self.cpu_collector.num_cores)
            self._thermal = CachedQuery(thermal_collector.query, ttl_ms=ttl_ms)

    def query_cpu(self) -> CPUStats:
        cpu = self._cpu()
        if self._thermal is None:
            return cpu

        try:
            thermal = self._thermal()
        except Exception as e:
            logger.debug(f"Thermal sensor read failed: {e}")
            return cpu
        return cpu.with_thermal(thermal)

    def query_gpu(self) -> GPUStats:
        return self._gpu()
