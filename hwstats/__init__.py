"""
hwstats - Hardware Telemetry Sampler

Copyright (c) 2026 Sudheer Ibrahim Daniel Devu. All rights reserved.

Background sampling of CPU and GPU utilization with explicit start/stop
control and a single event stream of combined readings.

Licensed under the MIT License. See LICENSE file for details.
"""

__version__ = "1.0.0"
__author__ = "Sudheer Ibrahim Daniel Devu"
__copyright__ = "Copyright (c) 2026 Sudheer Ibrahim Daniel Devu"

from hwstats.core.schema import (
    CPUStats,
    GPUStats,
    ThermalStats,
    Sample,
    Emit,
    Fail,
    SamplerEvent,
    SamplerState,
    QueryKind,
)
from hwstats.core.errors import (
    HwStatsError,
    QuerySourceError,
    TelemetryUnavailableError,
    ConfigError,
)
from hwstats.core.config import SamplerConfig

# Telemetry sources
from hwstats.collectors import (
    TelemetrySource,
    CallableSource,
    CachedQuery,
    HostTelemetrySource,
    CPUCollector,
    GPUCollector,
    ThermalCollector,
    get_cpu_info,
    get_gpu_info,
)

# Sampler
from hwstats.sampler import (
    TelemetrySampler,
    EventChannel,
    Ticker,
    DEFAULT_INTERVAL_MS,
)

__all__ = [
    # Schema
    "CPUStats",
    "GPUStats",
    "ThermalStats",
    "Sample",
    "Emit",
    "Fail",
    "SamplerEvent",
    "SamplerState",
    "QueryKind",
    # Errors
    "HwStatsError",
    "QuerySourceError",
    "TelemetryUnavailableError",
    "ConfigError",
    # Config
    "SamplerConfig",
    # Sources
    "TelemetrySource",
    "CallableSource",
    "CachedQuery",
    "HostTelemetrySource",
    "CPUCollector",
    "GPUCollector",
    "ThermalCollector",
    "get_cpu_info",
    "get_gpu_info",
    # Sampler
    "TelemetrySampler",
    "EventChannel",
    "Ticker",
    "DEFAULT_INTERVAL_MS",
    # Version
    "__version__",
]
