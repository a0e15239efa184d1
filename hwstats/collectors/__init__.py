"""
hwstats Collectors Module - CPU, GPU and thermal telemetry sources.
"""

from hwstats.collectors.cpu_sampler import CPUCollector
from hwstats.collectors.gpu_sampler import GPUCollector
from hwstats.collectors.thermal_sampler import ThermalCollector
from hwstats.collectors.source import (
    TelemetrySource,
    CallableSource,
    CachedQuery,
    HostTelemetrySource,
)
from hwstats.collectors.hardware_info import CPUInfo, GPUInfo, get_cpu_info, get_gpu_info

__all__ = [
    "CPUCollector",
    "GPUCollector",
    "ThermalCollector",
    "TelemetrySource",
    "CallableSource",
    "CachedQuery",
    "HostTelemetrySource",
    "CPUInfo",
    "GPUInfo",
    "get_cpu_info",
    "get_gpu_info",
]
