"""
hwstats Core Module - Schemas, errors, configuration and utilities.
"""

from hwstats.core.schema import *
from hwstats.core.errors import (
    HwStatsError,
    QuerySourceError,
    TelemetryUnavailableError,
    ConfigError,
)
from hwstats.core.config import SamplerConfig

__all__ = [
    "HwStatsError",
    "QuerySourceError",
    "TelemetryUnavailableError",
    "ConfigError",
    "SamplerConfig",
]
