"""
hwstats Error Types
"""

from typing import Optional

from hwstats.core.schema import QueryKind


class HwStatsError(Exception):
    """Base class for all hwstats errors."""


class TelemetryUnavailableError(HwStatsError):
    """The host offers no way to read the requested metric."""


class ConfigError(HwStatsError):
    """Invalid sampler configuration."""


class QuerySourceError(HwStatsError):
    """
    A telemetry query failed or raised during a tick.

    Carries the failed query and the original exception. When both queries
    of a tick fail, the CPU failure is primary and the GPU failure is kept
    as ``secondary``.
    """

    def __init__(
        self,
        query: QueryKind,
        cause: BaseException,
        secondary: Optional["QuerySourceError"] = None,
    ):
        self.query = query
        self.cause = cause
        self.secondary = secondary
        super().__init__(f"{query.value} query failed: {cause!r}")

    def to_dict(self) -> dict:
        data = {
            "query": self.query.value,
            "error": type(self.cause).__name__,
            "message": str(self.cause),
        }
        if self.secondary is not None:
            data["secondary"] = self.secondary.to_dict()
        return data
