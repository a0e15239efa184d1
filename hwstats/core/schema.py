"""
hwstats Data Schema Definitions
Dataclasses for telemetry readings, combined samples and sampler events.
"""

from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, Optional, Tuple, Union
from enum import Enum


class QueryKind(Enum):
    """Which telemetry query produced a reading or a failure."""

    CPU = "cpu"
    GPU = "gpu"


class SamplerState(Enum):
    """Sampler lifecycle states."""

    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True)
class ThermalStats:
    """CPU temperature and fan reading. ``temp_c`` is None without sensors."""

    temp_c: Optional[int] = None
    core_temps: Tuple[int, ...] = ()
    fan_rpm: Tuple[int, ...] = ()


@dataclass(frozen=True)
class CPUStats:
    """
    CPU utilization reading, percentages in 0-100.

    Thermal fields stay empty unless the source also reads sensors.
    """

    thread_usage: Tuple[int, ...] = ()
    core_usage: Tuple[int, ...] = ()
    total_usage: int = 0
    temp_c: Optional[int] = None
    core_temps: Tuple[int, ...] = ()
    fan_rpm: Tuple[int, ...] = ()

    def with_thermal(self, thermal: ThermalStats) -> "CPUStats":
        return replace(
            self,
            temp_c=thermal.temp_c,
            core_temps=thermal.core_temps,
            fan_rpm=thermal.fan_rpm,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "thread_usage": list(self.thread_usage),
            "core_usage": list(self.core_usage),
            "total_usage": self.total_usage,
            "temp_c": self.temp_c,
            "core_temps": list(self.core_temps),
            "fan_rpm": list(self.fan_rpm),
        }


@dataclass(frozen=True)
class GPUStats:
    """GPU utilization reading."""

    usage_pct: int = 0
    temp_c: int = 0
    fan_speed: int = 0
    backend: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Sample:
    """Joined output of one successful tick."""

    cpu: Any
    gpu: Any
    timestamp: float
    t_ns: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "t_ns": self.t_ns,
            "cpu": _to_plain(self.cpu),
            "gpu": _to_plain(self.gpu),
        }


@dataclass(frozen=True)
class Emit:
    """Successful tick event."""

    sample: Sample
    kind: str = field(default="emit", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "sample": self.sample.to_dict()}


@dataclass(frozen=True)
class Fail:
    """Failed tick event; ``error`` is a QuerySourceError."""

    error: Any
    timestamp: float = 0.0
    kind: str = field(default="fail", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "timestamp": self.timestamp,
            "error": self.error.to_dict(),
        }


SamplerEvent = Union[Emit, Fail]


def _to_plain(value: Any) -> Any:
    """Readings are opaque to the sampler; serialize what we can."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value
