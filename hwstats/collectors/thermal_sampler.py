"""
CPU Thermal Collector
Reads CPU temperatures and fan speeds from psutil's hardware sensors.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import psutil

from hwstats.core.schema import ThermalStats

logger = logging.getLogger(__name__)

# Readings outside (TEMP_MIN_C, TEMP_MAX_C) are sensor glitches
TEMP_MIN_C = 0.0
TEMP_MAX_C = 150.0

# Package-level sensors, tried in order when no per-core reading exists.
# An empty label matches any entry of that chip.
CPU_TEMP_SENSORS: Tuple[Tuple[str, str], ...] = (
    ("coretemp", "Package id 0"),
    ("k10temp", "Tdie"),
    ("k10temp", "Tctl"),
    ("zenpower", "Tdie"),
    ("cpu_thermal", ""),
    ("acpitz", ""),
)

SensorMap = Dict[str, Sequence[Any]]


def valid_temp(value: Optional[float]) -> bool:
    return value is not None and TEMP_MIN_C < value < TEMP_MAX_C


def parse_core_temps(sensors: SensorMap) -> Dict[int, float]:
    """Valid per-core temperatures keyed by core index ("Core N" labels)."""
    temps: Dict[int, float] = {}
    for entries in sensors.values():
        for entry in entries:
            parts = (entry.label or "").split()
            if len(parts) != 2 or parts[0] != "Core" or not parts[1].isdigit():
                continue
            core = int(parts[1])
            if core not in temps and valid_temp(entry.current):
                temps[core] = float(entry.current)
    return temps


def parse_package_temp(sensors: SensorMap) -> Optional[float]:
    """First valid reading from CPU_TEMP_SENSORS, None if none is valid."""
    for chip, label in CPU_TEMP_SENSORS:
        for entry in sensors.get(chip, ()):
            if label and entry.label != label:
                continue
            if valid_temp(entry.current):
                return float(entry.current)
    return None


def parse_fan_speeds(fans: SensorMap) -> List[int]:
    """Fan speeds in RPM, in sensor order."""
    return [
        int(entry.current)
        for entries in fans.values()
        for entry in entries
        if entry.current is not None and entry.current >= 0
    ]


class ThermalCollector:
    """
    Collects CPU temperature and fan speeds.

    ``temp_c`` is the mean of the valid per-core readings. Without any it
    falls back to a package sensor, and ``core_temps`` then repeats that
    value once per physical core. psutil offers no temperature sensors on
    Windows or macOS, where the reading is empty rather than an error.
    """

    def __init__(self, num_cores: Optional[int] = None):
        self.num_cores = num_cores or psutil.cpu_count(logical=False) or 1

    def query(self) -> ThermalStats:
        sensors = self._read("sensors_temperatures")
        core_map = parse_core_temps(sensors)

        if core_map:
            temp = float(np.mean(list(core_map.values())))
            core_temps = [round(core_map[core]) for core in sorted(core_map)]
        else:
            temp = parse_package_temp(sensors)
            core_temps = [round(temp)] * self.num_cores if temp is not None else []

        return ThermalStats(
            temp_c=round(temp) if temp is not None else None,
            core_temps=tuple(core_temps),
            fan_rpm=tuple(parse_fan_speeds(self._read("sensors_fans"))),
        )

    @staticmethod
    def _read(name: str) -> SensorMap:
        reader = getattr(psutil, name, None)
        if reader is None:
            return {}
        return reader() or {}
