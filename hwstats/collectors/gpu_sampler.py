"""
GPU Telemetry Collector
Reads GPU utilization, temperature and fan speed from rocm-smi, nvidia-smi
or macOS ioreg.
"""

import json
import logging
from typing import Callable, Dict, Optional

from hwstats.core.errors import TelemetryUnavailableError
from hwstats.core.schema import GPUStats
from hwstats.core.utils import parse_number, run_command, tool_available

logger = logging.getLogger(__name__)

# Backend name -> executable it needs
BACKEND_TOOLS: Dict[str, str] = {
    "rocm": "rocm-smi",
    "nvidia": "nvidia-smi",
    "ioreg": "ioreg",
}


def parse_rocm_json(output: str, device_id: int) -> GPUStats:
    """Parse `rocm-smi --showuse --showtemp --showfan --json` output."""
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ValueError(f"rocm-smi returned invalid JSON: {e}") from e

    gpu_key = f"card{device_id}"
    if gpu_key not in data:
        raise ValueError(f"rocm-smi reported no {gpu_key}")
    gpu_data = data[gpu_key]

    temp = 0.0
    for key, value in gpu_data.items():
        if key.startswith("Temperature") and "edge" in key:
            temp = parse_number(str(value))
            break
    else:
        for key, value in gpu_data.items():
            if key.startswith("Temperature"):
                temp = parse_number(str(value))
                break

    fan = parse_number(str(gpu_data.get("Fan RPM", 0)))
    if not fan:
        fan = parse_number(str(gpu_data.get("Fan speed (%)", 0)))

    return GPUStats(
        usage_pct=round(parse_number(str(gpu_data.get("GPU use (%)", 0)))),
        temp_c=round(temp),
        fan_speed=round(fan),
        backend="rocm",
    )


def parse_nvidia_csv(output: str, device_id: int) -> GPUStats:
    """Parse `nvidia-smi --query-gpu=... --format=csv,noheader,nounits` output."""
    lines = [line for line in output.strip().split("\n") if line.strip()]
    if not lines:
        raise ValueError("nvidia-smi returned no devices")

    # -i narrows the query to one device; without it pick by position
    line = lines[device_id] if len(lines) > device_id else lines[0]
    fields = [f.strip() for f in line.split(",")]
    if len(fields) < 3:
        raise ValueError(f"Unexpected nvidia-smi output: {line!r}")

    return GPUStats(
        usage_pct=round(parse_number(fields[0])),
        temp_c=round(parse_number(fields[1])),
        fan_speed=round(parse_number(fields[2])),
        backend="nvidia",
    )


def parse_ioreg(output: str) -> GPUStats:
    """
    Parse the PerformanceStatistics dictionaries of `ioreg -l`.

    Entries look like ``"GPU Activity(%)"=12``; later entries win when a
    key appears more than once.
    """
    usage = temp = fan = 0.0
    found = False

    for line in output.split("\n"):
        if "PerformanceStatistics" not in line or "{" not in line:
            continue
        body = line.split("{", 1)[1].replace("|", ",").replace("}", "")
        for item in body.split(","):
            if "=" not in item:
                continue
            key, value = item.split("=", 1)
            if "GPU Activity" in key:
                usage = parse_number(value)
                found = True
            elif "Temp" in key:
                temp = parse_number(value)
            elif "Fan" in key:
                fan = parse_number(value)

    if not found:
        raise ValueError("ioreg reported no GPU Activity")

    return GPUStats(
        usage_pct=round(usage),
        temp_c=round(temp),
        fan_speed=round(fan),
        backend="ioreg",
    )


class GPUCollector:
    """
    Collects GPU telemetry from the first available vendor tool.

    With backend="auto" the tool is resolved lazily on the first query and
    then reused.
    """

    def __init__(self, backend: str = "auto", device_id: int = 0, timeout_s: float = 10.0):
        self.backend = backend
        self.device_id = device_id
        self.timeout_s = timeout_s
        self._resolved: Optional[str] = None

        self._queries: Dict[str, Callable[[], GPUStats]] = {
            "rocm": self._query_rocm,
            "nvidia": self._query_nvidia,
            "ioreg": self._query_ioreg,
        }

    @property
    def resolved_backend(self) -> Optional[str]:
        return self._resolved

    def _resolve_backend(self) -> str:
        if self._resolved:
            return self._resolved

        if self.backend != "auto":
            if not tool_available(BACKEND_TOOLS[self.backend]):
                raise TelemetryUnavailableError(
                    f"{BACKEND_TOOLS[self.backend]} not found for gpu backend '{self.backend}'"
                )
            self._resolved = self.backend
        else:
            for name, tool in BACKEND_TOOLS.items():
                if tool_available(tool):
                    self._resolved = name
                    break
            else:
                raise TelemetryUnavailableError(
                    f"No GPU telemetry tool found (tried {', '.join(BACKEND_TOOLS.values())})"
                )

        logger.info(f"GPU telemetry backend: {self._resolved}")
        return self._resolved

    def query(self) -> GPUStats:
        return self._queries[self._resolve_backend()]()

    def _query_rocm(self) -> GPUStats:
        output = run_command(
            [
                "rocm-smi",
                "-d",
                str(self.device_id),
                "--showuse",
                "--showtemp",
                "--showfan",
                "--json",
            ],
            timeout=self.timeout_s,
        )
        return parse_rocm_json(output, self.device_id)

    def _query_nvidia(self) -> GPUStats:
        output = run_command(
            [
                "nvidia-smi",
                "-i",
                str(self.device_id),
                "--query-gpu=utilization.gpu,temperature.gpu,fan.speed",
                "--format=csv,noheader,nounits",
            ],
            timeout=self.timeout_s,
        )
        # Output holds only the selected device
        return parse_nvidia_csv(output, 0)

    def _query_ioreg(self) -> GPUStats:
        output = run_command(["ioreg", "-l"], timeout=self.timeout_s)
        return parse_ioreg(output)
