"""
Hardware Identification
Static CPU and GPU vendor/model information for display alongside samples.
"""

import logging
import platform
import subprocess
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Tuple

import psutil

from hwstats.core.utils import read_proc_file, run_command, tool_available

logger = logging.getLogger(__name__)

# Words that start the model part of a brand string, per vendor
INTEL_MODEL_STARTS = ("Xeon", "Celeron", "Pentium")
AMD_MODEL_STARTS = ("Ryzen", "EPYC", "Athlon")


@dataclass
class CPUInfo:
    """CPU identification."""

    vendor: str
    model: str
    cores: int
    threads: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GPUInfo:
    """GPU identification."""

    vendor: str
    model: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _collect_model(parts: List[str], is_start) -> str:
    """Collect brand words from the first model word up to '@' or 'CPU'."""
    model_parts = []
    found = False
    for part in parts:
        if is_start(part):
            found = True
        if found:
            if "@" in part or part == "CPU":
                break
            model_parts.append(part)
    return " ".join(model_parts) if model_parts else "Unknown"


def parse_cpu_brand(brand: str) -> Tuple[str, str]:
    """
    Split a CPU brand string into (vendor, model).

    "Intel(R) Core(TM) i7-9750H CPU @ 2.60GHz" -> ("Intel", "i7-9750H")
    "Apple M2 Pro" -> ("Apple", "M2")
    """
    parts = brand.split(" ")

    if "Intel" in brand:
        model = _collect_model(
            parts, lambda p: p.startswith("i") or p in INTEL_MODEL_STARTS
        )
        return "Intel", model

    if "AMD" in brand:
        return "AMD", _collect_model(parts, lambda p: p in AMD_MODEL_STARTS)

    if "Apple" in brand:
        m_pos = brand.find("M")
        if m_pos < 0:
            return "Apple", "Unknown"
        return "Apple", brand[m_pos:].split(" ")[0]

    return "Unknown", "Unknown"


def _is_discrete(model: str) -> bool:
    return (
        "GeForce" in model
        or "NVIDIA" in model
        or ("Radeon" in model and "Intel" not in model and "Integrated" not in model)
        or ("AMD" in model and "AMD Radeon Pro" not in model)
    )


def classify_gpu_models(models: List[str]) -> GPUInfo:
    """
    Pick the GPU to report from a list of model names.

    The first discrete GPU wins; otherwise the first GPU listed is reported
    and marked as integrated.
    """
    model = ""
    discrete = False
    for candidate in models:
        if _is_discrete(candidate):
            model = candidate
            discrete = True
            break
        if not model:
            model = candidate

    if not model:
        model = "Unknown GPU"

    if "AMD" in model or "Radeon" in model:
        vendor = "AMD"
    elif "NVIDIA" in model or "GeForce" in model:
        vendor = "NVIDIA"
    elif "Intel" in model:
        vendor = "Intel"
    elif "Apple" in model:
        vendor = "Apple"
    else:
        vendor = "Unknown"

    if not discrete and vendor != "Unknown":
        model = f"Integrated {model}"

    return GPUInfo(vendor=vendor, model=model)


def _read_cpu_brand() -> str:
    if platform.system() == "Darwin":
        try:
            return run_command(["sysctl", "-n", "machdep.cpu.brand_string"]).strip()
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"sysctl brand string failed: {e}")
            return ""

    content = read_proc_file("/proc/cpuinfo")
    if content:
        for line in content.split("\n"):
            if line.startswith("model name"):
                return line.split(":", 1)[1].strip()
    return platform.processor()


def _read_gpu_models() -> List[str]:
    models: List[str] = []
    try:
        if platform.system() == "Darwin":
            output = run_command(["system_profiler", "SPDisplaysDataType"])
            for line in output.split("\n"):
                line = line.strip()
                if line.startswith("Chipset Model:"):
                    models.append(line.replace("Chipset Model:", "").strip())
        elif tool_available("nvidia-smi"):
            output = run_command(["nvidia-smi", "--query-gpu=name", "--format=csv,noheader"])
            models.extend(line.strip() for line in output.split("\n") if line.strip())
        elif tool_available("rocm-smi"):
            output = run_command(["rocm-smi", "--showproductname"])
            for line in output.split("\n"):
                if "Card series" in line:
                    models.append(line.split(":")[-1].strip())
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"GPU model lookup failed: {e}")
    return models


def get_cpu_info() -> CPUInfo:
    """Identify the host CPU."""
    vendor, model = parse_cpu_brand(_read_cpu_brand())
    return CPUInfo(
        vendor=vendor,
        model=model,
        cores=psutil.cpu_count(logical=False) or 1,
        threads=psutil.cpu_count(logical=True) or 1,
    )


def get_gpu_info() -> GPUInfo:
    """Identify the host GPU."""
    return classify_gpu_models(_read_gpu_models())
