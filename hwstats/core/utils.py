"""
hwstats Utilities
Common helpers for timing, subprocess management and value normalization.
"""

import os
import shutil
import subprocess
import time
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


def get_monotonic_ns() -> int:
    """Get monotonic clock time in nanoseconds."""
    return time.monotonic_ns()


def get_monotonic_s() -> float:
    """Get monotonic clock time in seconds."""
    return time.monotonic()


def ms_to_s(ms: float) -> float:
    """Convert milliseconds to seconds."""
    return ms / 1000.0


def tool_available(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None


def run_command(
    cmd: List[str],
    timeout: float = 10,
    env: Optional[Dict[str, str]] = None,
) -> str:
    """
    Run a command and return stdout.

    Failures raise instead of returning None so callers can report why a
    reading is missing.
    """
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env or os.environ.copy(),
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"Command timed out: {cmd}")
        raise
    except FileNotFoundError:
        logger.debug(f"Command not found: {cmd[0]}")
        raise

    if result.returncode != 0:
        logger.debug(f"Command failed: {cmd}\nstderr: {result.stderr}")
        raise subprocess.CalledProcessError(
            result.returncode, cmd, output=result.stdout, stderr=result.stderr
        )
    return result.stdout


def parse_number(text: str, default: float = 0.0) -> float:
    """Parse a float from tool output, tolerating units and blanks."""
    text = text.strip().rstrip("%").strip()
    if not text or text.upper() in ("N/A", "[N/A]"):
        return default
    try:
        return float(text.split()[0])
    except (ValueError, IndexError):
        return default


def read_proc_file(path: str) -> Optional[str]:
    """Read a /proc or /sys file, return None on failure."""
    try:
        with open(path, "r") as f:
            return f.read()
    except OSError:
        return None
