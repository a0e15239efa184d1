"""
CPU Telemetry Collector
Reads per-thread, per-core and total CPU utilization through psutil.
"""

import logging
import threading
import time
from typing import List, Optional

import numpy as np
import psutil

from hwstats.core.schema import CPUStats

logger = logging.getLogger(__name__)


def pair_core_usage(thread_usage: List[int], num_cores: int) -> List[int]:
    """
    Fold logical CPU usage into physical core usage.

    Sibling hyper-threads are assumed adjacent: each pair averages into one
    core while the pair index stays under the core count, leftover threads
    map one-to-one, and anything beyond the core count is ignored.
    """
    num_threads = len(thread_usage)
    core_usage: List[int] = []
    idx = 0

    while idx < num_threads:
        if idx + 1 < num_threads and idx // 2 < num_cores:
            core_usage.append((thread_usage[idx] + thread_usage[idx + 1]) // 2)
            idx += 2
        elif idx < num_cores:
            core_usage.append(thread_usage[idx])
            idx += 1
        else:
            break

    return core_usage


class CPUCollector:
    """
    Collects CPU utilization.

    psutil reports usage since the previous call, so the collector primes
    the counters on construction. A query issued less than ``min_window_s``
    after the previous one sleeps out the remainder; readings over a
    near-zero window are noise. Concurrent queries are serialized.
    """

    def __init__(self, num_cores: Optional[int] = None, min_window_s: float = 0.5):
        self.num_cores = num_cores or psutil.cpu_count(logical=False) or 1
        self.min_window_s = min_window_s
        self._lock = threading.Lock()
        psutil.cpu_percent(percpu=True)
        self._last_query = time.monotonic()
        logger.debug(f"CPU collector ready ({self.num_cores} physical cores)")

    def query(self) -> CPUStats:
        with self._lock:
            elapsed = time.monotonic() - self._last_query
            if elapsed < self.min_window_s:
                time.sleep(self.min_window_s - elapsed)

            raw = psutil.cpu_percent(percpu=True)
            self._last_query = time.monotonic()

        if not raw:
            raise RuntimeError("psutil returned no per-CPU usage")

        thread_usage = np.clip(np.asarray(raw, dtype=float), 0.0, 100.0).astype(int).tolist()
        core_usage = pair_core_usage(thread_usage, self.num_cores)
        total_usage = sum(core_usage) // len(core_usage) if core_usage else 0

        return CPUStats(
            thread_usage=tuple(thread_usage),
            core_usage=tuple(core_usage),
            total_usage=total_usage,
        )
