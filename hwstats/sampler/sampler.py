"""
Telemetry Sampler
Polls CPU and GPU telemetry on a fixed interval in a background thread and
reports each tick as an Emit or Fail event.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional

from hwstats.collectors.source import HostTelemetrySource, TelemetrySource
from hwstats.core.config import SamplerConfig
from hwstats.core.errors import QuerySourceError
from hwstats.core.schema import Emit, Fail, QueryKind, Sample, SamplerEvent, SamplerState
from hwstats.core.utils import get_monotonic_ns, get_monotonic_s
from hwstats.sampler.channel import EventChannel
from hwstats.sampler.ticker import Ticker

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 2000


class TelemetrySampler:
    """
    Interval-driven CPU/GPU poller with start/stop control.

    Each run owns one worker thread that waits for the ticker, dispatches
    both queries concurrently, joins them and emits one event. Ticks never
    overlap and the first tick fires one full interval after ``start()``.

    ``stop()`` returns immediately. A tick already in flight finishes its
    queries but its result is dropped, so nothing reaches the channel once
    ``stop()`` has returned. A ``start()`` issued meanwhile holds its first
    tick until that stale tick has finished.
    """

    def __init__(
        self,
        source: Optional[TelemetrySource] = None,
        interval_ms: float = DEFAULT_INTERVAL_MS,
        channel: Optional[EventChannel] = None,
        config: Optional[SamplerConfig] = None,
        clock: Callable[[], float] = get_monotonic_s,
        wall_clock: Callable[[], float] = time.time,
    ):
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")

        self.source = source if source is not None else HostTelemetrySource(config)
        self.interval_ms = interval_ms
        self.channel = channel if channel is not None else EventChannel()
        self.clock = clock
        self.wall_clock = wall_clock

        # Guards state, generation, ticker and worker list
        self._cond = threading.Condition()
        self._state = SamplerState.STOPPED
        self._generation = 0
        self._ticker: Optional[Ticker] = None
        self._workers: List[threading.Thread] = []

        # Held from dispatch through emission; shared by every run so a
        # restarted worker waits out a stale worker's in-flight tick
        self._tick_lock = threading.Lock()

        # Counters
        self._ticks = 0
        self._emitted = 0
        self._failed = 0
        self._dropped = 0
        self._skipped = 0

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SamplerState.RUNNING

    @property
    def next_deadline(self) -> Optional[float]:
        """Clock time of the pending tick, None while stopped."""
        with self._cond:
            return self._ticker.deadline if self._ticker else None

    def start(self) -> None:
        """Start polling. No-op if already running."""
        with self._cond:
            if self._state is SamplerState.RUNNING:
                return

            self._state = SamplerState.RUNNING
            self._generation += 1
            generation = self._generation

            ticker = Ticker(self.interval_ms, clock=self.clock)
            ticker.reset()
            self._ticker = ticker

            worker = threading.Thread(
                target=self._run,
                args=(generation, ticker),
                name=f"hwstats-sampler-{generation}",
                daemon=True,
            )
            self._workers = [w for w in self._workers if w.is_alive()]
            self._workers.append(worker)
            worker.start()

        logger.debug(f"Telemetry sampler started (interval {self.interval_ms}ms)")

    def stop(self) -> None:
        """Stop polling. No-op if already stopped. Does not wait for a tick."""
        with self._cond:
            if self._state is SamplerState.STOPPED:
                return

            self._state = SamplerState.STOPPED
            self._generation += 1
            if self._ticker is not None:
                self._skipped += self._ticker.skipped
            self._ticker = None
            self._cond.notify_all()

        logger.debug(f"Telemetry sampler stopped after {self._ticks} ticks")

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for stopped workers to finish their in-flight tick.

        Returns True if no worker thread is left alive. Must not be called
        from an event subscriber.
        """
        with self._cond:
            workers = list(self._workers)

        deadline = None if timeout is None else get_monotonic_s() + timeout
        for worker in workers:
            remaining = None if deadline is None else max(0.0, deadline - get_monotonic_s())
            worker.join(remaining)

        return not any(w.is_alive() for w in workers)

    def close(self, timeout: Optional[float] = None) -> None:
        self.stop()
        self.join(timeout)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close(timeout=self.interval_ms / 1000.0)
        return False

    def tick(self) -> SamplerEvent:
        """
        Run one tick on the calling thread and return its event.

        The event is returned, not published to the channel, and the
        running schedule is not affected. Waits for a scheduled tick in
        flight, so it must not be called from an event subscriber.
        """
        with self._tick_lock:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="hwstats-query") as pool:
                return self._collect(pool)

    def get_summary(self) -> Dict[str, Any]:
        """Counters since construction."""
        with self._cond:
            skipped = self._skipped + (self._ticker.skipped if self._ticker else 0)
            return {
                "state": self._state.value,
                "interval_ms": self.interval_ms,
                "ticks": self._ticks,
                "emitted": self._emitted,
                "failed": self._failed,
                "dropped": self._dropped,
                "skipped": skipped,
            }

    def _is_current(self, generation: int) -> bool:
        return self._generation == generation

    def _run(self, generation: int, ticker: Ticker) -> None:
        """Worker loop for one start/stop run."""
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="hwstats-query") as pool:
            while True:
                with self._cond:
                    while self._is_current(generation):
                        remaining = ticker.remaining()
                        if remaining <= 0:
                            break
                        self._cond.wait(remaining)
                    if not self._is_current(generation):
                        return

                with self._tick_lock:
                    with self._cond:
                        if not self._is_current(generation):
                            return

                    event = self._collect(pool)

                    with self._cond:
                        self._ticks += 1
                        if not self._is_current(generation):
                            self._dropped += 1
                            logger.debug(f"Dropped {event.kind} event of tick finished after stop")
                            return

                        if isinstance(event, Emit):
                            self._emitted += 1
                        else:
                            self._failed += 1

                        # Publishing under the lock keeps stop() and emission mutually exclusive
                        self.channel.put(event)
                        ticker.advance()

    def _collect(self, pool: ThreadPoolExecutor) -> SamplerEvent:
        """Fan out both queries, join them and map the outcome to an event."""
        t_ns = get_monotonic_ns()

        cpu_future = pool.submit(self.source.query_cpu)
        gpu_future = pool.submit(self.source.query_gpu)
        wait([cpu_future, gpu_future])

        cpu_error = cpu_future.exception()
        gpu_error = gpu_future.exception()

        if cpu_error is None and gpu_error is None:
            sample = Sample(
                cpu=cpu_future.result(),
                gpu=gpu_future.result(),
                timestamp=self.wall_clock(),
                t_ns=t_ns,
            )
            return Emit(sample)

        gpu_failure = QuerySourceError(QueryKind.GPU, gpu_error) if gpu_error else None
        if cpu_error is not None:
            error = QuerySourceError(QueryKind.CPU, cpu_error, secondary=gpu_failure)
        else:
            error = gpu_failure

        logger.debug(f"Telemetry tick failed: {error}")
        return Fail(error, timestamp=self.wall_clock())
