"""
Sampler Output Channel
Thread-safe FIFO of sampler events with optional push-style subscribers.
"""

import logging
import queue
import threading
from typing import Callable, Iterator, List, Optional

from hwstats.core.schema import SamplerEvent

logger = logging.getLogger(__name__)

EventCallback = Callable[[SamplerEvent], None]


class EventChannel:
    """
    Delivers Emit/Fail events from the sampler to its consumer.

    Events are queued in emission order for pull-style consumers
    (``get``/``drain``/iteration). Subscribers are called on the sampler's
    worker thread right after the event is queued; a subscriber that raises
    is logged and skipped. Pass ``buffered=False`` for callback-only use.
    """

    def __init__(self, maxsize: int = 0, buffered: bool = True):
        self.buffered = buffered
        self._queue: "queue.Queue[SamplerEvent]" = queue.Queue(maxsize=maxsize)
        self._subscribers: List[EventCallback] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: EventCallback) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: EventCallback) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def put(self, event: SamplerEvent) -> None:
        if self.buffered:
            try:
                self._queue.put_nowait(event)
            except queue.Full:
                # Keep the newest reading; consumers care about the present
                try:
                    dropped = self._queue.get_nowait()
                    logger.warning(f"Event channel full, dropped oldest {dropped.kind} event")
                except queue.Empty:
                    pass
                self._queue.put_nowait(event)

        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Event subscriber {callback!r} failed: {e}", exc_info=True)

    def get(self, timeout: Optional[float] = None) -> Optional[SamplerEvent]:
        """Next event, or None if nothing arrives within ``timeout``."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> List[SamplerEvent]:
        """Remove and return every queued event without waiting."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def empty(self) -> bool:
        return self._queue.empty()

    def __len__(self) -> int:
        return self._queue.qsize()

    def __iter__(self) -> Iterator[SamplerEvent]:
        """Block on events forever; stop iterating with ``break``."""
        while True:
            yield self._queue.get()
