"""
Stopwatch used to time games.

Works like a handheld chronograph: start, stop and reset buttons, and a
reading that freezes when stopped. While running, an optional ticker
thread samples it regularly so displays can follow in real time.
"""
import logging
import threading
import time
from typing import Callable, Optional

from .events import ChangeEvent, EventBus


logger = logging.getLogger(__name__)


EVENT_TIMESTAMP = "timestamp"

# Roughly one display refresh (24 updates per second).
TICK_SECONDS = 0.042

_UNITS = (
    (365 * 86_400_000, "{}y"),
    (7 * 86_400_000, "{}w"),
    (86_400_000, "{}d"),
    (3_600_000, "{}h"),
    (60_000, "{}m"),
    (1_000, "{}s"),
    (1, "{:03d}ms"),
)


def format_duration(millis: int) -> str:
    """
    Render a duration as ``1h, 2m, 3s, 004ms``.

    Zero-valued units are skipped; zero itself is padded so it lines up
    with short readings.
    """
    if millis == 0:
        return "     000ms"
    parts = []
    for size, template in _UNITS:
        units, millis = divmod(millis, size)
        if units:
            parts.append(template.format(units))
    return ", ".join(parts)


class Chronograph:
    """
    Start/stop timer with change notifications.

    Args:
        clock: Returns the current time in seconds (monotonic by default).
        tick: Run a background thread that calls ``update`` every
            TICK_SECONDS while started.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        tick: bool = False,
    ) -> None:
        self._clock = clock
        self._tick = tick
        self._lock = threading.RLock()
        self._started = False
        self._start_time = 0.0
        self._last_value = 0
        self._events = EventBus(self, (EVENT_TIMESTAMP,))
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ========================================================================
    # Controls
    # ========================================================================

    def start(self) -> None:
        """Start timing from zero. Does nothing while already running."""
        with self._lock:
            if self._started:
                return
            previous = self._last_value
            self._start_time = self._clock()
            self._last_value = 0
            self._started = True
            if self._tick:
                self._stop_event = threading.Event()
                self._thread = threading.Thread(
                    target=self._run,
                    args=(self._stop_event,),
                    name="chronograph",
                    daemon=True,
                )
                self._thread.start()
        logger.info("Chronograph started")
        self._publish(previous, 0)

    def stop(self) -> None:
        """Freeze the reading."""
        with self._lock:
            previous = self._last_value
            self._last_value = self._read()
            self._started = False
            self._stop_event.set()
            current = self._last_value
        logger.info("Chronograph stopped at %s", format_duration(current))
        self._publish(previous, current)

    def reset(self) -> None:
        """Stop and set the reading back to zero."""
        with self._lock:
            previous = self._last_value
            self._started = False
            self._stop_event.set()
            self._start_time = self._clock()
            self._last_value = 0
        logger.info("Chronograph reset")
        self._publish(previous, 0)

    @property
    def is_started(self) -> bool:
        with self._lock:
            return self._started

    # ========================================================================
    # Readings
    # ========================================================================

    def _read(self) -> int:
        if self._started:
            return int((self._clock() - self._start_time) * 1000)
        return self._last_value

    @property
    def elapsed_ms(self) -> int:
        """Current reading in milliseconds."""
        with self._lock:
            return self._read()

    def update(self) -> None:
        """Sample the reading and notify listeners if it moved."""
        with self._lock:
            previous = self._last_value
            self._last_value = self._read()
            current = self._last_value
        self._publish(previous, current)

    def _publish(self, previous: int, current: int) -> None:
        if previous != current:
            self._events.emit(
                EVENT_TIMESTAMP,
                format_duration(previous),
                format_duration(current),
            )

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(TICK_SECONDS):
            self.update()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the ticker thread to finish after ``stop``."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    # ========================================================================
    # Notifications
    # ========================================================================

    def subscribe(self, name: str, listener: Callable[[ChangeEvent], None]) -> None:
        self._events.subscribe(name, listener)

    def unsubscribe(self, name: str, listener: Callable[[ChangeEvent], None]) -> bool:
        return self._events.unsubscribe(name, listener)

    def __str__(self) -> str:
        return format_duration(self.elapsed_ms)
