"""
Named-event publish/subscribe used by the board and the chronograph.

Listeners register per event name and are called synchronously, in
registration order, with a ChangeEvent describing the old and new value.
TaskQueue is a minimal "call later" queue a board can post its cascade
steps to.
"""
import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """A single change notification."""

    name: str
    old_value: Any
    new_value: Any
    source: Any = None


Listener = Callable[[ChangeEvent], None]


class EventBus:
    """
    Per-name listener registry.

    Args:
        source: Object reported as ``ChangeEvent.source``.
        names: When given, restricts subscription to these event names.
    """

    def __init__(
        self,
        source: Any = None,
        names: Optional[Iterable[str]] = None,
    ) -> None:
        self._source = source
        self._names = frozenset(names) if names is not None else None
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def _check_name(self, name: str) -> None:
        if self._names is not None and name not in self._names:
            raise ValueError(
                f"Unknown event {name!r}; expected one of {sorted(self._names)}"
            )

    def subscribe(self, name: str, listener: Listener) -> None:
        """Register ``listener`` for ``name``. The same listener may be added twice."""
        self._check_name(name)
        self._listeners[name].append(listener)
        logger.debug("Added listener %r to %s", listener, name)

    def unsubscribe(self, name: str, listener: Listener) -> bool:
        """
        Remove one registration of ``listener`` for ``name``.

        Returns:
            True if a registration was removed, False if none matched.
        """
        self._check_name(name)
        listeners = self._listeners.get(name)
        if not listeners:
            return False
        try:
            listeners.remove(listener)
        except ValueError:
            return False
        logger.debug("Removed listener %r from %s", listener, name)
        return True

    def listener_count(self, name: str) -> int:
        """Number of registrations for ``name``."""
        return len(self._listeners.get(name, ()))

    def emit(self, name: str, old_value: Any, new_value: Any) -> None:
        """Deliver a ChangeEvent to every listener registered for ``name``."""
        listeners = self._listeners.get(name)
        if not listeners:
            return
        event = ChangeEvent(name, old_value, new_value, self._source)
        # Listeners may unsubscribe themselves while being notified.
        for listener in list(listeners):
            listener(event)

    def clear(self) -> None:
        """Drop every registration."""
        self._listeners.clear()


class TaskQueue:
    """
    FIFO of deferred callables, run by whoever owns the loop.

    Calling the queue posts a task; ``run_pending`` executes tasks until
    none are left, including tasks posted while it runs.
    """

    def __init__(self) -> None:
        self._tasks: Deque[Callable[[], None]] = deque()

    def __call__(self, task: Callable[[], None]) -> None:
        self._tasks.append(task)

    def __len__(self) -> int:
        return len(self._tasks)

    def run_once(self) -> bool:
        """Run the oldest task. Returns False when there was none."""
        if not self._tasks:
            return False
        self._tasks.popleft()()
        return True

    def run_pending(self) -> int:
        """Run until empty; returns how many tasks ran."""
        count = 0
        while self.run_once():
            count += 1
        return count
