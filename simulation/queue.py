"""
Event queue: min-priority queue of scheduled events.

heapq ordered by (time, insertion sequence), so simultaneous events pop
in the order they were scheduled and replays are deterministic.
"""

import heapq
import itertools
from typing import List, Optional, Tuple

from simulation.events import Event


class EventQueue:
    """Priority queue for simulation events, ordered by time."""

    def __init__(self):
        self._queue: List[Tuple[float, int, Event]] = []
        self._sequence = itertools.count()

    def push(self, event: Event) -> None:
        """Add an event to the queue."""
        heapq.heappush(self._queue, (event.time, next(self._sequence), event))

    def pop(self) -> Optional[Event]:
        """Remove and return the earliest event, or None if empty."""
        if self._queue:
            return heapq.heappop(self._queue)[2]
        return None

    def peek(self) -> Optional[Event]:
        """Return the earliest event without removing it."""
        if self._queue:
            return self._queue[0][2]
        return None

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)
