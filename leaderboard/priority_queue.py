"""A priority queue of user scores, highest score first."""

from __future__ import annotations

import heapq
from itertools import count

from .models import UserScore


class PriorityQueue:
    """Max-heap of UserScore items ordered by score."""

    def __init__(self) -> None:
        self._heap: list[tuple[int, int, UserScore]] = []
        self._counter = count()

    def push(self, item: UserScore) -> None:
        """Add ``item`` to the queue."""
        heapq.heappush(self._heap, (-item.score, next(self._counter), item))

    def pop(self) -> UserScore:
        """Remove and return the item with the highest score."""
        if not self._heap:
            raise IndexError("pop from empty priority queue")
        return heapq.heappop(self._heap)[2]

    def __len__(self) -> int:
        return len(self._heap)