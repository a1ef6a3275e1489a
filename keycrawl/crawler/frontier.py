"""Breadth-first work queue for a single crawl.

The frontier owns both the pending queue and the visited set, so the
"each URL at most once" rule is enforced in one place.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Set

from keycrawl.crawler.models import FrontierEntry


class FrontierEmpty(Exception):
    """Raised by :meth:`Frontier.dequeue_next` when nothing is pending."""


class Frontier:
    """FIFO queue of ``(url, depth)`` entries with a visited set."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        self._queue: Deque[FrontierEntry] = deque()
        self._pending: Set[str] = set()
        self._visited: Set[str] = set()

    def enqueue(self, url: str, depth: int) -> bool:
        """Queue *url* at *depth* unless it is visited, pending or too deep.

        Returns ``True`` if the entry was added.
        """
        if depth > self.max_depth:
            return False
        if url in self._visited or url in self._pending:
            return False
        self._queue.append(FrontierEntry(url=url, depth=depth))
        self._pending.add(url)
        return True

    def dequeue_next(self) -> FrontierEntry:
        """Pop the oldest pending entry.

        Raises:
            FrontierEmpty: If no entries are pending.
        """
        if not self._queue:
            raise FrontierEmpty("frontier is empty")
        entry = self._queue.popleft()
        self._pending.discard(entry.url)
        return entry

    def mark_visited(self, url: str) -> None:
        self._visited.add(url)

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)
