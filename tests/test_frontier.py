"""Tests for the breadth-first frontier."""

from __future__ import annotations

import pytest

from keycrawl.crawler.frontier import Frontier, FrontierEmpty
from keycrawl.crawler.models import FrontierEntry


class TestEnqueue:
    def test_new_url_is_added(self) -> None:
        frontier = Frontier(max_depth=3)
        assert frontier.enqueue("https://a.com/", 0) is True
        assert len(frontier) == 1

    def test_pending_url_is_rejected(self) -> None:
        frontier = Frontier(max_depth=3)
        frontier.enqueue("https://a.com/x", 1)
        assert frontier.enqueue("https://a.com/x", 2) is False
        assert len(frontier) == 1

    def test_visited_url_is_rejected(self) -> None:
        frontier = Frontier(max_depth=3)
        frontier.mark_visited("https://a.com/x")
        assert frontier.enqueue("https://a.com/x", 1) is False
        assert not frontier

    def test_too_deep_is_rejected(self) -> None:
        frontier = Frontier(max_depth=2)
        assert frontier.enqueue("https://a.com/deep", 3) is False
        assert frontier.enqueue("https://a.com/ok", 2) is True

    def test_dequeued_but_unvisited_url_can_requeue(self) -> None:
        frontier = Frontier(max_depth=3)
        frontier.enqueue("https://a.com/x", 1)
        frontier.dequeue_next()
        assert frontier.enqueue("https://a.com/x", 1) is True


class TestDequeue:
    def test_fifo_order(self) -> None:
        frontier = Frontier(max_depth=3)
        for i in range(5):
            frontier.enqueue(f"https://a.com/{i}", 1)
        urls = [frontier.dequeue_next().url for _ in range(5)]
        assert urls == [f"https://a.com/{i}" for i in range(5)]

    def test_returns_entry_with_depth(self) -> None:
        frontier = Frontier(max_depth=3)
        frontier.enqueue("https://a.com/", 0)
        assert frontier.dequeue_next() == FrontierEntry(url="https://a.com/", depth=0)

    def test_empty_raises(self) -> None:
        frontier = Frontier(max_depth=3)
        with pytest.raises(FrontierEmpty):
            frontier.dequeue_next()


class TestVisited:
    def test_mark_visited_is_idempotent(self) -> None:
        frontier = Frontier(max_depth=3)
        frontier.mark_visited("https://a.com/")
        frontier.mark_visited("https://a.com/")
        assert frontier.visited_count == 1
        assert frontier.is_visited("https://a.com/")

    def test_unvisited(self) -> None:
        assert not Frontier(max_depth=3).is_visited("https://a.com/")
