"""Tests for concurrent store reads."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from lore_graph.concurrency import check_cancelled, gather
from lore_graph.errors import TraversalCancelled


class TestGather:
    def test_sequential(self):
        assert gather(None, lambda: 1, lambda: 2) == [1, 2]
        assert gather(None) == []

    def test_results_in_call_order(self):
        release = threading.Event()

        def slow():
            release.wait(1)
            return "slow"

        def fast():
            release.set()
            return "fast"

        with ThreadPoolExecutor(max_workers=2) as executor:
            assert gather(executor, slow, fast) == ["slow", "fast"]

    def test_first_error_propagates(self):
        def boom():
            raise KeyError("boom")

        with ThreadPoolExecutor(max_workers=2) as executor:
            with pytest.raises(KeyError):
                gather(executor, boom, lambda: 1)


class TestCancellation:
    def test_not_set(self):
        check_cancelled(None)
        check_cancelled(threading.Event())

    def test_set(self):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(TraversalCancelled):
            check_cancelled(cancel)
