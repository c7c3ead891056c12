"""Tests for the in-memory worker data holder."""

from unittest.mock import MagicMock

import pytest

from loading_insights.memory.worker_data_store import WorkerDataStore


class TestWorkerDataStore:
    def test_starts_empty(self):
        store = WorkerDataStore()
        assert store.snapshot() == []
        assert len(store) == 0
        assert store.updated_at is None

    def test_replace_returns_count(self):
        store = WorkerDataStore()
        assert store.replace([{"a": 1}, {"a": 2}]) == 2
        assert len(store) == 2
        assert store.updated_at is not None

    def test_replace_is_wholesale(self):
        store = WorkerDataStore()
        store.replace([{"a": 1}, {"a": 2}])
        store.replace([{"b": 3}])
        assert store.snapshot() == [{"b": 3}]

    def test_snapshot_is_a_copy(self):
        store = WorkerDataStore()
        rows = [{"a": 1}]
        store.replace(rows)
        rows[0]["a"] = 99
        snap = store.snapshot()
        snap[0]["a"] = 42
        assert store.snapshot() == [{"a": 1}]

    def test_rejects_non_list(self):
        store = WorkerDataStore()
        with pytest.raises(TypeError):
            store.replace({"a": 1})

    def test_clear(self):
        store = WorkerDataStore()
        store.replace([{"a": 1}])
        store.clear()
        assert store.snapshot() == []
        assert store.updated_at is None

    def test_instances_are_independent(self):
        first, second = WorkerDataStore(), WorkerDataStore()
        first.replace([{"a": 1}])
        assert second.snapshot() == []

    def test_len_reads_under_lock(self):
        store = WorkerDataStore()
        store.replace([{"a": 1}])
        store._lock = MagicMock()
        assert len(store) == 1
        store._lock.__enter__.assert_called_once()
