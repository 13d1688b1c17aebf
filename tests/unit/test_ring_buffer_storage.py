"""Tests for the ring buffer record storage."""

import pytest

from ranchwatch.adapters.storage.ring_buffer import RingBufferRecordStorage
from ranchwatch.core.exceptions import ConfigurationError
from ranchwatch.core.models import LogLevel
from ranchwatch.core.ports import RecordStoragePort


@pytest.mark.storage
class TestRingBufferRecordStorage:
    def test_satisfies_port(self) -> None:
        assert isinstance(RingBufferRecordStorage(max_size=10), RecordStoragePort)

    def test_read_empty(self) -> None:
        assert RingBufferRecordStorage(max_size=10).read() == []

    def test_write_and_read_in_order(self, make_record) -> None:
        storage = RingBufferRecordStorage(max_size=10)
        for i in range(3):
            storage.write(make_record(message=f"m{i}"))
        assert [r.message for r in storage.read()] == ["m0", "m1", "m2"]
        assert len(storage) == 3

    def test_evicts_oldest_when_full(self, make_record) -> None:
        storage = RingBufferRecordStorage(max_size=2)
        for i in range(5):
            storage.write(make_record(message=f"m{i}"))
        assert [r.message for r in storage.read()] == ["m3", "m4"]

    def test_filter_by_level(self, make_record) -> None:
        storage = RingBufferRecordStorage(max_size=10)
        storage.write(make_record(level=LogLevel.INFO, message="ok"))
        storage.write(make_record(level=LogLevel.ERROR, message="bad"))
        storage.write(make_record(level=LogLevel.WARN, message="meh"))

        assert [r.message for r in storage.read(LogLevel.ERROR)] == ["bad"]
        assert storage.read(LogLevel.DEBUG) == []

    def test_read_returns_a_copy(self, make_record) -> None:
        storage = RingBufferRecordStorage(max_size=10)
        storage.write(make_record())
        storage.read().clear()
        assert len(storage) == 1

    @pytest.mark.parametrize("size", [0, -1])
    def test_invalid_size(self, size: int) -> None:
        with pytest.raises(ConfigurationError):
            RingBufferRecordStorage(max_size=size)
