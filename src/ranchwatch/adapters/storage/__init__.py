"""Storage adapters implementing core ports."""

from ranchwatch.adapters.storage.ring_buffer import RingBufferRecordStorage

__all__ = ["RingBufferRecordStorage"]
