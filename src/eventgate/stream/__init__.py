"""Stream publishing: client contracts, backends and the publisher."""

from eventgate.stream.base import PublishReport, RecordResult, StreamClient, StreamRecord
from eventgate.stream.memory import MemoryStreamClient
from eventgate.stream.publisher import StreamPublisher, StreamRouting, partition_key

__all__ = [
    "MemoryStreamClient",
    "PublishReport",
    "RecordResult",
    "StreamClient",
    "StreamPublisher",
    "StreamRecord",
    "StreamRouting",
    "partition_key",
]
