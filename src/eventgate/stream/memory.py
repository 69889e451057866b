"""In-process stream client for local development and tests."""

from __future__ import annotations

import threading
from collections import defaultdict

from eventgate.stream.base import RecordResult, StreamRecord


class MemoryStreamClient:
    """Keeps every accepted record per stream, in arrival order.

    Partition keys listed in ``fail_partition_keys`` are rejected with a
    throughput error so callers can exercise partial failures.
    """

    def __init__(self, fail_partition_keys: set[str] | None = None) -> None:
        self.fail_partition_keys = set(fail_partition_keys or ())
        self.records: dict[str, list[StreamRecord]] = defaultdict(list)
        self.calls = 0
        self._lock = threading.Lock()

    def put_records(self, stream_name: str, records: list[StreamRecord]) -> list[RecordResult]:
        results: list[RecordResult] = []
        with self._lock:
            self.calls += 1
            stored = self.records[stream_name]
            for record in records:
                if record.partition_key in self.fail_partition_keys:
                    results.append(
                        RecordResult(
                            ok=False,
                            stream_name=stream_name,
                            partition_key=record.partition_key,
                            error_code="ProvisionedThroughputExceededException",
                            error_message="rejected by memory stream",
                        )
                    )
                    continue
                stored.append(record)
                results.append(
                    RecordResult(
                        ok=True,
                        stream_name=stream_name,
                        partition_key=record.partition_key,
                        sequence_number=str(len(stored)),
                        shard_id=f"shard-{record.partition_key}",
                    )
                )
        return results
