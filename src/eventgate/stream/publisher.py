"""Dispatch canonical events to the partitioned stream."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from eventgate.models import CanonicalEvent
from eventgate.stream.base import PublishReport, RecordResult, StreamClient, StreamRecord

logger = logging.getLogger(__name__)


def partition_key(event: CanonicalEvent) -> str:
    """All events of one tenant share a key and therefore one ordered shard."""
    return event.project_id


@dataclass(frozen=True, slots=True)
class StreamRouting:
    default_stream: str
    overrides: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))

    def stream_for(self, project_id: str) -> str:
        return self.overrides.get(project_id, self.default_stream)


class StreamPublisher:
    def __init__(self, client: StreamClient, routing: StreamRouting) -> None:
        self.client = client
        self.routing = routing

    async def publish(self, events: Sequence[CanonicalEvent]) -> PublishReport:
        """Write ``events`` with one batched call per destination stream.

        The report holds one result per event, in the order the events were
        given.
        """
        if not events:
            return PublishReport()

        batches: dict[str, list[int]] = {}
        for index, event in enumerate(events):
            batches.setdefault(self.routing.stream_for(event.project_id), []).append(index)

        slots: list[RecordResult | None] = [None] * len(events)
        for stream_name, indexes in batches.items():
            records = [
                StreamRecord(partition_key=partition_key(events[i]), data=events[i].to_record())
                for i in indexes
            ]
            logger.info("Sending %d events to stream %s", len(records), stream_name)
            results = await asyncio.to_thread(self.client.put_records, stream_name, records)
            for i, result in zip(indexes, results, strict=True):
                slots[i] = result

        report = PublishReport(results=[item for item in slots if item is not None])
        if report.ok:
            logger.info("Published %d events", report.succeeded)
        else:
            logger.error(
                "Published %d events, %d failed",
                report.succeeded,
                report.failed,
            )
        return report
