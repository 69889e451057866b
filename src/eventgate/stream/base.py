"""Stream client contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from eventgate.errors import PublishError


@dataclass(frozen=True, slots=True)
class StreamRecord:
    partition_key: str
    data: bytes


@dataclass(frozen=True, slots=True)
class RecordResult:
    ok: bool
    stream_name: str
    partition_key: str
    sequence_number: str | None = None
    shard_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None


class StreamClient(Protocol):
    def put_records(self, stream_name: str, records: list[StreamRecord]) -> list[RecordResult]:
        """Write records in one call. Returns one result per record, in input order."""
        ...


@dataclass(slots=True)
class PublishReport:
    results: list[RecordResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.results if item.ok)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.results if not item.ok)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def raise_for_failures(self) -> None:
        if self.ok:
            return
        codes = sorted({item.error_code or "unknown" for item in self.results if not item.ok})
        raise PublishError(
            f"failed to publish {self.failed} of {len(self.results)} events "
            f"({', '.join(codes)})",
            succeeded=self.succeeded,
            failed=self.failed,
            results=list(self.results),
        )
