"""Kinesis Data Streams client."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from eventgate.stream.base import RecordResult, StreamRecord

logger = logging.getLogger(__name__)

# PutRecords accepts at most 500 entries per request.
MAX_RECORDS_PER_CALL = 500


class KinesisStreamClient:
    def __init__(
        self,
        *,
        region_name: str = "",
        endpoint_url: str = "",
        client: Any | None = None,
    ) -> None:
        if client is None:
            kwargs: dict[str, str] = {}
            if region_name:
                kwargs["region_name"] = region_name
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("kinesis", **kwargs)
        self._client = client

    def put_records(self, stream_name: str, records: list[StreamRecord]) -> list[RecordResult]:
        results: list[RecordResult] = []
        for start in range(0, len(records), MAX_RECORDS_PER_CALL):
            chunk = records[start : start + MAX_RECORDS_PER_CALL]
            results.extend(self._put_chunk(stream_name, chunk))
        return results

    def _put_chunk(self, stream_name: str, chunk: list[StreamRecord]) -> list[RecordResult]:
        try:
            response = self._client.put_records(
                StreamName=stream_name,
                Records=[
                    {"Data": record.data, "PartitionKey": record.partition_key}
                    for record in chunk
                ],
            )
        except ClientError as exc:
            error = exc.response.get("Error", {})
            code = str(error.get("Code") or "ClientError")
            message = str(error.get("Message") or exc)
            logger.error("Kinesis put_records failed for %s: %s", stream_name, code)
            return [self._failed(stream_name, record, code, message) for record in chunk]
        except BotoCoreError as exc:
            logger.error("Kinesis put_records failed for %s: %s", stream_name, exc)
            return [
                self._failed(stream_name, record, type(exc).__name__, str(exc))
                for record in chunk
            ]

        entries = response.get("Records", [])
        out: list[RecordResult] = []
        for record, entry in zip(chunk, entries, strict=True):
            if entry.get("ErrorCode"):
                out.append(
                    self._failed(
                        stream_name,
                        record,
                        str(entry["ErrorCode"]),
                        str(entry.get("ErrorMessage") or ""),
                    )
                )
                continue
            out.append(
                RecordResult(
                    ok=True,
                    stream_name=stream_name,
                    partition_key=record.partition_key,
                    sequence_number=entry.get("SequenceNumber"),
                    shard_id=entry.get("ShardId"),
                )
            )
        return out

    @staticmethod
    def _failed(stream_name: str, record: StreamRecord, code: str, message: str) -> RecordResult:
        return RecordResult(
            ok=False,
            stream_name=stream_name,
            partition_key=record.partition_key,
            error_code=code,
            error_message=message,
        )
