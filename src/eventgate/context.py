"""Process-wide collaborators handed to every request handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request

from eventgate.config import Settings, parse_stream_routes, validate_settings
from eventgate.identity import ClaimsResolver, IdentityResolver, SignedClaimsResolver
from eventgate.stream.base import StreamClient
from eventgate.stream.memory import MemoryStreamClient
from eventgate.stream.publisher import StreamPublisher, StreamRouting

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IngestContext:
    settings: Settings
    resolver: IdentityResolver
    publisher: StreamPublisher


def build_stream_client(settings: Settings) -> StreamClient:
    if settings.stream_backend == "memory":
        return MemoryStreamClient()
    from eventgate.stream.kinesis import KinesisStreamClient

    return KinesisStreamClient(
        region_name=settings.stream_region,
        endpoint_url=settings.stream_endpoint_url,
    )


def build_resolver(settings: Settings) -> IdentityResolver:
    if settings.token_signing_secret:
        return SignedClaimsResolver(
            settings.token_signing_secret,
            default_project_id=settings.default_project_id,
        )
    logger.warning("TOKEN_SIGNING_SECRET not set; bearer token signatures are not verified")
    return ClaimsResolver(default_project_id=settings.default_project_id)


def build_ingest_context(
    settings: Settings,
    stream_client: StreamClient | None = None,
) -> IngestContext:
    validate_settings(settings)
    routing = StreamRouting(
        default_stream=settings.stream_name,
        overrides=parse_stream_routes(settings.stream_routes),
    )
    client = stream_client or build_stream_client(settings)
    logger.info(
        "Initialized %s stream publisher for %s (%d tenant overrides)",
        settings.stream_backend,
        settings.stream_name,
        len(routing.overrides),
    )
    return IngestContext(
        settings=settings,
        resolver=build_resolver(settings),
        publisher=StreamPublisher(client, routing),
    )


def get_ingest_context(request: Request) -> IngestContext:
    return request.app.state.ingest
