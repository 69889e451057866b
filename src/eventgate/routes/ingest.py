"""Event ingest routes.

The deployed schema generation decides which endpoints exist and which
payload variant each one accepts:

- compact: ``/view`` and ``/event`` take the compact payload and require a
  bearer credential; success is a bare ``ACCEPTED``.
- expanded: ``/view`` takes an expanded page view and ``/track`` an
  expanded track call; the tenant travels in the body.

Any path prefix in front of the endpoint (API gateway stages) is ignored.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from slowapi import Limiter
from slowapi.util import get_remote_address

from eventgate.config import get_settings
from eventgate.context import IngestContext, get_ingest_context
from eventgate.enrich import enrich
from eventgate.errors import NotFoundError, ParseError, ValidationError
from eventgate.logging import bind_context
from eventgate.models import CompactEvent, ExpandedPageView, ExpandedTrack
from eventgate.normalizer import normalize, parse, validate
from eventgate.routes.responses import json_response, text_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ingest"])

ROUTE_TABLE: dict[str, dict[str, str]] = {
    "compact": {"view": CompactEvent.kind, "event": CompactEvent.kind},
    "expanded": {"view": ExpandedPageView.kind, "track": ExpandedTrack.kind},
}

_LOGGED_BODY_CHARS = 512


def is_ingest_path(request: Request) -> bool:
    context = getattr(request.app.state, "ingest", None)
    if context is None:
        return False
    endpoint = request.url.path.rstrip("/").rsplit("/", 1)[-1]
    return endpoint in ROUTE_TABLE[context.settings.schema_generation]


def client_key(request: Request) -> str:
    """Rate-limit key: the hop appended by the proxy in front of us.

    Earlier X-Forwarded-For entries are supplied by the client and can be
    rotated freely, so only the last one is trusted.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    last_hop = forwarded.rsplit(",", 1)[-1].strip()
    return last_hop or get_remote_address(request)


def ingest_rate_limit() -> str:
    return f"{get_settings().rate_limit_ingest_per_minute}/minute"


def rate_limit_disabled() -> bool:
    return get_settings().rate_limit_ingest_per_minute <= 0


limiter = Limiter(key_func=client_key)


async def handle_ingest(endpoint: str, request: Request, ctx: IngestContext) -> Response:
    generation = ctx.settings.schema_generation
    kind = ROUTE_TABLE[generation].get(endpoint)
    if kind is None:
        raise NotFoundError("Not found")

    body = await request.body()
    if not body:
        logger.warning("Received empty body")
        raise ValidationError("Missing request body")

    project_id: str | None = None
    user_id: str | None = None
    if kind == CompactEvent.kind:
        identity = ctx.resolver.resolve(request.headers.get("authorization"))
        project_id, user_id = identity.project_id, identity.user_id

    try:
        raw = parse(kind, body)
    except ParseError as exc:
        logger.error(
            "Failed to parse JSON: %s | Body: %s",
            exc.message,
            body[:_LOGGED_BODY_CHARS].decode("utf-8", errors="replace"),
        )
        raise
    validate(raw)

    event = enrich(normalize(raw, project_id, user_id), request.headers)
    bind_context(project_id=event.project_id, event_type=event.event_type)

    report = await ctx.publisher.publish([event])
    report.raise_for_failures()

    if generation == "compact":
        return text_response(202, "ACCEPTED")
    return json_response(202, {"success": True, "eventsReceived": len(report.results)})


@router.post("/{endpoint}")
@limiter.shared_limit(ingest_rate_limit, scope="ingest", exempt_when=rate_limit_disabled)
async def ingest(
    endpoint: str,
    request: Request,
    ctx: IngestContext = Depends(get_ingest_context),  # noqa: B008
) -> Response:
    return await handle_ingest(endpoint, request, ctx)


@router.post("/{stage:path}/{endpoint}")
@limiter.shared_limit(ingest_rate_limit, scope="ingest", exempt_when=rate_limit_disabled)
async def ingest_staged(
    stage: str,
    endpoint: str,
    request: Request,
    ctx: IngestContext = Depends(get_ingest_context),  # noqa: B008
) -> Response:
    del stage
    return await handle_ingest(endpoint, request, ctx)
