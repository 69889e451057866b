"""Server-side context enrichment.

Enrichment only fills fields the client or the normalizer left empty. The
single exception is ``received_at``, which marks when this process saw the
request and is always stamped.
"""

from __future__ import annotations

from collections.abc import Mapping

from eventgate.ids import now_ms
from eventgate.models import CanonicalEvent, EventContext


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def forwarded_ip(headers: Mapping[str, str]) -> str | None:
    raw = _header(headers, "x-forwarded-for")
    if raw is None:
        return None
    first = raw.split(",", 1)[0].strip()
    return first or None


def enrich(
    event: CanonicalEvent,
    headers: Mapping[str, str],
    *,
    now: int | None = None,
) -> CanonicalEvent:
    received_at = now if now is not None else now_ms()
    context = event.context or EventContext()

    updates: dict[str, object] = {"received_at": received_at}
    if not context.ip:
        ip = forwarded_ip(headers)
        if ip:
            updates["ip"] = ip
    if not context.user_agent:
        user_agent = _header(headers, "user-agent")
        if user_agent:
            updates["user_agent"] = user_agent

    return event.model_copy(
        update={
            "timestamp": event.timestamp or received_at,
            "context": context.model_copy(update=updates),
        }
    )
