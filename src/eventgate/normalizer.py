"""Parse, validate and map client payload variants into the canonical event."""

from __future__ import annotations

import json
from typing import Any

import pydantic

from eventgate.errors import ParseError, ValidationError
from eventgate.models import (
    PAGEVIEW_EVENT_TYPE,
    VARIANTS,
    CanonicalEvent,
    CompactEvent,
    EventContext,
    ExpandedPageView,
    ExpandedTrack,
    PageContext,
    RawEventInput,
    ScreenContext,
)


def _describe(exc: pydantic.ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ())) or "body"
        parts.append(f"{loc}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse(kind: str, body: bytes | str) -> RawEventInput:
    """Decode a request body into the variant bound to ``kind``."""
    model = VARIANTS[kind]
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"body is not valid UTF-8: {exc}") from exc
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ParseError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise ParseError(f"expected a JSON object, got {type(payload).__name__}")
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ParseError(_describe(exc)) from exc


def validate(raw: RawEventInput) -> None:
    match raw:
        case CompactEvent():
            if not raw.en:
                raise ValidationError("en (event name) is required")
            if not raw.o:
                raise ValidationError("o (origin) is required")
        case ExpandedPageView():
            if not raw.project_id:
                raise ValidationError("projectId is required")
            if not raw.url:
                raise ValidationError("url is required")
            _require_identity(raw)
        case ExpandedTrack():
            if not raw.project_id:
                raise ValidationError("projectId is required")
            if not raw.event_type:
                raise ValidationError("eventType (event name) is required")
            _require_identity(raw)
        case _:
            raise TypeError(f"unsupported event variant: {type(raw).__name__}")


def _require_identity(raw: ExpandedPageView | ExpandedTrack) -> None:
    if not raw.identities():
        raise ValidationError("at least one of userId, anonymousId or sessionId is required")


def normalize(
    raw: RawEventInput,
    project_id: str | None = None,
    user_id: str | None = None,
) -> CanonicalEvent:
    """Map a validated variant onto the canonical event.

    The compact variant takes its tenant and caller from the credential, so
    ``project_id`` is mandatory there. Expanded variants carry their own
    tenant and identities; ``project_id`` falls back to the body's value.
    """
    match raw:
        case CompactEvent():
            if not project_id:
                raise ValueError("compact events need a resolved project_id")
            return _normalize_compact(raw, project_id, user_id)
        case ExpandedPageView():
            return _normalize_pageview(raw, project_id or raw.project_id, user_id)
        case ExpandedTrack():
            return _normalize_track(raw, project_id or raw.project_id, user_id)
        case _:
            raise TypeError(f"unsupported event variant: {type(raw).__name__}")


def _normalize_compact(raw: CompactEvent, project_id: str, user_id: str | None) -> CanonicalEvent:
    properties: dict[str, Any] = {"url": raw.o}
    if raw.r:
        properties["referrer"] = raw.r
    if raw.sw is not None:
        properties["screen_width"] = raw.sw
    if raw.sh is not None:
        properties["screen_height"] = raw.sh
    properties.update(raw.unknown_fields)
    # custom fields win over the synthesized keys
    if raw.ed:
        properties.update(raw.ed)

    screen = None
    if raw.sw is not None or raw.sh is not None:
        screen = ScreenContext(width=raw.sw, height=raw.sh)
    context = EventContext(
        page=PageContext(url=raw.o, referrer=raw.r or None),
        screen=screen,
    )
    return CanonicalEvent(
        project_id=project_id,
        event_type=raw.en,
        timestamp=raw.ts,
        user_id=user_id or None,
        properties=properties,
        context=context,
    )


def _normalize_pageview(
    raw: ExpandedPageView, project_id: str, user_id: str | None
) -> CanonicalEvent:
    properties: dict[str, Any] = {"url": raw.url}
    for key in ("title", "path", "referrer"):
        value = getattr(raw, key)
        if value:
            properties[key] = value

    context = raw.context
    if context is None:
        context = EventContext(
            page=PageContext(
                url=raw.url,
                title=raw.title or None,
                path=raw.path or None,
                referrer=raw.referrer or None,
            )
        )
    return CanonicalEvent(
        project_id=project_id,
        event_type=PAGEVIEW_EVENT_TYPE,
        timestamp=raw.timestamp or 0,
        session_id=raw.session_id or None,
        user_id=raw.user_id or user_id or None,
        anonymous_id=raw.anonymous_id or None,
        properties=properties,
        context=context,
    )


def _normalize_track(raw: ExpandedTrack, project_id: str, user_id: str | None) -> CanonicalEvent:
    return CanonicalEvent(
        project_id=project_id,
        event_type=raw.event_type,
        timestamp=raw.timestamp or 0,
        session_id=raw.session_id or None,
        user_id=raw.user_id or user_id or None,
        anonymous_id=raw.anonymous_id or None,
        properties=dict(raw.properties or {}),
        context=raw.context,
    )
