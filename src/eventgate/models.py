"""Wire variants accepted from clients and the canonical event published downstream."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)
from pydantic.alias_generators import to_camel

PAGEVIEW_EVENT_TYPE = "pageview"


class _WireModel(BaseModel):
    """Omits declared fields left as None; extension keys are written as given."""

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        fields = type(self).model_fields
        declared = set(fields) | {field.alias for field in fields.values() if field.alias}
        return {
            key: value for key, value in data.items() if value is not None or key not in declared
        }


class PageContext(_WireModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    url: str | None = None
    title: str | None = None
    path: str | None = None
    referrer: str | None = None


class ScreenContext(_WireModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)


class EventContext(_WireModel):
    """Client and server observed context.

    Keys the model does not know about are kept as pydantic extras and
    serialized back at the top level of the context object.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    page: PageContext | None = None
    user_agent: str | None = None
    locale: str | None = None
    screen: ScreenContext | None = None
    ip: str | None = None
    received_at: int | None = None

    @property
    def extensions(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class CanonicalEvent(_WireModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    project_id: str = Field(min_length=1)
    event_type: str = Field(min_length=1)
    timestamp: int = 0
    session_id: str | None = None
    user_id: str | None = None
    anonymous_id: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)
    context: EventContext | None = None

    def to_record(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


class CompactEvent(BaseModel):
    """Single-letter keyed payload sent by the browser tracker to /view and /event."""

    kind: ClassVar[str] = "compact"

    model_config = ConfigDict(frozen=True, extra="allow")

    en: str = ""
    ts: int = 0
    o: str = ""
    r: str = ""
    sw: int | None = Field(default=None, ge=0)
    sh: int | None = Field(default=None, ge=0)
    ed: dict[str, Any] | None = None

    @property
    def unknown_fields(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class _ExpandedEvent(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    project_id: str = ""
    timestamp: int | None = None
    session_id: str | None = None
    user_id: str | None = None
    anonymous_id: str | None = None
    context: EventContext | None = None

    def identities(self) -> dict[str, str]:
        found = {
            "user_id": self.user_id,
            "anonymous_id": self.anonymous_id,
            "session_id": self.session_id,
        }
        return {key: value for key, value in found.items() if value}


class ExpandedPageView(_ExpandedEvent):
    kind: ClassVar[str] = "expanded_pageview"

    url: str = ""
    title: str | None = None
    path: str | None = None
    referrer: str | None = None


class ExpandedTrack(_ExpandedEvent):
    kind: ClassVar[str] = "expanded_track"

    event_type: str = Field(
        default="",
        validation_alias=AliasChoices("eventType", "event", "event_type"),
    )
    properties: dict[str, Any] | None = None


RawEventInput = CompactEvent | ExpandedPageView | ExpandedTrack

VARIANTS: dict[str, type[CompactEvent] | type[ExpandedPageView] | type[ExpandedTrack]] = {
    CompactEvent.kind: CompactEvent,
    ExpandedPageView.kind: ExpandedPageView,
    ExpandedTrack.kind: ExpandedTrack,
}
