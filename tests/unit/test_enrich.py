from eventgate.enrich import enrich, forwarded_ip
from eventgate.models import CanonicalEvent, EventContext, PageContext

NOW = 1767348480000


def _event(**kwargs) -> CanonicalEvent:
    return CanonicalEvent(project_id="proj_1", event_type="click", **kwargs)


def test_fills_missing_server_fields() -> None:
    event = _event(timestamp=0)
    headers = {"x-forwarded-for": " 9.9.9.9 , 1.1.1.1", "user-agent": "Mozilla/5.0"}
    out = enrich(event, headers, now=NOW)
    assert out.timestamp == NOW
    assert out.context.ip == "9.9.9.9"
    assert out.context.user_agent == "Mozilla/5.0"
    assert out.context.received_at == NOW


def test_never_overwrites_client_values() -> None:
    context = EventContext(
        ip="10.0.0.1",
        user_agent="client-agent",
        locale="fr-FR",
        page=PageContext(url="http://host/"),
        received_at=1,
        referral={"code": "abc"},
    )
    event = _event(timestamp=1700000000000, context=context)
    headers = {"x-forwarded-for": "9.9.9.9", "user-agent": "server-agent"}
    out = enrich(event, headers, now=NOW)
    assert out.timestamp == 1700000000000
    assert out.context.ip == "10.0.0.1"
    assert out.context.user_agent == "client-agent"
    assert out.context.locale == "fr-FR"
    assert out.context.page.url == "http://host/"
    assert out.context.extensions == {"referral": {"code": "abc"}}
    assert out.context.received_at == NOW


def test_leaves_ip_absent_without_forwarded_header() -> None:
    out = enrich(_event(), {}, now=NOW)
    assert out.context is not None
    assert out.context.ip is None
    assert out.context.user_agent is None


def test_header_lookup_is_case_insensitive() -> None:
    out = enrich(_event(), {"X-Forwarded-For": "8.8.8.8", "User-Agent": "curl/8"}, now=NOW)
    assert out.context.ip == "8.8.8.8"
    assert out.context.user_agent == "curl/8"


def test_input_event_is_not_mutated() -> None:
    event = _event()
    enrich(event, {"x-forwarded-for": "9.9.9.9"}, now=NOW)
    assert event.context is None
    assert event.timestamp == 0


def test_forwarded_ip_blank_first_token() -> None:
    assert forwarded_ip({"x-forwarded-for": " , 1.1.1.1"}) is None
    assert forwarded_ip({}) is None
