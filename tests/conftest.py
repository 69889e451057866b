import base64
import hashlib
import hmac
import json
from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from eventgate.config import get_settings
from eventgate.context import build_ingest_context
from eventgate.main import create_app
from eventgate.routes.ingest import limiter
from eventgate.stream.memory import MemoryStreamClient


@pytest.fixture(autouse=True)
def test_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("STREAM_NAME", "analytics-events")
    monkeypatch.setenv("STREAM_BACKEND", "memory")
    monkeypatch.setenv("SCHEMA_GENERATION", "compact")
    monkeypatch.setenv("RATE_LIMIT_INGEST_PER_MINUTE", "6000")
    for key in ("STREAM_ROUTES", "TOKEN_SIGNING_SECRET", "DEFAULT_PROJECT_ID"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    limiter.reset()
    yield
    get_settings.cache_clear()
    limiter.reset()


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


@pytest.fixture()
def make_token() -> Callable[..., str]:
    def _make(claims: dict[str, object], secret: str = "unused", alg: str = "HS256") -> str:
        header = _b64url(json.dumps({"alg": alg, "typ": "JWT"}).encode())
        payload = _b64url(json.dumps(claims).encode())
        signature = hmac.new(
            secret.encode(), f"{header}.{payload}".encode(), hashlib.sha256
        ).digest()
        return f"{header}.{payload}.{_b64url(signature)}"

    return _make


@pytest.fixture()
def stream() -> MemoryStreamClient:
    return MemoryStreamClient()


@pytest.fixture()
def make_client(
    monkeypatch: pytest.MonkeyPatch, stream: MemoryStreamClient
) -> Iterator[Callable[..., TestClient]]:
    clients: list[TestClient] = []

    def _make(**env: str) -> TestClient:
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()
        context = build_ingest_context(get_settings(), stream_client=stream)
        client = TestClient(create_app(context))
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    while clients:
        clients.pop().__exit__(None, None, None)
