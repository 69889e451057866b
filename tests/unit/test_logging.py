import json
import logging
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from eventgate import main
from eventgate.config import get_settings
from eventgate.context import build_ingest_context
from eventgate.logging import bind_context, clear_context, configure_logging
from eventgate.stream.memory import MemoryStreamClient


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    clear_context()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_output_carries_bound_context(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("INFO", json_output=True)
    bind_context(trace_id="trc_1", project_id="proj_1")

    logging.getLogger("eventgate.stream.publisher").info("published %d records", 3)

    line = capsys.readouterr().err.strip().splitlines()[-1]
    entry = json.loads(line)
    assert entry["event"] == "published 3 records"
    assert entry["trace_id"] == "trc_1"
    assert entry["project_id"] == "proj_1"
    assert entry["level"] == "info"


def test_level_filters_and_quiets_boto(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("WARNING", json_output=True)

    logging.getLogger("eventgate.main").info("hidden")
    assert logging.getLogger("botocore").level == logging.WARNING
    assert capsys.readouterr().err == ""


def test_lifespan_picks_renderer_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, bool]] = []
    monkeypatch.setattr(
        main,
        "configure_logging",
        lambda level, *, json_output=False: calls.append((level, json_output)),
    )
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("STREAM_BACKEND", "kinesis")
    get_settings.cache_clear()
    context = build_ingest_context(get_settings(), stream_client=MemoryStreamClient())
    # only the loaded settings decide, not the live environment
    monkeypatch.setenv("APP_ENV", "dev")

    with TestClient(main.create_app(context)):
        pass

    assert calls == [("INFO", True)]
