import json
import logging

from integrations.analytics import (
    CompositeAnalyticsSink,
    LoggingAnalyticsSink,
    TracingAnalyticsSink,
    capture_safely,
)


class _Boom:
    def capture(self, event, properties=None) -> None:
        raise ConnectionError("sink offline")


class _Recorder:
    def __init__(self) -> None:
        self.events: list[str] = []

    def capture(self, event, properties=None) -> None:
        self.events.append(event)


def test_capture_safely_swallows_and_logs(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        capture_safely(_Boom(), "used_search", {"query_length": 3})

    assert "used_search" in caplog.text
    assert "sink offline" in caplog.text


def test_capture_safely_ignores_missing_sink() -> None:
    capture_safely(None, "used_search")


def test_composite_keeps_going_after_failure() -> None:
    recorder = _Recorder()
    sink = CompositeAnalyticsSink([_Boom(), recorder])

    sink.capture("clicked_linkedin", {"profile": "u1"})

    assert recorder.events == ["clicked_linkedin"]


def test_logging_sink_writes_structured_line(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="directory"):
        LoggingAnalyticsSink().capture("used_search", {"user_id": "u1", "email": "jane@example.com", "query_length": 4})

    record = json.loads(caplog.records[-1].getMessage())
    assert record["event"] == "used_search"
    assert record["user_id"] == "u1"
    assert record["payload"] == {"email": "[redacted]", "query_length": 4}


def test_tracing_sink_without_provider_is_harmless() -> None:
    TracingAnalyticsSink().capture("profile_submitted", {"created": True, "nested": {"skip": 1}})
