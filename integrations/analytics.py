"""Fire-and-forget analytics sinks."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from opentelemetry import trace

from infra.logging import log_event
from integrations.protocols import AnalyticsSink

logger = logging.getLogger(__name__)


class LoggingAnalyticsSink:
    """Write every captured event as a structured log line."""

    def capture(self, event: str, properties: Mapping[str, Any] | None = None) -> None:
        payload = dict(properties or {})
        log_event("info", event, user_id=payload.pop("user_id", None), step=payload.pop("step", None), payload=payload)


class TracingAnalyticsSink:
    """Attach captured events to the active OpenTelemetry span."""

    def capture(self, event: str, properties: Mapping[str, Any] | None = None) -> None:
        attributes = {
            key: value
            for key, value in (properties or {}).items()
            if isinstance(value, (str, bool, int, float))
        }
        trace.get_current_span().add_event(event, attributes=attributes)


class CompositeAnalyticsSink:
    """Fan an event out to several sinks; one failing sink does not stop the others."""

    def __init__(self, sinks: Sequence[AnalyticsSink]) -> None:
        self._sinks = tuple(sinks)

    def capture(self, event: str, properties: Mapping[str, Any] | None = None) -> None:
        for sink in self._sinks:
            capture_safely(sink, event, properties)


def capture_safely(
    sink: AnalyticsSink | None,
    event: str,
    properties: Mapping[str, Any] | None = None,
) -> None:
    """Forward ``event`` to ``sink`` and drop any failure after logging it."""

    if sink is None:
        return
    try:
        sink.capture(event, properties)
    except Exception as exc:  # analytics must never surface to the user
        logger.warning("Analytics capture of '%s' failed: %s", event, exc)


def default_analytics_sink() -> AnalyticsSink:
    return CompositeAnalyticsSink([LoggingAnalyticsSink(), TracingAnalyticsSink()])


__all__ = [
    "CompositeAnalyticsSink",
    "LoggingAnalyticsSink",
    "TracingAnalyticsSink",
    "capture_safely",
    "default_analytics_sink",
]
