"""OpenTelemetry tracing configuration."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from signalforge_runtime import __version__
from signalforge_runtime.domain.errors import RuntimeControlError

ERROR_KIND_ATTRIBUTE = "signalforge.error.kind"

_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str = "signalforge_runtime",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
    daemon_url: str | None = None,
) -> trace.Tracer:
    """Set up OpenTelemetry tracing.

    Spans are only exported when an OTLP endpoint or console export is
    configured; otherwise the provider records and drops them.
    """
    global _tracer

    attributes: dict[str, Any] = {"service.name": service_name, "service.version": __version__}
    if daemon_url:
        attributes["signalforge.daemon.url"] = daemon_url
    provider = TracerProvider(resource=Resource.create(attributes))

    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("signalforge_runtime")
    return _tracer


@contextmanager
def trace_span(name: str, attributes: dict[str, Any] | None = None) -> Generator[trace.Span, None, None]:
    """Run the body in a span.

    None-valued attributes are skipped. A RuntimeControlError leaving the
    body tags the span with its kind before the span records the exception.
    """
    with get_tracer().start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except RuntimeControlError as e:
            span.set_attribute(ERROR_KIND_ATTRIBUTE, e.kind.value)
            raise
