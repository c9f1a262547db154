"""Infrastructure layer - cross-cutting concerns."""

from signalforge_runtime.infrastructure.config import Config, get_config
from signalforge_runtime.infrastructure.logging import bind_daemon_context, setup_logging, get_logger
from signalforge_runtime.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from signalforge_runtime.infrastructure.tracing import setup_tracing, get_tracer, trace_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "bind_daemon_context",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
