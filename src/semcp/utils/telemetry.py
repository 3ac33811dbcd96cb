"""OpenTelemetry tracing helpers for semcp.

Provides a thin wrapper around the OpenTelemetry API so the rest of the
codebase can call ``get_tracer()`` without caring whether the SDK is
installed.  When the SDK is *not* configured the API returns no-op
implementations.

Usage::

    from semcp.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("session.run") as span:
        span.set_attribute(ATTR_SESSION_NAME, session.name)

To export spans, call :func:`configure_telemetry` once at startup (requires
the ``otel`` extra: ``pip install semcp[otel]``).  Only OTLP export is
offered: the wrapped tool owns stdout.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys used throughout semcp instrumentation
# ---------------------------------------------------------------------------

ATTR_SESSION_NAME = "semcp.session.name"
ATTR_RUNNER = "semcp.runner"
ATTR_IMAGE = "semcp.image"
ATTR_ENGINE = "semcp.engine"
ATTR_MODE = "semcp.mode"
ATTR_MONITOR_ENABLED = "semcp.monitor.enabled"
ATTR_EXIT_CODE = "semcp.exit_code"

_INSTRUMENTATION_NAME = "semcp"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(*, service_name: str = "semcp", otlp_endpoint: str) -> None:
    """Configure OpenTelemetry tracing with an OTLP/gRPC exporter.

    Raises
    ------
    ImportError
        If ``opentelemetry-sdk`` or ``opentelemetry-exporter-otlp`` is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install semcp[otel]"
        )
        raise ImportError(msg) from exc

    resource = Resource.create({"service.name": service_name})  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
    provider = TracerProvider(resource=resource)  # pyright: ignore[reportUnknownVariableType]
    _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)
    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    """Attach the OTLP gRPC exporter."""
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install semcp[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
