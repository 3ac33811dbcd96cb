"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from opentelemetry import trace

from semcp.utils.telemetry import (
    ATTR_EXIT_CODE,
    ATTR_SESSION_NAME,
    _INSTRUMENTATION_NAME,
    configure_telemetry,
    get_tracer,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        tracer = get_tracer("test.module")
        assert isinstance(tracer, trace.Tracer)

    def test_default_name(self) -> None:
        tracer = get_tracer()
        assert isinstance(tracer, trace.Tracer)

    def test_noop_span(self) -> None:
        """Without SDK configured, spans should be no-ops."""
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("session.run") as span:
            span.set_attribute(ATTR_SESSION_NAME, "snpx-1-2")
            span.set_attribute(ATTR_EXIT_CODE, 0)


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        """configure_telemetry requires opentelemetry-sdk."""
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry(otlp_endpoint="http://localhost:4317")

    def test_otlp_raises_without_exporter(self) -> None:
        """OTLP export requires opentelemetry-exporter-otlp."""
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(otlp_endpoint="http://localhost:4317")


class TestAttributeConstants:
    def test_constants_are_namespaced(self) -> None:
        assert ATTR_SESSION_NAME.startswith("semcp.")
        assert ATTR_EXIT_CODE.startswith("semcp.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "semcp"
