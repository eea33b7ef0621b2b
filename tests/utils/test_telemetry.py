"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from opentelemetry import trace

from mimir.utils import telemetry
from mimir.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    ATTR_AGENT_ID,
    configure_telemetry,
    get_tracer,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        assert isinstance(get_tracer("mimir.core.agent"), trace.Tracer)

    def test_default_name(self) -> None:
        assert isinstance(get_tracer(), trace.Tracer)

    def test_noop_span_accepts_attributes(self) -> None:
        with get_tracer("test.noop").start_as_current_span("agent.execute") as span:
            span.set_attribute(ATTR_AGENT_ID, "agent-1")


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry()

    def test_installs_sdk_provider(self) -> None:
        sdk_trace = pytest.importorskip("opentelemetry.sdk.trace")

        with patch.object(telemetry.trace, "set_tracer_provider") as mock_set:
            configure_telemetry(service_name="mimir-test", export_to_console=True)

        provider = mock_set.call_args.args[0]
        assert isinstance(provider, sdk_trace.TracerProvider)
        assert provider.resource.attributes["service.name"] == "mimir-test"

    def test_otlp_raises_without_exporter(self) -> None:
        pytest.importorskip("opentelemetry.sdk.trace")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(export_to_console=False, otlp_endpoint="http://localhost:4317")


class TestAttributeConstants:
    def test_attributes_are_namespaced(self) -> None:
        names = [value for key, value in vars(telemetry).items() if key.startswith("ATTR_")]
        assert names
        assert all(name.startswith("mimir.") for name in names)

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "mimir"
