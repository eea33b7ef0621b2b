"""OpenTelemetry tracing for the agent loop and tool execution.

``get_tracer()`` hands out API tracers, which are no-ops until
:func:`configure_telemetry` installs an SDK ``TracerProvider``.  Call sites
therefore instrument unconditionally::

    from mimir.utils.telemetry import ATTR_TOOL_NAME, get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("tool.execute") as span:
        span.set_attribute(ATTR_TOOL_NAME, "bash")

The SDK ships in the ``otel`` extra (``pip install mimir-agent[otel]``).
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

ATTR_AGENT_ID = "mimir.agent.id"
ATTR_AGENT_ROLE = "mimir.agent.role"
ATTR_ITERATION = "mimir.iteration"
ATTR_STATUS = "mimir.status"
ATTR_MODEL = "mimir.model"
ATTR_TOKENS_INPUT = "mimir.tokens.input"
ATTR_TOKENS_OUTPUT = "mimir.tokens.output"
ATTR_COST = "mimir.cost"
ATTR_TOOL_NAME = "mimir.tool.name"
ATTR_TOOL_SUCCESS = "mimir.tool.success"
ATTR_EXECUTION_MODE = "mimir.execution.mode"

_INSTRUMENTATION_NAME = "mimir"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name* (no-op unless telemetry is configured)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "mimir",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider.

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        Print finished spans to stdout.
    otlp_endpoint:
        Also ship spans over OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If ``opentelemetry-sdk`` (or the OTLP exporter, when requested) is
        not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor
    except ImportError as exc:
        raise ImportError(
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install mimir-agent[otel]"
        ) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if export_to_console:
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter

        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))

    trace.set_tracer_provider(provider)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    except ImportError as exc:
        raise ImportError(
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install mimir-agent[otel]"
        ) from exc
    return OTLPSpanExporter(endpoint=endpoint)
