"""Tracing for the agents, on top of the OpenTelemetry API.

Code asks for a tracer with :func:`get_tracer` and opens spans freely; while
no SDK is configured every span is a no-op. ``mcp-agents serve --telemetry``
calls :func:`configure_telemetry`, which needs the ``otel`` extra
(``pip install mcp-agents[otel]``).

Usage::

    from mcp_agents.utils.telemetry import ATTR_METHOD, get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("mcp.request") as span:
        span.set_attribute(ATTR_METHOD, "tools/call")

Spans go to stderr or to an OTLP collector, never to stdout: stdout carries
the JSON-RPC stream.
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

from mcp_agents import __version__

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_AGENT = "mcp.agent"
ATTR_METHOD = "mcp.method"
ATTR_REQUEST_ID = "mcp.request.id"
ATTR_TOOL_NAME = "mcp.tool.name"
ATTR_RESOURCE_URI = "mcp.resource.uri"
ATTR_ERROR = "mcp.error"

_INSTRUMENTATION_NAME = "mcp_agents"

_SDK_MISSING = (
    "opentelemetry-sdk is required for configure_telemetry(). "
    "Install it with: pip install mcp-agents[otel]"
)
_OTLP_MISSING = (
    "opentelemetry-exporter-otlp is required for OTLP export. "
    "Install it with: pip install mcp-agents[otel]"
)


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name*; a no-op until :func:`configure_telemetry` runs."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME, __version__)


def configure_telemetry(
    agent: str,
    *,
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a global tracer provider for *agent*.

    The resource is named ``mcp-agents-<agent>``. With *export_to_console*
    spans are printed as JSON on stderr; with *otlp_endpoint* they are also
    batched to that OTLP/gRPC collector.

    Raises:
        ImportError: If ``opentelemetry-sdk`` is missing, or the OTLP
            exporter is missing while *otlp_endpoint* is set.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        raise ImportError(_SDK_MISSING) from exc

    resource = Resource.create(
        {
            "service.name": f"mcp-agents-{agent}",
            "service.version": __version__,
            ATTR_AGENT: agent,
        }
    )
    provider = TracerProvider(resource=resource)
    for processor in _span_processors(export_to_console, otlp_endpoint):
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _span_processors(export_to_console: bool, otlp_endpoint: str | None) -> list[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            raise ImportError(_OTLP_MISSING) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    return processors
