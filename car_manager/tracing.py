"""
OpenTelemetry instrumentation configuration.

Tracing is opt-in (ENABLE_TRACING); when disabled both functions are no-ops.
"""

import os

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor


def configure_opentelemetry(
    service_name: str,
    service_version: str = "1.0.0",
    otlp_endpoint: str = "localhost:4317",
    enable_tracing: bool = True,
) -> None:
    """
    Configure OpenTelemetry tracing for the service.

    Args:
        service_name: Name of the service
        service_version: Version of the service
        otlp_endpoint: OTLP collector endpoint
        enable_tracing: Whether to enable tracing
    """
    if not enable_tracing:
        return

    resource = Resource.create(
        {
            SERVICE_NAME: service_name,
            SERVICE_VERSION: service_version,
            "deployment.environment": os.getenv("ENVIRONMENT", "local"),
        }
    )

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
    )
    trace.set_tracer_provider(tracer_provider)


def instrument_fastapi(
    app: FastAPI, excluded_urls: str = "/health,/metrics,/static", enable_tracing: bool = True
) -> None:
    """
    Instrument a FastAPI application with OpenTelemetry.

    Args:
        app: FastAPI application instance
        excluded_urls: Comma-separated list of URL patterns to exclude from tracing
        enable_tracing: Whether to instrument at all
    """
    if not enable_tracing:
        return

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=excluded_urls,
        tracer_provider=trace.get_tracer_provider(),
    )
