"""OpenTelemetry configuration and setup."""

import logging
import os
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger import jsonlogger

logger = logging.getLogger(__name__)

SERVICE_NAME = "ordering-svc"


def get_service_resource() -> Resource:
    """Create OpenTelemetry resource identifying this service and location.

    Returns:
        Resource with service name, environment and restaurant location
    """
    return Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME),
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            "restaurant.location": os.getenv("RESTAURANT_LOCATION", "default"),
        }
    )


def setup_tracing(resource: Resource, otlp_endpoint: str) -> None:
    """Install a tracer provider exporting spans over OTLP/HTTP."""
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{otlp_endpoint}/v1/traces")))
    trace.set_tracer_provider(provider)

    logger.info(f"OpenTelemetry tracing configured with endpoint: {otlp_endpoint}")


def setup_metrics(resource: Resource, otlp_endpoint: str) -> None:
    """Install a meter provider exporting metrics over OTLP/HTTP every minute."""
    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=f"{otlp_endpoint}/v1/metrics"), export_interval_millis=60000
    )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))

    logger.info(f"OpenTelemetry metrics configured with endpoint: {otlp_endpoint}")


def exporters_enabled() -> bool:
    """Exporters stay off in tests and when OTEL_ENABLED=false."""
    if os.getenv("ENVIRONMENT", "development") == "test":
        return False
    return os.getenv("OTEL_ENABLED", "true").lower() == "true"


def setup_observability(app: Any = None) -> None:
    """Initialize tracing, metrics and instrumentation.

    Without exporters the OpenTelemetry API falls back to no-op providers,
    so traced functions and metric calls still work.

    Args:
        app: Optional FastAPI application to instrument
    """
    if exporters_enabled():
        resource = get_service_resource()
        otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318")
        setup_tracing(resource, otlp_endpoint)
        setup_metrics(resource, otlp_endpoint)

        # Payment gateway calls go through httpx
        HTTPXClientInstrumentor().instrument()

        if app is not None:
            FastAPIInstrumentor.instrument_app(app)
            logger.info("FastAPI application instrumented")

        logger.info("OpenTelemetry observability fully configured")
    else:
        logger.info("OpenTelemetry exporters disabled")


def configure_logging(log_level: str = "INFO") -> None:
    """Send JSON log lines to stderr, tagged with the service name.

    LOG_LEVEL in the environment overrides ``log_level``. Existing root
    handlers are replaced so repeated calls do not duplicate output.
    """
    requested = os.getenv("LOG_LEVEL", log_level).upper()
    level = logging.getLevelName(requested)
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
            static_fields={"service": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME)},
            timestamp=True,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))

    logger.info(f"JSON logging enabled at {logging.getLevelName(level)}")
