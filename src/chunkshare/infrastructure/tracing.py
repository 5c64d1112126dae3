"""OpenTelemetry tracing configuration for chunkshare."""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from chunkshare.infrastructure.config import ObservabilityConfig, get_config

SERVICE_NAME = "chunkshare"


def setup_tracing(observability: ObservabilityConfig | None = None) -> trace.Tracer:
    """Configure OpenTelemetry tracing.

    Spans go to the OTLP endpoint when one is configured, to the console
    otherwise.
    """
    observability = observability or get_config().observability

    resource = Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": "0.1.0",
            "deployment.environment": observability.environment,
        }
    )

    provider = TracerProvider(resource=resource)

    if observability.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(
            endpoint=observability.otlp_endpoint,
            insecure=True,
        )
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
    else:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    return trace.get_tracer(SERVICE_NAME)


def get_tracer(name: str = SERVICE_NAME) -> trace.Tracer:
    """Get a tracer instance."""
    return trace.get_tracer(name)
