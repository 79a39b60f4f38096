"""
Distributed Tracing Setup (OpenTelemetry).

Spans: one per HTTP request (FastAPI), per production API call (httpx),
per store query (SQLAlchemy), plus the agent's own `agent.plan_iteration`
and `tool.execute` spans. Exported over OTLP/gRPC when enabled.
"""

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from slate_config.settings import Settings
from slate_obs.logging import get_logger

logger = get_logger(__name__)

_enabled = False


def setup_tracing(settings: Settings) -> bool:
    """Install the OTLP tracer provider and client instrumentation. Returns whether tracing is on."""
    global _enabled

    if not settings.OTEL_TRACES_ENABLED or _enabled:
        return _enabled

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.OTEL_SERVICE_NAME,
                "deployment.environment": settings.ENVIRONMENT,
                "slate.llm_provider": settings.LLM_PROVIDER,
            }
        )
    )
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT))
    )
    trace.set_tracer_provider(provider)

    HTTPXClientInstrumentor().instrument()
    SQLAlchemyInstrumentor().instrument(enable_commenter=False)

    _enabled = True
    logger.info(
        "tracing_enabled",
        service=settings.OTEL_SERVICE_NAME,
        endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
    )
    return True


def instrument_app(app: FastAPI) -> None:
    """Add server spans to a FastAPI app. No-op unless tracing is enabled."""
    if _enabled:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="healthz,readyz,metrics")


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer. Spans are no-ops until setup_tracing() installs a provider."""
    return trace.get_tracer(name)
