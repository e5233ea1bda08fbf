"""
Observability setup:
  - OpenTelemetry distributed tracing → Jaeger (via OTLP gRPC)
  - Prometheus metrics: registrations, logins, follow events, posts, timeline latency

Tracing is installed by create_app() when enabled in settings and flushed
when the app shuts down.
"""
import logging

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from prometheus_client import Counter, Histogram
from sqlalchemy.ext.asyncio import AsyncEngine

from socialapi import __version__
from socialapi.config import Settings

logger = logging.getLogger(__name__)

# ─────────────────────────── Prometheus Metrics ───────────────────────────
USERS_REGISTERED_TOTAL = Counter(
    "users_registered_total",
    "Total number of accounts created",
)

LOGIN_ATTEMPTS_TOTAL = Counter(
    "login_attempts_total",
    "Login attempts by outcome",
    ["outcome"],  # 'success' or 'failure'
)

FOLLOW_EVENTS_TOTAL = Counter(
    "follow_events_total",
    "Follow graph mutations",
    ["action"],  # 'follow' or 'unfollow'
)

POSTS_CREATED_TOTAL = Counter(
    "posts_created_total",
    "Total number of posts created",
)

TIMELINE_LATENCY = Histogram(
    "timeline_latency_seconds",
    "End-to-end latency of GET /timeline",
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)


# ─────────────────────────── OpenTelemetry Setup ──────────────────────────
# Comma-separated path patterns FastAPIInstrumentor leaves untraced
UNTRACED_URLS = "health,metrics"


def build_tracer_provider(settings: Settings) -> TracerProvider:
    """A TracerProvider tagged with this service, exporting over OTLP/gRPC."""
    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.service_name,
                "service.version": __version__,
                "deployment.environment": settings.environment,
            }
        )
    )
    try:
        exporter = OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint, insecure=True)
    except Exception as exc:
        logger.warning("OTLP exporter unavailable (%s); spans will not be exported", exc)
        return provider

    provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider


def setup_tracing(settings: Settings, engine: AsyncEngine) -> TracerProvider:
    """Install the global provider and trace every statement sent to the store."""
    provider = build_tracer_provider(settings)
    trace.set_tracer_provider(provider)
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=provider)
    logger.info("OTel tracing configured → %s", settings.otel_exporter_otlp_endpoint)
    return provider


def shutdown_tracing(provider: TracerProvider) -> None:
    """Flush buffered spans before the process exits."""
    provider.force_flush()
    provider.shutdown()
    logger.info("OTel tracing shut down")


def instrument_app(app, provider: TracerProvider) -> None:  # noqa: ANN001
    """Request spans for the API routes, skipping health and metrics."""
    FastAPIInstrumentor.instrument_app(
        app, tracer_provider=provider, excluded_urls=UNTRACED_URLS
    )
