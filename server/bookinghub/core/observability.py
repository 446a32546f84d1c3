"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

from .config import settings

SERVICE_NAME = "bookinghub-api"
SERVICE_VERSION = "1.0.0"

# Prometheus metrics
REGISTRY = CollectorRegistry()

BOOKING_REQUESTS_CREATED = Counter(
    'booking_requests_created_total',
    'Total booking requests accepted at intake',
    registry=REGISTRY
)

ASSIGNMENTS_CREATED = Counter(
    'property_assignments_created_total',
    'Total properties assigned to requested date ranges',
    registry=REGISTRY
)

ASSIGNMENTS_REJECTED = Counter(
    'property_assignments_rejected_total',
    'Total property assignments rejected by a conflict check',
    ['reason'],
    registry=REGISTRY
)

PAYMENT_SESSIONS_CREATED = Counter(
    'payment_sessions_created_total',
    'Total checkout sessions opened',
    registry=REGISTRY
)

PAYMENT_EVENTS = Counter(
    'payment_webhook_events_total',
    'Verified payment webhook events by type',
    ['event_type'],
    registry=REGISTRY
)

BOOKING_STATUS_CHANGES = Counter(
    'booking_admin_status_changes_total',
    'Booking status changes made by admins',
    ['status'],
    registry=REGISTRY
)

NOTIFICATIONS_FAILED = Counter(
    'crm_notifications_failed_total',
    'CRM notifications that could not be delivered',
    ['event_type'],
    registry=REGISTRY
)

STALE_UNAVAILABLE_PROPERTIES = Gauge(
    'properties_stale_unavailable',
    'Properties flagged unavailable with no current or future assignment',
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": SERVICE_VERSION,
        "environment": settings.environment,
    })


def setup_tracing():
    """Setup OpenTelemetry tracing."""
    provider = TracerProvider(resource=_resource())

    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))

    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def setup_metrics():
    """Setup OpenTelemetry metrics."""
    if settings.otlp_endpoint:
        otlp_exporter = OTLPMetricExporter(endpoint=settings.otlp_endpoint)
        reader = PeriodicExportingMetricReader(exporter=otlp_exporter, export_interval_millis=60000)
        metrics.set_meter_provider(MeterProvider(resource=_resource(), metric_readers=[reader]))

    return metrics.get_meter(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument the application's SQLAlchemy engine with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_booking_request_created():
        BOOKING_REQUESTS_CREATED.inc()

    @staticmethod
    def record_assignment_created():
        ASSIGNMENTS_CREATED.inc()

    @staticmethod
    def record_assignment_rejected(reason: str):
        """Record an assignment refused by a conflict check."""
        ASSIGNMENTS_REJECTED.labels(reason=reason).inc()

    @staticmethod
    def record_payment_session_created():
        PAYMENT_SESSIONS_CREATED.inc()

    @staticmethod
    def record_payment_event(event_type: str):
        PAYMENT_EVENTS.labels(event_type=event_type).inc()

    @staticmethod
    def record_booking_status_change(status: str):
        BOOKING_STATUS_CHANGES.labels(status=status).inc()

    @staticmethod
    def record_notification_failed(event_type: str):
        NOTIFICATIONS_FAILED.labels(event_type=event_type).inc()

    @staticmethod
    def set_stale_unavailable_properties(count: int):
        """Set the number of properties whose availability flag looks stale."""
        STALE_UNAVAILABLE_PROPERTIES.set(count)


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


class StructuredLogger:
    """Structured logger with business context."""

    def __init__(self, name_or_logger):
        if isinstance(name_or_logger, str):
            self.logger = structlog.get_logger(name_or_logger)
        else:
            self.logger = name_or_logger

    def info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)

    def debug(self, message: str, **kwargs):
        self.logger.debug(message, **kwargs)

    def with_context(self, **kwargs):
        """Add context to logger."""
        return StructuredLogger(self.logger.bind(**kwargs))


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name)
