from __future__ import annotations

from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from app.context import clean_correlation_id
from app.core.config import Settings


_configured = False
_provider: TracerProvider | None = None


def _get_or_create_provider(service_name: str, service_version: str = "0.1.0") -> TracerProvider:
    global _provider

    if _provider is not None:
        return _provider

    resource = Resource.create({"service.name": service_name, "service.version": service_version})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)
    _provider = provider
    return provider


def setup_otel(settings: Settings, service_version: str = "0.1.0") -> TracerProvider | None:
    """Install the process-wide tracer provider once, with the exporters enabled in settings."""
    global _configured

    if not settings.otel_enabled:
        return None

    provider = _get_or_create_provider(settings.otel_service_name, service_version)
    if _configured:
        return provider

    if settings.otel_exporter_otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)))

    if settings.otel_console_exporter:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    _configured = True
    return provider


def setup_inmemory_otel(service_name: str = "subscriptions-api") -> InMemorySpanExporter:
    provider = _get_or_create_provider(service_name)
    exporter = InMemorySpanExporter()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def set_span_fields(span: trace.Span, prefix: str, fields: dict[str, Any]) -> None:
    for key, value in fields.items():
        if value is not None:
            span.set_attribute(f"{prefix}.{key}", str(value))


def get_fastapi_server_request_hook():
    def server_request_hook(span, scope: dict[str, Any]) -> None:  # type: ignore[no-untyped-def]
        if span is None or not span.is_recording():
            return
        headers = dict(scope.get("headers", []))
        raw = headers.get(b"x-correlation-id")
        correlation_id = clean_correlation_id(raw.decode("latin-1")) if raw else None
        if correlation_id:
            span.set_attribute("correlation_id", correlation_id)

    return server_request_hook
