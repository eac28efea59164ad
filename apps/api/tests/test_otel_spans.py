from __future__ import annotations

import uuid
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings
from app.core.database import Base, get_db
from app.main import app
from app.otel import setup_inmemory_otel, setup_otel


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def setup_env() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def span_exporter() -> InMemorySpanExporter:
    exporter = setup_inmemory_otel("subscriptions-api")
    exporter.clear()
    return exporter


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_request_span_contains_correlation_id(client: TestClient, span_exporter: InMemorySpanExporter) -> None:
    response = client.get(f"/subscriptions/{uuid.uuid4()}", headers={"X-Correlation-Id": "otel-corr-1"})
    assert response.status_code == 404

    spans = span_exporter.get_finished_spans()
    assert spans
    assert any(span.attributes.get("correlation_id") == "otel-corr-1" for span in spans)


def test_service_operations_emit_named_spans(client: TestClient, span_exporter: InMemorySpanExporter) -> None:
    created = client.post(
        "/subscriptions",
        json={
            "service_name": "Netflix",
            "price": 999,
            "user_id": str(uuid.uuid4()),
            "start_date": "08-2025",
        },
    )
    assert created.status_code == 201
    subscription_id = created.json()["id"]

    assert client.get(f"/subscriptions/{subscription_id}").status_code == 200

    spans = span_exporter.get_finished_spans()
    names = {span.name for span in spans}
    assert {"subscription.create", "subscription.get"} <= names
    assert any(
        span.name == "subscription.get" and span.attributes.get("subscription.subscription_id") == subscription_id
        for span in spans
    )


def test_setup_otel_is_noop_when_disabled() -> None:
    assert setup_otel(Settings(otel_enabled=False)) is None
