from __future__ import annotations

import uuid
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.context import clean_correlation_id
from app.core.config import get_settings
from app.core.database import Base, get_db
from app.main import app


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
def clear_settings() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_generated_correlation_id_returned_in_header_and_error_envelope(client: TestClient) -> None:
    response = client.get(f"/subscriptions/{uuid.uuid4()}")
    assert response.status_code == 404
    header_value = response.headers.get("x-correlation-id")
    assert header_value
    body = response.json()
    assert body["correlation_id"] == header_value


def test_correlation_id_respected_when_provided(client: TestClient) -> None:
    response = client.get(f"/subscriptions/{uuid.uuid4()}", headers={"X-Correlation-Id": "abc-123"})
    assert response.status_code == 404
    assert response.headers.get("x-correlation-id") == "abc-123"
    assert response.json()["correlation_id"] == "abc-123"


def test_validation_envelope_includes_correlation_id(client: TestClient) -> None:
    response = client.post("/subscriptions", json={"price": 1}, headers={"X-Correlation-Id": "corr-422"})
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["correlation_id"] == "corr-422"
    assert {"service_name", "user_id", "start_date"} <= set(body["details"])


def test_successful_responses_carry_correlation_header(client: TestClient) -> None:
    response = client.get("/health", headers={"X-Correlation-Id": "corr-health"})
    assert response.status_code == 200
    assert response.headers.get("x-correlation-id") == "corr-health"
    assert response.json()["status"] == "ok"


@pytest.mark.parametrize("raw", ["has spaces", "x" * 129, "a;b", "<script>"])
def test_malformed_correlation_id_is_replaced(client: TestClient, raw: str) -> None:
    response = client.get("/health", headers={"X-Correlation-Id": raw})
    assert response.status_code == 200
    header_value = response.headers.get("x-correlation-id")
    assert header_value
    assert header_value != raw
    uuid.UUID(header_value)


def test_clean_correlation_id() -> None:
    assert clean_correlation_id("  trace-1:abc.def_2  ") == "trace-1:abc.def_2"
    assert clean_correlation_id("") is None
    assert clean_correlation_id(None) is None
    assert clean_correlation_id("x" * 128) == "x" * 128
    assert clean_correlation_id("x" * 129) is None
