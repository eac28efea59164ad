from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from app.api.errors import install_error_handlers
from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.migrations import run_migrations
from app.logging import configure_logging
from app.middleware.correlation_id import CORRELATION_ID_HEADER, CorrelationIdMiddleware
from app.middleware.request_logging import RequestLoggingMiddleware
from app.otel import get_fastapi_server_request_hook, setup_otel

configure_logging()
logger = logging.getLogger("app.lifecycle")

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.run_migrations_on_startup:
        run_migrations(settings.database_url)
    logger.info("system.started", extra={"operation": "startup"})
    yield
    logger.info("system.stopped", extra={"operation": "shutdown"})

settings = get_settings()

app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
    expose_headers=[CORRELATION_ID_HEADER],
    max_age=settings.cors_max_age,
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
install_error_handlers(app)
app.include_router(api_router)

setup_otel(settings, service_version=app.version)

if not getattr(app, "_is_instrumented_by_opentelemetry", False):
    FastAPIInstrumentor().instrument_app(app, server_request_hook=get_fastapi_server_request_hook())
