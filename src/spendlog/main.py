from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from spendlog import __version__
from spendlog.api.middleware.error_handler import (
    handle_generic_error,
    handle_ingestion_error,
    handle_validation_error,
)
from spendlog.api.middleware.logging import RequestLoggingMiddleware
from spendlog.api.v1 import router as api_router
from spendlog.api.v1.health import router as health_router
from spendlog.categorization.rules import Classifier
from spendlog.config import get_settings
from spendlog.core.exceptions import IngestionError
from spendlog.core.logging import configure_logging
from spendlog.storage.sheet import SheetSink
from spendlog.storage.staging import StagingStore, create_redis_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = get_settings()
    configure_logging(settings)

    app.state.classifier = Classifier.from_path(
        settings.rules_path, case_sensitive=settings.category_match_case_sensitive
    )
    redis = create_redis_client(settings)
    app.state.staging = StagingStore(redis, key_prefix=settings.staging_key_prefix)
    app.state.sink = SheetSink.from_settings(settings)

    yield

    # Shutdown
    await app.state.sink.close()
    await redis.aclose()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="spendlog",
        description="monobank webhook → categorized Google Sheets spending log",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(IngestionError, handle_ingestion_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(health_router)
    app.include_router(api_router)

    return app


app = create_app()
