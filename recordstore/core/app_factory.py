"""Application factory for the FastAPI app.

This is the composition root: it builds the schema validator, document
store, rate limiter and record service from settings and attaches them to
``app.state``. Nothing else holds engine state.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from recordstore.adapters.storage.base import AbstractDocumentStore
from recordstore.adapters.storage.json_file import JsonFileDocumentStore
from recordstore.api.routes import health_router, records_router
from recordstore.core.config import Settings, settings as default_settings
from recordstore.core.exception_handlers import setup_exception_handlers
from recordstore.core.logging import configure_logging
from recordstore.core.middleware import request_id_middleware
from recordstore.core.rate_limit import build_rate_limiter
from recordstore.schemas.record_schema import load_schema_definition
from recordstore.services.record_service import RecordService
from recordstore.services.schema_validator import SchemaValidator

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {
        "name": "Records",
        "description": "Schema-validated CRUD over the JSON record document.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]


def build_record_service(
    app_settings: Settings,
    *,
    store: AbstractDocumentStore | None = None,
) -> RecordService:
    """Wire the record service from settings.

    Args:
        app_settings: Resolved application settings.
        store: Optional pre-built store (tests, alternative backends).

    Returns:
        RecordService owning its own store and limiter.
    """
    if store is None:
        schema = load_schema_definition(app_settings.store.schema_path)
        store = JsonFileDocumentStore(
            app_settings.store.file_path,
            validator=SchemaValidator(schema),
        )
    limiter = build_rate_limiter(app_settings.rate_limit)
    return RecordService(store=store, limiter=limiter)


def create_app(
    app_settings: Settings | None = None,
    *,
    store: AbstractDocumentStore | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to use; defaults to the global settings.
        store: Optional pre-built document store.
        configure_logs: Whether to (re)configure the root logger.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log)

    app = FastAPI(
        title="Record Store API",
        description=(
            "CRUD API over a file-backed JSON record store. Records are "
            "validated against a schema before every write, and each client "
            "IP is rate limited."
        ),
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
    )
    app.state.settings = cfg
    app.state.record_service = build_record_service(cfg, store=store)

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(records_router)
    app.include_router(health_router)

    logger.info(
        "app.created",
        extra={
            "app_env": cfg.app_env,
            "rate_limit_enabled": cfg.rate_limit.enabled,
            "rate_limit_requests": cfg.rate_limit.requests,
            "rate_limit_window_s": cfg.rate_limit.window_seconds,
        },
    )
    return app
