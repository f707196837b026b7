"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any import that loads settings, so the
global settings never point at a real document file.
"""

import os
import tempfile
from pathlib import Path

# CRITICAL: Set these before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault(
    "STORE_FILE_PATH",
    str(Path(tempfile.gettempdir()) / "recordstore-tests" / "db.json"),
)
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from recordstore.adapters.storage.json_file import JsonFileDocumentStore
from recordstore.core.app_factory import create_app
from recordstore.core.config import (
    LogSettings,
    RateLimitSettings,
    Settings,
    StoreSettings,
)
from recordstore.schemas.record_schema import DEFAULT_SCHEMA
from recordstore.services.schema_validator import SchemaValidator


@pytest.fixture
def validator() -> SchemaValidator:
    """Validator for the default people schema (id, name, age)."""
    return SchemaValidator(DEFAULT_SCHEMA)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "db.json"


@pytest.fixture
def store(db_path: Path, validator: SchemaValidator) -> JsonFileDocumentStore:
    return JsonFileDocumentStore(db_path, validator=validator)


@pytest.fixture
def make_settings(db_path: Path):
    """Build isolated settings pointing at a temporary document."""

    def _make(**rate_limit: object) -> Settings:
        return Settings(
            store=StoreSettings(file_path=db_path),
            rate_limit=RateLimitSettings(**{"requests": 1000, **rate_limit}),
            log=LogSettings(level="WARNING"),
        )

    return _make


@pytest.fixture
def client(make_settings) -> TestClient:
    """Test client with a generous rate limit."""
    app = create_app(make_settings(), configure_logs=False)
    return TestClient(app)
