"""Pytest fixtures for SQLite storage tests."""

from pathlib import Path

import pytest

from src.infrastructure.storage.sqlite import (
    SQLiteManufacturingOrderStore,
    SQLiteProductValuationStore,
    SQLiteStageStore,
)


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def product_store(sqlite_pool) -> SQLiteProductValuationStore:
    return SQLiteProductValuationStore()


@pytest.fixture
def order_store(sqlite_pool) -> SQLiteManufacturingOrderStore:
    return SQLiteManufacturingOrderStore()


@pytest.fixture
def stage_store(sqlite_pool) -> SQLiteStageStore:
    return SQLiteStageStore()
