"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.config import reset_settings
from src.core.entities.inventory import Batch, ProductValuation, ValuationMethod
from src.core.entities.manufacturing import ManufacturingStage, StageNumber
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Every test starts from default settings."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def empty_wa_product() -> ProductValuation:
    """Empty Weighted Average product."""
    return ProductValuation(product_id="P-001", valuation_method=ValuationMethod.WEIGHTED_AVERAGE)


@pytest.fixture
def fifo_product() -> ProductValuation:
    """FIFO product holding [50@10, 30@12]."""
    return ProductValuation(
        product_id="P-FIFO",
        valuation_method=ValuationMethod.FIFO,
        quantity=80.0,
        current_rate=10.0,
        total_value=860.0,
        batch_queue=(Batch(quantity=50, rate=10), Batch(quantity=30, rate=12)),
    )


@pytest.fixture
def lifo_product() -> ProductValuation:
    """LIFO product holding [50@10, 30@12]."""
    return ProductValuation(
        product_id="P-LIFO",
        valuation_method=ValuationMethod.LIFO,
        quantity=80.0,
        current_rate=12.0,
        total_value=860.0,
        batch_queue=(Batch(quantity=50, rate=10), Batch(quantity=30, rate=12)),
    )


@pytest.fixture
def rolling_stage() -> ManufacturingStage:
    """Stage 10 of MO-001, still in planning."""
    return ManufacturingStage(mo_id="MO-001", stage_no=StageNumber.ROLLING)


@pytest.fixture
async def migrated_db(tmp_path: Path) -> Path:
    """Temp database with every migration applied."""
    db_path = tmp_path / "costing_test.db"
    await initialize_database(db_path, create_backup_before=False)
    return db_path


@pytest.fixture
async def sqlite_pool(migrated_db: Path) -> AsyncGenerator[Path, None]:
    """Point the global connection pool at the migrated temp database."""
    import src.infrastructure.storage.sqlite.connection as conn_module

    conn_module._pool = None
    mock_settings = MagicMock()
    mock_settings.storage.db_path = migrated_db
    mock_settings.storage.pool_size = 2
    mock_settings.storage.busy_timeout = 5000

    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield migrated_db
        finally:
            await conn_module.close_pool()
