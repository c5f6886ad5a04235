"""Tests for settings and logging helpers."""

import pytest
import structlog
from pydantic import ValidationError

from src.config import (
    CostingSettings,
    Settings,
    StorageSettings,
    aggregate_context,
    get_settings,
    reset_settings,
)
from src.config.logging import round_floats


class TestCostingSettings:
    def test_defaults(self):
        settings = CostingSettings()
        assert settings.reconciliation_tolerance == 0.01
        assert settings.default_valuation_method == "Weighted Average"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("COSTING_DEFAULT_VALUATION_METHOD", "FIFO")
        monkeypatch.setenv("COSTING_RECONCILIATION_TOLERANCE", "0.5")
        settings = CostingSettings()
        assert settings.default_valuation_method == "FIFO"
        assert settings.reconciliation_tolerance == 0.5

    @pytest.mark.parametrize("tolerance", [0, -0.01])
    def test_tolerance_must_be_positive(self, tolerance):
        with pytest.raises(ValidationError):
            CostingSettings(reconciliation_tolerance=tolerance)

    def test_unknown_method_rejected(self):
        with pytest.raises(ValidationError):
            CostingSettings(default_valuation_method="Standard Cost")


class TestStorageSettings:
    def test_db_path(self, tmp_path):
        settings = StorageSettings(data_dir=tmp_path, db_name="x.db")
        assert settings.db_path == tmp_path / "x.db"

    def test_data_dir_created(self, tmp_path):
        data_dir = tmp_path / "nested" / "data"
        settings = Settings(storage={"data_dir": data_dir})
        assert data_dir.is_dir()
        assert settings.storage.db_path == data_dir / "costing.db"


class TestGetSettings:
    def test_singleton(self):
        assert get_settings() is get_settings()

    def test_reset(self):
        first = get_settings()
        reset_settings()
        assert get_settings() is not first


class TestLoggingHelpers:
    def test_round_floats_only_touches_floats(self):
        event = {"event": "x", "unit_cost": 10.123456789, "qty": 3, "mo_id": "MO-1"}
        result = round_floats(None, "info", event)
        assert result["unit_cost"] == 10.1235
        assert result["qty"] == 3
        assert result["mo_id"] == "MO-1"

    def test_aggregate_context_binds_and_unbinds(self):
        structlog.contextvars.clear_contextvars()
        with aggregate_context(product_id="P-1"):
            assert structlog.contextvars.get_contextvars() == {"product_id": "P-1"}
        assert structlog.contextvars.get_contextvars() == {}

    def test_aggregate_context_unbinds_on_error(self):
        structlog.contextvars.clear_contextvars()
        with pytest.raises(RuntimeError):
            with aggregate_context(mo_id="MO-1", stage_no=10):
                raise RuntimeError("boom")
        assert structlog.contextvars.get_contextvars() == {}
