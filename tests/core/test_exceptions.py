"""Unit tests for domain exceptions."""

import pytest

from src.core.exceptions import (
    ConcurrencyConflictError,
    ConfigurationError,
    CostingError,
    DatabaseError,
    InsufficientInventoryError,
    InvalidStageTransitionError,
    InventoryError,
    ManufacturingOrderNotFoundError,
    ProductNotFoundError,
    QueueIntegrityError,
    StageNotFoundError,
    StorageError,
    ValidationError,
)
from src.core.entities.manufacturing import StageNumber


class TestCostingError:
    """Tests for base CostingError exception."""

    def test_basic_initialization(self):
        error = CostingError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code == "CostingError"
        assert error.details == {}

    def test_with_custom_code(self):
        error = CostingError("Error message", code="CUSTOM_ERROR")
        assert error.code == "CUSTOM_ERROR"

    def test_to_dict(self):
        error = CostingError("Test error", code="TEST_CODE", details={"extra": "info"})
        assert error.to_dict() == {
            "error": "TEST_CODE",
            "message": "Test error",
            "details": {"extra": "info"},
        }

    def test_is_exception(self):
        with pytest.raises(CostingError):
            raise CostingError("boom")


class TestValidationError:
    def test_fields(self):
        error = ValidationError("quantity", "must be a positive number", -5)
        assert error.code == "VALIDATION_ERROR"
        assert error.details["field"] == "quantity"
        assert error.details["value"] == "-5"
        assert "quantity" in error.message

    def test_none_value(self):
        error = ValidationError("rate", "missing")
        assert error.details["value"] is None

    def test_long_value_truncated(self):
        error = ValidationError("notes", "too long", "x" * 500)
        assert len(error.details["value"]) == 100


class TestInvalidStageTransitionError:
    def test_is_validation_error(self):
        error = InvalidStageTransitionError(20, "direct materials only on stage 10")
        assert isinstance(error, ValidationError)
        assert isinstance(error, CostingError)

    def test_code_and_details(self):
        error = InvalidStageTransitionError(30, "cannot move", status="closed")
        assert error.code == "INVALID_STAGE_TRANSITION"
        assert error.details["stage_no"] == 30
        assert error.details["status"] == "closed"


class TestInventoryErrors:
    def test_insufficient_inventory(self):
        error = InsufficientInventoryError(item_id="P-1", required=60, available=40)
        assert isinstance(error, InventoryError)
        assert error.code == "INSUFFICIENT_INVENTORY"
        assert error.item_id == "P-1"
        assert error.required == 60
        assert error.available == 40
        assert error.details == {"item_id": "P-1", "required": 60, "available": 40}

    def test_queue_integrity(self):
        error = QueueIntegrityError(item_id="P-1", quantity_delta=5.0, value_delta=-2.5)
        assert isinstance(error, InventoryError)
        assert error.code == "QUEUE_INTEGRITY"
        assert error.details["quantity_delta"] == 5.0
        assert error.details["value_delta"] == -2.5


class TestStorageErrors:
    def test_product_not_found(self):
        error = ProductNotFoundError("P-404")
        assert isinstance(error, StorageError)
        assert error.code == "PRODUCT_NOT_FOUND"
        assert "P-404" in error.message

    def test_stage_not_found_accepts_enum(self):
        error = StageNotFoundError("MO-1", StageNumber.LID_FORMATION)
        assert error.code == "STAGE_NOT_FOUND"
        assert error.details == {"mo_id": "MO-1", "stage_no": 30}
        assert "Stage 30" in error.message

    def test_order_not_found(self):
        error = ManufacturingOrderNotFoundError("MO-9")
        assert error.code == "MANUFACTURING_ORDER_NOT_FOUND"
        assert error.details["mo_id"] == "MO-9"

    def test_concurrency_conflict(self):
        error = ConcurrencyConflictError("product:P-1", expected_version=3, actual_version=4)
        assert isinstance(error, StorageError)
        assert error.code == "CONCURRENCY_CONFLICT"
        assert error.details["expected_version"] == 3
        assert error.details["actual_version"] == 4

    def test_database_error(self):
        error = DatabaseError("create_stage", "UNIQUE constraint failed")
        assert error.code == "DATABASE_ERROR"
        assert error.details["operation"] == "create_stage"


class TestConfigurationError:
    def test_default_code(self):
        error = ConfigurationError("bad tolerance")
        assert error.code == "ConfigurationError"
