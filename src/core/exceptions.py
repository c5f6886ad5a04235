"""
Domain exceptions for the costing engine.

Every engine operation either returns a new snapshot or raises one of these,
leaving the caller's snapshot untouched. None of them are transient except
ConcurrencyConflictError, which the persistence layer raises on a stale
snapshot version.
"""

from typing import Any


class CostingError(Exception):
    """Base exception for all costing engine errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(CostingError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidStageTransitionError(ValidationError):
    """Stage operation not allowed in the stage's current state or position.

    Raised for status moves that skip a step or reopen a closed stage, and
    for direct materials posted to a stage other than the materials entry
    stage.
    """

    def __init__(self, stage_no: int, reason: str, status: str | None = None):
        super().__init__(field="stage", message=reason, value=stage_no)
        self.code = "INVALID_STAGE_TRANSITION"
        self.details.update({"stage_no": stage_no, "status": status})


# Inventory Exceptions
class InventoryError(CostingError):
    """Base exception for inventory valuation operations."""

    pass


class InsufficientInventoryError(InventoryError):
    """Outgoing quantity exceeds available stock."""

    def __init__(self, item_id: str, required: float, available: float):
        super().__init__(
            f"Insufficient stock for {item_id}: required {required}, available {available}",
            code="INSUFFICIENT_INVENTORY",
            details={
                "item_id": item_id,
                "required": required,
                "available": available,
            },
        )
        self.item_id = item_id
        self.required = required
        self.available = available


class QueueIntegrityError(InventoryError):
    """Batch queue does not reconcile to the product's quantity or value.

    Recoverable through BatchQueueInvariant.repair, which is lossy.
    """

    def __init__(self, item_id: str, quantity_delta: float, value_delta: float):
        super().__init__(
            f"Batch queue for {item_id} does not reconcile "
            f"(quantity delta {quantity_delta}, value delta {value_delta})",
            code="QUEUE_INTEGRITY",
            details={
                "item_id": item_id,
                "quantity_delta": quantity_delta,
                "value_delta": value_delta,
            },
        )


# Storage Exceptions
class StorageError(CostingError):
    """Base exception for storage operations."""

    pass


class ProductNotFoundError(StorageError):
    """Product valuation snapshot not found."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class StageNotFoundError(StorageError):
    """No stage record for the manufacturing order and stage number."""

    def __init__(self, mo_id: str, stage_no: int):
        super().__init__(
            f"Stage {int(stage_no)} not found for MO {mo_id}",
            code="STAGE_NOT_FOUND",
            details={"mo_id": mo_id, "stage_no": int(stage_no)},
        )


class ManufacturingOrderNotFoundError(StorageError):
    """Manufacturing order not found."""

    def __init__(self, mo_id: str):
        super().__init__(
            f"Manufacturing order not found: {mo_id}",
            code="MANUFACTURING_ORDER_NOT_FOUND",
            details={"mo_id": mo_id},
        )


class ConcurrencyConflictError(StorageError):
    """Snapshot was modified by another writer since it was loaded."""

    def __init__(self, aggregate: str, expected_version: int, actual_version: int | None):
        super().__init__(
            f"Concurrent update on {aggregate}: expected version "
            f"{expected_version}, found {actual_version}",
            code="CONCURRENCY_CONFLICT",
            details={
                "aggregate": aggregate,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(CostingError):
    """Configuration error."""

    pass
