"""
Service factory functions for dependency injection.

This module wires configuration into the core costing services. Use cases
should import from here.

Every call returns a fresh instance. The engine services hold no state, so
there is nothing to share, and a fresh instance per call means no cached
tenant or process-wide state can leak between callers.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from src.config import Settings, get_settings
from src.core.entities.inventory import ValuationMethod
from src.core.exceptions import ConfigurationError
from src.core.services import (
    BatchQueueInvariant,
    ProcessCostManager,
    StockTransactionProcessor,
)


def _resolve_settings(settings: Settings | None) -> Settings:
    if settings is not None:
        return settings
    try:
        return get_settings()
    except ValueError as e:
        raise ConfigurationError(
            "Invalid costing configuration", details={"error": str(e)}
        ) from e


def get_batch_queue_invariant(settings: Settings | None = None) -> BatchQueueInvariant:
    """Create a BatchQueueInvariant using the configured tolerance."""
    settings = _resolve_settings(settings)
    return BatchQueueInvariant(tolerance=settings.costing.reconciliation_tolerance)


def get_stock_processor(settings: Settings | None = None) -> StockTransactionProcessor:
    """
    Create a StockTransactionProcessor for one unit of work.

    Args:
        settings: Optional settings override (defaults to get_settings())

    Returns:
        Processor bound to the configured reconciliation tolerance
    """
    return StockTransactionProcessor(invariant=get_batch_queue_invariant(settings))


def get_process_cost_manager() -> ProcessCostManager:
    """Create a ProcessCostManager for one unit of work."""
    return ProcessCostManager()


def get_default_valuation_method(settings: Settings | None = None) -> ValuationMethod:
    """Valuation method assigned to products seen for the first time."""
    settings = _resolve_settings(settings)
    return ValuationMethod(settings.costing.default_valuation_method)
