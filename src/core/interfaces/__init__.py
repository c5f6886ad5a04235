"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.interfaces.stage_store import IManufacturingOrderStore, IStageStore

__all__ = [
    # Storage interfaces
    "IProductValuationStore",
    "IStageStore",
    "IManufacturingOrderStore",
]
