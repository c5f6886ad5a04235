"""Core domain entities."""

from src.core.entities.inventory import (
    Batch,
    ProductValuation,
    ReferenceType,
    StockMovement,
    StockTransaction,
    TransactionDirection,
    ValuationMethod,
)
from src.core.entities.manufacturing import (
    MATERIALS_STAGE,
    TERMINAL_STAGE,
    CostComponents,
    CostType,
    ManufacturingOrder,
    ManufacturingStage,
    OverheadBasis,
    StageCostPosting,
    StageCostResult,
    StageNumber,
    StageStatus,
)

__all__ = [
    # Inventory entities
    "Batch",
    "ProductValuation",
    "ValuationMethod",
    "TransactionDirection",
    "ReferenceType",
    "StockTransaction",
    "StockMovement",
    # Manufacturing entities
    "StageNumber",
    "StageStatus",
    "OverheadBasis",
    "CostComponents",
    "CostType",
    "StageCostResult",
    "StageCostPosting",
    "ManufacturingStage",
    "ManufacturingOrder",
    "MATERIALS_STAGE",
    "TERMINAL_STAGE",
]
