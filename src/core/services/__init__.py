"""
Core costing services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/exceptions.py

NO infrastructure imports. Everything here is synchronous and returns new
snapshots instead of mutating its inputs.
"""

from src.core.services.batch_queue import (
    DEFAULT_TOLERANCE,
    BatchQueueInvariant,
    QueueDiscrepancy,
)
from src.core.services.process_costing import (
    OrderCostSummary,
    ProcessCostManager,
    StageCompletion,
    next_stage_no,
    to_stage_number,
)
from src.core.services.stock_processor import (
    BatchProcessingResult,
    StockTransactionProcessor,
    TransactionResult,
    ValuationMethodConversion,
    reference_direction,
)
from src.core.services.valuation_report import (
    MethodOutcome,
    ValuationComparison,
    compare_valuation_methods,
)
from src.core.services.valuation_strategies import (
    STRATEGIES,
    OutgoingValuation,
    ValuationStrategy,
    get_strategy,
    supported_methods,
)

__all__ = [
    # Valuation strategies
    "STRATEGIES",
    "ValuationStrategy",
    "OutgoingValuation",
    "get_strategy",
    "supported_methods",
    # Batch queue
    "BatchQueueInvariant",
    "QueueDiscrepancy",
    "DEFAULT_TOLERANCE",
    # Stock processing
    "StockTransactionProcessor",
    "TransactionResult",
    "BatchProcessingResult",
    "ValuationMethodConversion",
    "reference_direction",
    # Process costing
    "ProcessCostManager",
    "StageCompletion",
    "OrderCostSummary",
    "next_stage_no",
    "to_stage_number",
    # Reporting
    "compare_valuation_methods",
    "ValuationComparison",
    "MethodOutcome",
]
