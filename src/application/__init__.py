"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates the costing engine by:
1. Defining request/response DTOs as its contracts
2. Implementing use cases that load a snapshot, run the engine and persist
3. Providing factory functions for dependency injection
"""

from src.application.services import (
    get_batch_queue_invariant,
    get_default_valuation_method,
    get_process_cost_manager,
    get_stock_processor,
)
from src.application.use_cases import (
    AdjustStockUseCase,
    CloseStageUseCase,
    CompareValuationMethodsUseCase,
    CompleteStageUseCase,
    ConsumeStageMaterialsUseCase,
    ConvertValuationMethodUseCase,
    GetOrderCostSummaryUseCase,
    IssueStockUseCase,
    PostStageCostUseCase,
    ProcessTransactionsUseCase,
    ReceiveStockUseCase,
    ReconcileInventoryUseCase,
    StartManufacturingOrderUseCase,
)

__all__ = [
    # Use Cases
    "ReceiveStockUseCase",
    "IssueStockUseCase",
    "AdjustStockUseCase",
    "ProcessTransactionsUseCase",
    "ConvertValuationMethodUseCase",
    "ReconcileInventoryUseCase",
    "CompareValuationMethodsUseCase",
    "StartManufacturingOrderUseCase",
    "PostStageCostUseCase",
    "ConsumeStageMaterialsUseCase",
    "CompleteStageUseCase",
    "CloseStageUseCase",
    "GetOrderCostSummaryUseCase",
    # Service factories
    "get_stock_processor",
    "get_batch_queue_invariant",
    "get_process_cost_manager",
    "get_default_valuation_method",
]
