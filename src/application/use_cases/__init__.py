"""Application use cases."""

from src.application.use_cases.adjust_stock import AdjustStockResult, AdjustStockUseCase
from src.application.use_cases.close_stage import CloseStageUseCase
from src.application.use_cases.compare_valuation_methods import CompareValuationMethodsUseCase
from src.application.use_cases.complete_stage import CompleteStageResult, CompleteStageUseCase
from src.application.use_cases.consume_stage_materials import (
    ConsumeStageMaterialsResult,
    ConsumeStageMaterialsUseCase,
)
from src.application.use_cases.convert_valuation_method import ConvertValuationMethodUseCase
from src.application.use_cases.get_inventory_valuation import (
    GetInventoryValuationUseCase,
    InventoryValuation,
)
from src.application.use_cases.get_order_cost_summary import GetOrderCostSummaryUseCase
from src.application.use_cases.get_stage_cost_postings import (
    GetStageCostPostingsUseCase,
    StageCostPostingsResult,
)
from src.application.use_cases.issue_stock import IssueStockResult, IssueStockUseCase
from src.application.use_cases.post_stage_cost import PostStageCostResult, PostStageCostUseCase
from src.application.use_cases.process_transactions import (
    ProcessTransactionsResult,
    ProcessTransactionsUseCase,
)
from src.application.use_cases.receive_stock import ReceiveStockResult, ReceiveStockUseCase
from src.application.use_cases.reconcile_inventory import (
    ReconcileInventoryResult,
    ReconcileInventoryUseCase,
)
from src.application.use_cases.start_manufacturing_order import (
    StartManufacturingOrderResult,
    StartManufacturingOrderUseCase,
)

__all__ = [
    # Inventory
    "ReceiveStockUseCase",
    "ReceiveStockResult",
    "IssueStockUseCase",
    "IssueStockResult",
    "AdjustStockUseCase",
    "AdjustStockResult",
    "ProcessTransactionsUseCase",
    "ProcessTransactionsResult",
    "ConvertValuationMethodUseCase",
    "ReconcileInventoryUseCase",
    "ReconcileInventoryResult",
    "CompareValuationMethodsUseCase",
    "GetInventoryValuationUseCase",
    "InventoryValuation",
    # Manufacturing
    "StartManufacturingOrderUseCase",
    "StartManufacturingOrderResult",
    "PostStageCostUseCase",
    "PostStageCostResult",
    "ConsumeStageMaterialsUseCase",
    "ConsumeStageMaterialsResult",
    "CompleteStageUseCase",
    "CompleteStageResult",
    "CloseStageUseCase",
    "GetOrderCostSummaryUseCase",
    "GetStageCostPostingsUseCase",
    "StageCostPostingsResult",
]
