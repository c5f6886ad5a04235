"""Data Transfer Objects for the application layer.

Request DTOs: Validate and parse incoming requests.
Response DTOs: Structure and serialize use-case results.
"""

from src.application.dto.requests import (
    AdjustStockRequest,
    CloseStageRequest,
    CompareValuationMethodsRequest,
    CompleteStageRequest,
    ConsumeStageMaterialsRequest,
    ConvertValuationMethodRequest,
    GetStageCostPostingsRequest,
    IssueStockRequest,
    PostStageCostRequest,
    ProcessTransactionsRequest,
    ReceiveStockRequest,
    ReconcileInventoryRequest,
    StageCostKind,
    StartManufacturingOrderRequest,
    StockTransactionItem,
)
from src.application.dto.responses import (
    AdjustStockResponse,
    BatchResponse,
    ConvertValuationMethodResponse,
    CostComponentsResponse,
    ErrorResponse,
    InventoryValuationResponse,
    IssueStockResponse,
    ManufacturingOrderResponse,
    MethodTotalsResponse,
    MethodValuationResponse,
    OrderCostSummaryResponse,
    ProcessTransactionsResponse,
    ProductValuationResponse,
    ReceiveStockResponse,
    ReconcileInventoryResponse,
    StageCompletionResponse,
    StageCostPostingResponse,
    StageCostPostingsResponse,
    StageResponse,
    StockMovementResponse,
    ValuationComparisonResponse,
)

__all__ = [
    # Requests
    "ReceiveStockRequest",
    "IssueStockRequest",
    "AdjustStockRequest",
    "StockTransactionItem",
    "ProcessTransactionsRequest",
    "ConvertValuationMethodRequest",
    "ReconcileInventoryRequest",
    "CompareValuationMethodsRequest",
    "StageCostKind",
    "StartManufacturingOrderRequest",
    "PostStageCostRequest",
    "ConsumeStageMaterialsRequest",
    "CompleteStageRequest",
    "CloseStageRequest",
    "GetStageCostPostingsRequest",
    # Responses
    "ErrorResponse",
    "BatchResponse",
    "ProductValuationResponse",
    "StockMovementResponse",
    "ReceiveStockResponse",
    "IssueStockResponse",
    "AdjustStockResponse",
    "ProcessTransactionsResponse",
    "ConvertValuationMethodResponse",
    "ReconcileInventoryResponse",
    "MethodValuationResponse",
    "ValuationComparisonResponse",
    "MethodTotalsResponse",
    "InventoryValuationResponse",
    "CostComponentsResponse",
    "StageResponse",
    "ManufacturingOrderResponse",
    "StageCompletionResponse",
    "OrderCostSummaryResponse",
    "StageCostPostingResponse",
    "StageCostPostingsResponse",
]
