"""Response DTOs for costing use cases.

Pydantic v2 models for serializing use-case results.
These are the ONLY contracts between use cases and their callers.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.core.entities.inventory import ProductValuation, StockMovement
from src.core.entities.manufacturing import ManufacturingStage, StageCostPosting
from src.core.exceptions import CostingError


class ErrorResponse(BaseModel):
    """Standardized error payload.

    - error_code: machine-readable code (e.g. INSUFFICIENT_INVENTORY)
    - message: human-readable description
    - details: structured context from the raising error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    details: dict = Field(default_factory=dict, description="Additional details")
    timestamp: datetime = Field(default_factory=datetime.now)

    @classmethod
    def from_error(cls, error: CostingError) -> "ErrorResponse":
        return cls(error_code=error.code, message=error.message, details=error.details)


# --- Inventory ---


class BatchResponse(BaseModel):
    """One receipt lot in the batch queue."""

    quantity: float
    rate: float
    value: float


class ProductValuationResponse(BaseModel):
    """Product valuation snapshot."""

    product_id: str
    valuation_method: str
    quantity: float
    current_rate: float
    total_value: float
    average_cost: float
    batches: list[BatchResponse] = Field(default_factory=list)
    version: int

    @classmethod
    def from_entity(cls, product: ProductValuation) -> "ProductValuationResponse":
        return cls(
            product_id=product.product_id,
            valuation_method=product.valuation_method.value,
            quantity=product.quantity,
            current_rate=product.current_rate,
            total_value=product.total_value,
            average_cost=product.average_cost,
            batches=[
                BatchResponse(quantity=b.quantity, rate=b.rate, value=b.value)
                for b in product.batch_queue
            ],
            version=product.version,
        )


class StockMovementResponse(BaseModel):
    """Stock ledger record."""

    id: int | None = None
    product_id: str
    direction: str
    quantity: float
    rate: float
    cost_of_goods_sold: float = 0.0
    reference_type: str | None = None
    reference_id: str | None = None
    notes: str | None = None
    timestamp: datetime

    @classmethod
    def from_entity(cls, movement: StockMovement) -> "StockMovementResponse":
        return cls(
            id=movement.id,
            product_id=movement.product_id,
            direction=movement.direction.value,
            quantity=movement.quantity,
            rate=movement.rate,
            cost_of_goods_sold=movement.cost_of_goods_sold,
            reference_type=movement.reference_type.value if movement.reference_type else None,
            reference_id=movement.reference_id,
            notes=movement.notes,
            timestamp=movement.timestamp,
        )


class ReceiveStockResponse(BaseModel):
    """Response for a stock receipt."""

    product: ProductValuationResponse
    movement: StockMovementResponse
    created: bool = False  # True if the product was seen for the first time


class IssueStockResponse(BaseModel):
    """Response for a stock issue or a simulated one."""

    product: ProductValuationResponse
    movement: StockMovementResponse | None = None  # None for dry runs
    cost_of_goods_sold: float
    unit_rate: float
    simulated: bool = False


class AdjustStockResponse(BaseModel):
    """Response for an inventory adjustment."""

    product: ProductValuationResponse
    movement: StockMovementResponse
    cost_of_goods_sold: float = 0.0


class ProcessTransactionsResponse(BaseModel):
    """Outcome of a sequential batch run.

    On failure the transactions before ``failed_index`` are applied and
    persisted; ``error`` describes the one that stopped the run.
    """

    product: ProductValuationResponse
    applied: int
    movements: list[StockMovementResponse] = Field(default_factory=list)
    total_cost_of_goods_sold: float = 0.0
    error: ErrorResponse | None = None
    failed_index: int | None = None


class ConvertValuationMethodResponse(BaseModel):
    """Result of a valuation method conversion."""

    product: ProductValuationResponse
    previous_method: str
    new_method: str
    discarded_batches: int
    revaluation_delta: float
    irreversible: bool = True


class ReconcileInventoryResponse(BaseModel):
    """Batch queue reconciliation report."""

    product: ProductValuationResponse
    is_valid: bool
    quantity_delta: float
    value_delta: float
    tolerance: float
    repaired: bool = False


class MethodValuationResponse(BaseModel):
    """Ending position under one valuation method."""

    method: str
    quantity: float
    ending_value: float
    cost_of_goods_sold: float
    current_rate: float


class ValuationComparisonResponse(BaseModel):
    """The same history valued under every method."""

    product_id: str
    methods: list[MethodValuationResponse]
    max_variance: float
    variance_percentage: float


class MethodTotalsResponse(BaseModel):
    """Stock held under one valuation method."""

    method: str
    product_count: int
    total_quantity: float
    total_value: float


class InventoryValuationResponse(BaseModel):
    """Inventory value grouped by valuation method."""

    methods: list[MethodTotalsResponse]
    product_count: int
    total_value: float


# --- Manufacturing ---


class CostComponentsResponse(BaseModel):
    """Cost buckets of a stage."""

    transferred_in: float
    direct_materials: float
    direct_labor: float
    manufacturing_overhead: float
    regrind_processing: float
    waste_credit: float


class StageResponse(BaseModel):
    """Manufacturing stage cost record."""

    mo_id: str
    stage_no: int
    stage_name: str
    work_center_id: str | None = None
    status: str
    good_qty: float
    scrap_qty: float
    rework_qty: float = 0.0
    costs: CostComponentsResponse
    total_cost: float
    unit_cost: float
    previous_stage_unit_cost: float
    version: int

    @classmethod
    def from_entity(cls, stage: ManufacturingStage) -> "StageResponse":
        return cls(
            mo_id=stage.mo_id,
            stage_no=int(stage.stage_no),
            stage_name=stage.stage_no.label,
            work_center_id=stage.work_center_id,
            status=stage.status.value,
            good_qty=stage.good_qty,
            scrap_qty=stage.scrap_qty,
            rework_qty=stage.rework_qty,
            costs=CostComponentsResponse(**stage.costs.model_dump()),
            total_cost=stage.total_cost,
            unit_cost=stage.unit_cost,
            previous_stage_unit_cost=stage.previous_stage_unit_cost,
            version=stage.version,
        )


class StageCostPostingResponse(BaseModel):
    """One cost posting record."""

    id: int | None = None
    mo_id: str
    stage_no: int
    cost_type: str
    amount: float
    base_qty: float | None = None
    rate: float | None = None
    basis: str | None = None
    employee_name: str | None = None
    operation_code: str | None = None
    reference_id: str | None = None
    notes: str | None = None
    posted_at: datetime

    @classmethod
    def from_entity(cls, posting: StageCostPosting) -> "StageCostPostingResponse":
        return cls(
            id=posting.id,
            mo_id=posting.mo_id,
            stage_no=int(posting.stage_no),
            cost_type=posting.cost_type.value,
            amount=posting.amount,
            base_qty=posting.base_qty,
            rate=posting.rate,
            basis=posting.basis.value if posting.basis else None,
            employee_name=posting.employee_name,
            operation_code=posting.operation_code,
            reference_id=posting.reference_id,
            notes=posting.notes,
            posted_at=posting.posted_at,
        )


class StageCostPostingsResponse(BaseModel):
    """Posting records with the cost buckets rebuilt from them.

    ``discrepancies`` lists the stages whose stored buckets differ from
    their postings; empty when every stage reconciles.
    """

    mo_id: str
    postings: list[StageCostPostingResponse]
    posted_costs: CostComponentsResponse
    discrepancies: list[int] = Field(default_factory=list)


class ManufacturingOrderResponse(BaseModel):
    """Manufacturing order with its stages."""

    mo_id: str
    item_id: str
    order_number: str | None = None
    planned_qty: float
    stages: list[StageResponse]


class StageCompletionResponse(BaseModel):
    """Completed stage and where its cost went."""

    stage: StageResponse
    next_stage_no: int | None = None
    finished_goods: ProductValuationResponse | None = None  # terminal stage only
    finished_goods_movement: StockMovementResponse | None = None


class OrderCostSummaryResponse(BaseModel):
    """Cost roll-up of a manufacturing order."""

    mo_id: str
    stages: list[StageResponse]
    total_direct_materials: float
    total_direct_labor: float
    total_overhead: float
    total_regrind: float
    total_waste_credit: float
    total_cost: float
    completed_qty: float
    finished_unit_cost: float
