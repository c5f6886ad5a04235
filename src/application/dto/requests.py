"""Request DTOs for costing use cases.

Pydantic v2 models validating input at the application boundary.
These are the ONLY contracts between callers and use cases.
"""

from pydantic import BaseModel, Field

from src.core.entities.inventory import ReferenceType, TransactionDirection, ValuationMethod
from src.core.entities.manufacturing import CostType, OverheadBasis

# --- Inventory ---


class ReceiveStockRequest(BaseModel):
    """Request to receive stock (IN movement)."""

    product_id: str = Field(..., description="Product / item ID")
    quantity: float = Field(..., gt=0, description="Quantity to receive")
    rate: float = Field(..., ge=0, description="Cost per unit")
    reference_type: ReferenceType = Field(
        default=ReferenceType.PURCHASE,
        description="Business document behind the receipt",
    )
    reference_id: str | None = Field(
        default=None,
        description="Purchase order, GRN or invoice reference",
        examples=["PO-2024-0012", "GRN-881"],
    )
    notes: str | None = Field(default=None, description="Additional notes")
    valuation_method: ValuationMethod | None = Field(
        default=None,
        description="Method for a product seen for the first time (defaults to settings)",
    )


class IssueStockRequest(BaseModel):
    """Request to issue stock (OUT movement)."""

    product_id: str = Field(..., description="Product / item ID")
    quantity: float = Field(..., gt=0, description="Quantity to issue")
    reference_type: ReferenceType = Field(
        default=ReferenceType.SALE,
        description="Business document behind the issue",
    )
    reference_id: str | None = Field(default=None, description="Reference number")
    notes: str | None = Field(default=None, description="Additional notes")
    dry_run: bool = Field(
        default=False,
        description="Only compute the cost of goods sold; nothing is persisted",
    )


class AdjustStockRequest(BaseModel):
    """Signed inventory adjustment (stock count correction)."""

    product_id: str = Field(..., description="Product / item ID")
    quantity_delta: float = Field(
        ...,
        description="Positive to add stock, negative to remove it; zero is rejected",
    )
    rate: float | None = Field(
        default=None,
        ge=0,
        description="Unit cost for positive adjustments (defaults to the current rate)",
    )
    reference_id: str | None = Field(default=None, description="Stock count reference")
    reason: str | None = Field(default=None, description="Why the adjustment was made")


class StockTransactionItem(BaseModel):
    """One transaction of a batch run."""

    direction: TransactionDirection = Field(..., description="in or out")
    quantity: float = Field(..., gt=0, description="Quantity moved")
    rate: float | None = Field(default=None, ge=0, description="Unit cost (IN only)")
    reference_type: ReferenceType | None = Field(default=None)
    reference_id: str | None = Field(default=None)


class ProcessTransactionsRequest(BaseModel):
    """Apply several transactions to one product, strictly in order."""

    product_id: str = Field(..., description="Product / item ID")
    transactions: list[StockTransactionItem] = Field(
        ...,
        min_length=1,
        description="Transactions in the order they must be applied",
    )


class ConvertValuationMethodRequest(BaseModel):
    """Switch a product's valuation method. Destroys batch history."""

    product_id: str = Field(..., description="Product / item ID")
    new_method: ValuationMethod = Field(..., description="Target valuation method")
    confirm_irreversible: bool = Field(
        default=False,
        description="Must be true: the batch queue is collapsed and cannot be restored",
    )


class ReconcileInventoryRequest(BaseModel):
    """Check a product's batch queue against its ledger totals."""

    product_id: str = Field(..., description="Product / item ID")
    repair: bool = Field(
        default=False,
        description="Collapse a broken queue into one batch at the average cost",
    )


class CompareValuationMethodsRequest(BaseModel):
    """Replay a movement history under every valuation method."""

    product_id: str = Field(..., description="Product / item ID")
    transactions: list[StockTransactionItem] | None = Field(
        default=None,
        description="History to replay (defaults to the product's stored ledger)",
    )


# --- Manufacturing ---


# Cost posting types accepted by a stage
StageCostKind = CostType


class StartManufacturingOrderRequest(BaseModel):
    """Open a manufacturing order and create its stages in planning."""

    mo_id: str = Field(..., description="Manufacturing order ID")
    item_id: str = Field(..., description="Finished-goods item produced by the order")
    order_number: str | None = Field(default=None, examples=["MO-2024-0042"])
    planned_qty: float = Field(default=0.0, ge=0, description="Planned output quantity")
    work_center_id: str | None = Field(default=None, description="Default work center")


class PostStageCostRequest(BaseModel):
    """Post labor, overhead or another cost to a stage.

    Labor and overhead use ``quantity`` (hours or allocation base) times
    ``rate``; the other kinds use ``amount``.
    """

    mo_id: str = Field(..., description="Manufacturing order ID")
    stage_no: int = Field(..., description="Stage number (10, 20, 30, 40, 50)")
    kind: StageCostKind = Field(..., description="Cost posting type")
    quantity: float | None = Field(default=None, ge=0, description="Hours or base quantity")
    rate: float | None = Field(default=None, ge=0, description="Rate per hour / base unit")
    amount: float | None = Field(default=None, ge=0, description="Flat amount")
    basis: OverheadBasis = Field(
        default=OverheadBasis.LABOR_HOURS,
        description="Overhead allocation base",
    )
    employee_name: str | None = Field(default=None, description="Who worked the hours (labor)")
    operation_code: str | None = Field(default=None, examples=["OP-ROLL-01"])
    reference_id: str | None = Field(
        default=None, description="Time sheet or allocation reference"
    )
    notes: str | None = Field(default=None, description="Additional notes")


class ConsumeStageMaterialsRequest(BaseModel):
    """Issue raw material from stock into the materials stage."""

    mo_id: str = Field(..., description="Manufacturing order ID")
    material_id: str = Field(..., description="Raw material product ID")
    quantity: float = Field(..., gt=0, description="Quantity consumed")
    reference_id: str | None = Field(default=None, description="Material requisition")


class CompleteStageRequest(BaseModel):
    """Record a stage's output and transfer its cost forward."""

    mo_id: str = Field(..., description="Manufacturing order ID")
    stage_no: int = Field(..., description="Stage number (10, 20, 30, 40, 50)")
    completed_qty: float = Field(..., ge=0, description="Good units produced")
    scrap_qty: float = Field(default=0.0, ge=0, description="Scrapped units")
    rework_qty: float = Field(
        default=0.0,
        ge=0,
        description="Units sent back for rework; recorded only, not costed",
    )


class CloseStageRequest(BaseModel):
    """Close a completed stage for good."""

    mo_id: str = Field(..., description="Manufacturing order ID")
    stage_no: int = Field(..., description="Stage number")


class GetStageCostPostingsRequest(BaseModel):
    """List the cost postings behind a stage, or behind every stage of an order."""

    mo_id: str = Field(..., description="Manufacturing order ID")
    stage_no: int | None = Field(default=None, description="Limit to one stage")
    cost_type: CostType | None = Field(default=None, description="Limit to one cost type")
