"""Inventory valuation domain entities.

Snapshots are frozen: engine operations return new instances via
``model_copy`` instead of mutating the caller's object.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ValuationMethod(str, Enum):
    """Supported inventory valuation methods (IAS 2)."""

    FIFO = "FIFO"
    LIFO = "LIFO"
    WEIGHTED_AVERAGE = "Weighted Average"
    MOVING_AVERAGE = "Moving Average"

    @property
    def description(self) -> str:
        return _METHOD_DESCRIPTIONS[self]

    @property
    def is_average(self) -> bool:
        return self in (ValuationMethod.WEIGHTED_AVERAGE, ValuationMethod.MOVING_AVERAGE)


_METHOD_DESCRIPTIONS = {
    ValuationMethod.FIFO: "Issues stock from oldest batches first",
    ValuationMethod.LIFO: "Issues stock from newest batches first",
    ValuationMethod.WEIGHTED_AVERAGE: "Calculates weighted average cost on each receipt",
    ValuationMethod.MOVING_AVERAGE: "Similar to weighted average, updates on each transaction",
}


class TransactionDirection(str, Enum):
    """Direction of a stock transaction."""

    IN = "in"
    OUT = "out"


class ReferenceType(str, Enum):
    """Business document behind a stock movement."""

    PURCHASE = "purchase"
    PURCHASE_RETURN = "purchase_return"
    SALE = "sale"
    SALE_RETURN = "sale_return"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    ADJUSTMENT_IN = "adjustment_in"
    ADJUSTMENT_OUT = "adjustment_out"
    PRODUCTION_IN = "production_in"
    PRODUCTION_OUT = "production_out"
    OPENING_BALANCE = "opening_balance"


class Batch(BaseModel):
    """One receipt lot. Consumed (reduced) or removed, never edited."""

    model_config = ConfigDict(frozen=True)

    quantity: float
    rate: float

    @property
    def value(self) -> float:
        return self.quantity * self.rate


class ProductValuation(BaseModel):
    """Valuation state of one product: ledger totals plus its batch queue."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    valuation_method: ValuationMethod = ValuationMethod.WEIGHTED_AVERAGE
    quantity: float = 0.0
    current_rate: float = 0.0
    total_value: float = 0.0
    batch_queue: tuple[Batch, ...] = ()
    version: int = 0  # optimistic concurrency token, bumped by the store

    @property
    def average_cost(self) -> float:
        """Average unit cost = total_value / quantity (0 when empty)."""
        if self.quantity <= 0:
            return 0.0
        return self.total_value / self.quantity

    @property
    def queue_quantity(self) -> float:
        return sum(batch.quantity for batch in self.batch_queue)

    @property
    def queue_value(self) -> float:
        return sum(batch.value for batch in self.batch_queue)

    @property
    def is_empty(self) -> bool:
        return not self.batch_queue


class StockTransaction(BaseModel):
    """A caller-created request to move stock in or out.

    Never persisted by the engine; the ledger row is written by the store.
    """

    model_config = ConfigDict(frozen=True)

    product_id: str
    direction: TransactionDirection
    quantity: float
    rate: float | None = None  # IN only
    reference_type: ReferenceType | None = None
    reference_id: str | None = None


class StockMovement(BaseModel):
    """Immutable ledger record of an applied stock transaction."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    product_id: str
    direction: TransactionDirection
    quantity: float  # always positive
    rate: float = 0.0
    cost_of_goods_sold: float = 0.0  # OUT only
    reference_type: ReferenceType | None = None
    reference_id: str | None = None
    notes: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
