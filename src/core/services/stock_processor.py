"""
Stock transaction processor.

Layer-pure service that applies incoming and outgoing stock transactions
to a product valuation snapshot using the product's valuation strategy.

Caller contract: transactions against one product must be applied one at a
time. The processor cannot detect two callers racing on the same product;
the persistence layer serializes them (row lock, single writer, or the
snapshot ``version`` check).
"""

from dataclasses import dataclass, field

from src.config import get_logger
from src.core.entities.inventory import (
    Batch,
    ProductValuation,
    ReferenceType,
    StockMovement,
    StockTransaction,
    TransactionDirection,
    ValuationMethod,
)
from src.core.exceptions import CostingError, InsufficientInventoryError, ValidationError
from src.core.services.batch_queue import BatchQueueInvariant
from src.core.services.validation import require_non_negative, require_positive
from src.core.services.valuation_strategies import OutgoingValuation, get_strategy

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransactionResult:
    """One applied transaction and the snapshot it produced."""

    transaction: StockTransaction
    product: ProductValuation
    cost_of_goods_sold: float = 0.0
    unit_rate: float = 0.0

    def to_movement(self, notes: str | None = None) -> StockMovement:
        """Build the ledger record the persistence layer writes with the snapshot."""
        return StockMovement(
            product_id=self.transaction.product_id,
            direction=self.transaction.direction,
            quantity=self.transaction.quantity,
            rate=self.unit_rate,
            cost_of_goods_sold=self.cost_of_goods_sold,
            reference_type=self.transaction.reference_type,
            reference_id=self.transaction.reference_id,
            notes=notes,
        )


@dataclass(frozen=True)
class BatchProcessingResult:
    """
    Outcome of a sequential run of transactions.

    On failure ``product`` is the state after the last successful
    transaction and ``error`` is the exception that stopped the run.
    """

    product: ProductValuation
    results: list[TransactionResult] = field(default_factory=list)
    error: CostingError | None = None
    failed_index: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def total_cost_of_goods_sold(self) -> float:
        return sum(r.cost_of_goods_sold for r in self.results)


@dataclass(frozen=True)
class ValuationMethodConversion:
    """Result of switching a product's valuation method. Cannot be undone."""

    product: ProductValuation
    previous_method: ValuationMethod
    new_method: ValuationMethod
    discarded_batches: int
    revaluation_delta: float  # new total_value - old total_value
    irreversible: bool = True


class StockTransactionProcessor:
    """
    Apply stock transactions under the product's valuation method.

    Every method takes a snapshot and returns a new one. A failing call
    raises before anything is produced, so the caller's snapshot remains the
    current state.
    """

    def __init__(self, invariant: BatchQueueInvariant | None = None):
        self._invariant = invariant or BatchQueueInvariant()

    @property
    def invariant(self) -> BatchQueueInvariant:
        return self._invariant

    def process_incoming(
        self, product: ProductValuation, qty: float, rate: float
    ) -> ProductValuation:
        """Receive ``qty`` units at ``rate`` per unit."""
        qty = require_positive("quantity", qty)
        rate = require_non_negative("rate", rate)
        self._invariant.ensure_valid(product)

        strategy = get_strategy(product.valuation_method)
        updated = strategy.apply_incoming(product, qty, rate)
        self._invariant.ensure_valid(updated)

        logger.info(
            "stock_received",
            product_id=product.product_id,
            method=product.valuation_method.value,
            quantity=qty,
            rate=rate,
            new_qty=updated.quantity,
            new_value=updated.total_value,
            batches=len(updated.batch_queue),
        )
        return updated

    def process_outgoing(self, product: ProductValuation, qty: float) -> OutgoingValuation:
        """Issue ``qty`` units; returns the new snapshot and the cost of goods sold."""
        outcome = self._issue(product, qty)
        logger.info(
            "stock_issued",
            product_id=product.product_id,
            method=product.valuation_method.value,
            quantity=qty,
            cogs=outcome.cost_of_goods_sold,
            unit_rate=outcome.unit_rate,
            remaining_qty=outcome.product.quantity,
            remaining_value=outcome.product.total_value,
        )
        return outcome

    def simulate_outgoing(self, product: ProductValuation, qty: float) -> OutgoingValuation:
        """Preview the cost of issuing ``qty`` units. Nothing is to be persisted."""
        outcome = self._issue(product, qty)
        logger.debug(
            "stock_issue_simulated",
            product_id=product.product_id,
            quantity=qty,
            cogs=outcome.cost_of_goods_sold,
        )
        return outcome

    def adjust(
        self,
        product: ProductValuation,
        qty_delta: float,
        rate: float | None = None,
    ) -> OutgoingValuation:
        """
        Signed inventory adjustment.

        A positive delta is received at ``rate`` (default: the product's
        current rate); a negative delta is issued under the valuation method.
        """
        if qty_delta == 0:
            raise ValidationError("quantity", "adjustment quantity cannot be zero", qty_delta)
        if qty_delta > 0:
            in_rate = product.current_rate if rate is None else rate
            updated = self.process_incoming(product, qty_delta, in_rate)
            return OutgoingValuation(updated, 0.0, in_rate)
        return self.process_outgoing(product, -qty_delta)

    def process_transaction(
        self, product: ProductValuation, transaction: StockTransaction
    ) -> TransactionResult:
        """Apply a single StockTransaction."""
        if transaction.product_id != product.product_id:
            raise ValidationError(
                "product_id",
                f"transaction is for {transaction.product_id}, snapshot is {product.product_id}",
                transaction.product_id,
            )

        if transaction.direction == TransactionDirection.IN:
            if transaction.rate is None:
                raise ValidationError("rate", "incoming transactions require a rate")
            updated = self.process_incoming(product, transaction.quantity, transaction.rate)
            return TransactionResult(
                transaction=transaction,
                product=updated,
                unit_rate=transaction.rate,
            )

        outcome = self.process_outgoing(product, transaction.quantity)
        return TransactionResult(
            transaction=transaction,
            product=outcome.product,
            cost_of_goods_sold=outcome.cost_of_goods_sold,
            unit_rate=outcome.unit_rate,
        )

    def process_batch(
        self, product: ProductValuation, transactions: list[StockTransaction]
    ) -> BatchProcessingResult:
        """
        Apply transactions strictly in order, each against the previous result.

        Stops at the first failure and reports it together with the state as
        of the last successful transaction.
        """
        current = product
        results: list[TransactionResult] = []
        for index, transaction in enumerate(transactions):
            try:
                result = self.process_transaction(current, transaction)
            except CostingError as e:
                logger.warning(
                    "stock_batch_stopped",
                    product_id=product.product_id,
                    failed_index=index,
                    applied=len(results),
                    error=e.code,
                )
                return BatchProcessingResult(
                    product=current,
                    results=results,
                    error=e,
                    failed_index=index,
                )
            results.append(result)
            current = result.product

        return BatchProcessingResult(product=current, results=results)

    def convert_valuation_method(
        self, product: ProductValuation, new_method: ValuationMethod | str
    ) -> ValuationMethodConversion:
        """
        Switch the product to ``new_method``.

        Destructive: the batch queue collapses into a single batch at
        (quantity, current_rate), so lot history is permanently lost and the
        stock is revalued at the current rate.
        """
        target = get_strategy(new_method).method
        if target == product.valuation_method:
            raise ValidationError(
                "valuation_method", "product already uses this method", target.value
            )
        self._invariant.ensure_valid(product)

        rate = product.current_rate if product.quantity > 0 else 0.0
        queue: tuple[Batch, ...] = (
            (Batch(quantity=product.quantity, rate=rate),) if product.quantity > 0 else ()
        )
        new_value = product.quantity * rate
        converted = product.model_copy(
            update={
                "valuation_method": target,
                "batch_queue": queue,
                "current_rate": rate,
                "total_value": new_value,
            }
        )

        conversion = ValuationMethodConversion(
            product=converted,
            previous_method=product.valuation_method,
            new_method=target,
            discarded_batches=len(product.batch_queue),
            revaluation_delta=new_value - product.total_value,
        )
        logger.warning(
            "valuation_method_converted",
            product_id=product.product_id,
            previous_method=product.valuation_method.value,
            new_method=target.value,
            discarded_batches=conversion.discarded_batches,
            revaluation_delta=conversion.revaluation_delta,
        )
        return conversion

    def _issue(self, product: ProductValuation, qty: float) -> OutgoingValuation:
        qty = require_positive("quantity", qty)
        if qty > product.quantity:
            raise InsufficientInventoryError(
                item_id=product.product_id, required=qty, available=product.quantity
            )
        self._invariant.ensure_valid(product)

        strategy = get_strategy(product.valuation_method)
        outcome = strategy.apply_outgoing(product, qty)
        self._invariant.ensure_valid(outcome.product)
        return outcome


def reference_direction(reference_type: ReferenceType) -> TransactionDirection:
    """Stock direction implied by a business reference type."""
    if reference_type in _OUTGOING_REFERENCES:
        return TransactionDirection.OUT
    return TransactionDirection.IN


_OUTGOING_REFERENCES = frozenset(
    {
        ReferenceType.SALE,
        ReferenceType.PURCHASE_RETURN,
        ReferenceType.TRANSFER_OUT,
        ReferenceType.ADJUSTMENT_OUT,
        ReferenceType.PRODUCTION_OUT,
    }
)
