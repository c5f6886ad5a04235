"""
Batch queue reconciliation.

A product's batch queue must reconcile to its ledger totals:

    sum(batch.quantity)              == product.quantity
    sum(batch.quantity * batch.rate) == product.total_value

within a fixed tolerance. ``repair`` is a lossy recovery for snapshots
corrupted outside the engine: the lot history is replaced by a single
synthetic batch at the ledger's average cost.
"""

from dataclasses import dataclass

from src.config import get_logger
from src.core.entities.inventory import Batch, ProductValuation
from src.core.exceptions import QueueIntegrityError

logger = get_logger(__name__)

DEFAULT_TOLERANCE = 0.01


@dataclass(frozen=True)
class QueueDiscrepancy:
    """Difference between the ledger totals and the batch queue totals."""

    quantity_delta: float  # product.quantity - queue quantity
    value_delta: float  # product.total_value - queue value
    tolerance: float

    @property
    def is_reconciled(self) -> bool:
        return (
            abs(self.quantity_delta) < self.tolerance
            and abs(self.value_delta) < self.tolerance
        )


class BatchQueueInvariant:
    """Validate and repair a product's batch queue."""

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        self._tolerance = tolerance

    @property
    def tolerance(self) -> float:
        return self._tolerance

    def inspect(self, state: ProductValuation) -> QueueDiscrepancy:
        """Measure how far the queue is from the ledger totals."""
        return QueueDiscrepancy(
            quantity_delta=state.quantity - state.queue_quantity,
            value_delta=state.total_value - state.queue_value,
            tolerance=self._tolerance,
        )

    def validate(self, state: ProductValuation) -> bool:
        """True when both reconciliation invariants hold and quantity >= 0."""
        if state.quantity < 0:
            return False
        return self.inspect(state).is_reconciled

    def ensure_valid(self, state: ProductValuation) -> None:
        """Raise QueueIntegrityError unless ``validate`` passes."""
        if self.validate(state):
            return
        discrepancy = self.inspect(state)
        raise QueueIntegrityError(
            item_id=state.product_id,
            quantity_delta=discrepancy.quantity_delta,
            value_delta=discrepancy.value_delta,
        )

    def repair(self, state: ProductValuation) -> ProductValuation:
        """
        Collapse the queue into one synthetic batch {quantity, total_value/quantity}.

        Lot-level history is lost. Logged as a data-integrity event.
        """
        discrepancy = self.inspect(state)
        if state.quantity > 0:
            rate = state.total_value / state.quantity
            queue: tuple[Batch, ...] = (Batch(quantity=state.quantity, rate=rate),)
            repaired = state.model_copy(update={"batch_queue": queue, "current_rate": rate})
        else:
            repaired = state.model_copy(
                update={
                    "quantity": 0.0,
                    "total_value": 0.0,
                    "current_rate": 0.0,
                    "batch_queue": (),
                }
            )

        logger.warning(
            "batch_queue_repaired",
            product_id=state.product_id,
            batches_discarded=len(state.batch_queue),
            quantity_delta=discrepancy.quantity_delta,
            value_delta=discrepancy.value_delta,
        )
        return repaired
