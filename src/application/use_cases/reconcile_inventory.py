"""
Reconcile Inventory Use Case.

Checks a product's batch queue against its ledger totals.
"""

from dataclasses import dataclass

from src.application.dto.requests import ReconcileInventoryRequest
from src.application.dto.responses import ProductValuationResponse, ReconcileInventoryResponse
from src.application.services import get_batch_queue_invariant
from src.config import aggregate_context, get_logger
from src.core.entities.inventory import ProductValuation
from src.core.exceptions import ProductNotFoundError
from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.services import BatchQueueInvariant, QueueDiscrepancy

logger = get_logger(__name__)


@dataclass
class ReconcileInventoryResult:
    product: ProductValuation
    discrepancy: QueueDiscrepancy
    is_valid: bool
    repaired: bool = False


class ReconcileInventoryUseCase:
    """Validate a product's batch queue and optionally repair it."""

    def __init__(
        self,
        product_store: IProductValuationStore | None = None,
        invariant: BatchQueueInvariant | None = None,
    ):
        self._product_store = product_store
        self._invariant = invariant or get_batch_queue_invariant()

    async def _get_product_store(self) -> IProductValuationStore:
        if self._product_store is None:
            from src.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(self, request: ReconcileInventoryRequest) -> ReconcileInventoryResult:
        with aggregate_context(product_id=request.product_id):
            store = await self._get_product_store()
            product = await store.get_product(request.product_id)
            if product is None:
                raise ProductNotFoundError(request.product_id)

            discrepancy = self._invariant.inspect(product)
            is_valid = self._invariant.validate(product)
            if is_valid or not request.repair:
                if not is_valid:
                    logger.warning(
                        "batch_queue_out_of_balance",
                        quantity_delta=discrepancy.quantity_delta,
                        value_delta=discrepancy.value_delta,
                    )
                return ReconcileInventoryResult(
                    product=product, discrepancy=discrepancy, is_valid=is_valid
                )

            repaired = self._invariant.repair(product)
            saved = await store.save_product(repaired, [], expected_version=product.version)
            return ReconcileInventoryResult(
                product=saved,
                discrepancy=discrepancy,
                is_valid=False,
                repaired=True,
            )

    def to_response(self, result: ReconcileInventoryResult) -> ReconcileInventoryResponse:
        return ReconcileInventoryResponse(
            product=ProductValuationResponse.from_entity(result.product),
            is_valid=result.is_valid,
            quantity_delta=result.discrepancy.quantity_delta,
            value_delta=result.discrepancy.value_delta,
            tolerance=result.discrepancy.tolerance,
            repaired=result.repaired,
        )
