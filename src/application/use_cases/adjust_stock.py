"""Adjust Stock Use Case."""

from dataclasses import dataclass

from src.application.dto.requests import AdjustStockRequest
from src.application.dto.responses import (
    AdjustStockResponse,
    ProductValuationResponse,
    StockMovementResponse,
)
from src.application.services import get_stock_processor
from src.config import aggregate_context, get_logger
from src.core.entities.inventory import (
    ProductValuation,
    ReferenceType,
    StockMovement,
    StockTransaction,
    TransactionDirection,
)
from src.core.exceptions import ProductNotFoundError
from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.services import StockTransactionProcessor, TransactionResult

logger = get_logger(__name__)


@dataclass
class AdjustStockResult:
    """Result of an inventory adjustment."""

    product: ProductValuation
    movement: StockMovement
    cost_of_goods_sold: float = 0.0


class AdjustStockUseCase:
    """Apply a positive or negative inventory adjustment."""

    def __init__(
        self,
        product_store: IProductValuationStore | None = None,
        processor: StockTransactionProcessor | None = None,
    ):
        self._product_store = product_store
        self._processor = processor or get_stock_processor()

    async def _get_product_store(self) -> IProductValuationStore:
        if self._product_store is None:
            from src.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(self, request: AdjustStockRequest) -> AdjustStockResult:
        """Execute adjustment use case."""
        with aggregate_context(product_id=request.product_id):
            store = await self._get_product_store()
            product = await store.get_product(request.product_id)
            if product is None:
                raise ProductNotFoundError(request.product_id)

            outcome = self._processor.adjust(product, request.quantity_delta, request.rate)

            if request.quantity_delta > 0:
                direction = TransactionDirection.IN
                reference_type = ReferenceType.ADJUSTMENT_IN
            else:
                direction = TransactionDirection.OUT
                reference_type = ReferenceType.ADJUSTMENT_OUT

            transaction = StockTransaction(
                product_id=request.product_id,
                direction=direction,
                quantity=abs(request.quantity_delta),
                rate=outcome.unit_rate if direction == TransactionDirection.IN else None,
                reference_type=reference_type,
                reference_id=request.reference_id,
            )
            movement = TransactionResult(
                transaction=transaction,
                product=outcome.product,
                cost_of_goods_sold=outcome.cost_of_goods_sold,
                unit_rate=outcome.unit_rate,
            ).to_movement(notes=request.reason)

            saved = await store.save_product(
                outcome.product, [movement], expected_version=product.version
            )

            logger.info(
                "stock_adjusted",
                quantity_delta=request.quantity_delta,
                new_qty=saved.quantity,
                new_value=saved.total_value,
            )
            return AdjustStockResult(
                product=saved,
                movement=movement,
                cost_of_goods_sold=outcome.cost_of_goods_sold,
            )

    def to_response(self, result: AdjustStockResult) -> AdjustStockResponse:
        return AdjustStockResponse(
            product=ProductValuationResponse.from_entity(result.product),
            movement=StockMovementResponse.from_entity(result.movement),
            cost_of_goods_sold=result.cost_of_goods_sold,
        )
