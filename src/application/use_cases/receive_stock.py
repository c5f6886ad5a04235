"""Receive Stock Use Case — IN movement valued under the product's method."""

from dataclasses import dataclass

from src.application.dto.requests import ReceiveStockRequest
from src.application.dto.responses import (
    ProductValuationResponse,
    ReceiveStockResponse,
    StockMovementResponse,
)
from src.application.services import get_default_valuation_method, get_stock_processor
from src.config import aggregate_context, get_logger
from src.core.entities.inventory import (
    ProductValuation,
    StockMovement,
    StockTransaction,
    TransactionDirection,
)
from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.services import StockTransactionProcessor, TransactionResult

logger = get_logger(__name__)


@dataclass
class ReceiveStockResult:
    """Result of receiving stock."""

    product: ProductValuation
    movement: StockMovement
    created: bool = False  # True if a new product snapshot was created


class ReceiveStockUseCase:
    """Receive stock (IN movement) and persist the new valuation."""

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

    async def execute(self, request: ReceiveStockRequest) -> ReceiveStockResult:
        """Execute receive stock use case."""
        with aggregate_context(product_id=request.product_id):
            logger.info(
                "receive_stock_started",
                quantity=request.quantity,
                rate=request.rate,
                reference_type=request.reference_type.value,
            )
            store = await self._get_product_store()

            # 1. Get or create product snapshot
            created = False
            product = await store.get_product(request.product_id)
            if product is None:
                method = request.valuation_method or get_default_valuation_method()
                product = await store.create_product(
                    ProductValuation(product_id=request.product_id, valuation_method=method)
                )
                created = True

            # 2. Value the receipt
            updated = self._processor.process_incoming(product, request.quantity, request.rate)
            transaction = StockTransaction(
                product_id=request.product_id,
                direction=TransactionDirection.IN,
                quantity=request.quantity,
                rate=request.rate,
                reference_type=request.reference_type,
                reference_id=request.reference_id,
            )
            movement = TransactionResult(
                transaction=transaction,
                product=updated,
                unit_rate=request.rate,
            ).to_movement(notes=request.notes)

            # 3. Persist snapshot + ledger row together
            saved = await store.save_product(
                updated, [movement], expected_version=product.version
            )

            logger.info(
                "receive_stock_complete",
                new_qty=saved.quantity,
                new_value=saved.total_value,
                current_rate=saved.current_rate,
                created=created,
            )
            return ReceiveStockResult(product=saved, movement=movement, created=created)

    def to_response(self, result: ReceiveStockResult) -> ReceiveStockResponse:
        """Convert result to response DTO."""
        return ReceiveStockResponse(
            product=ProductValuationResponse.from_entity(result.product),
            movement=StockMovementResponse.from_entity(result.movement),
            created=result.created,
        )
