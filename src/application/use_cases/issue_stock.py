"""Issue Stock Use Case — OUT movement costed under the product's method."""

from dataclasses import dataclass

from src.application.dto.requests import IssueStockRequest
from src.application.dto.responses import (
    IssueStockResponse,
    ProductValuationResponse,
    StockMovementResponse,
)
from src.application.services import get_stock_processor
from src.config import aggregate_context, get_logger
from src.core.entities.inventory import (
    ProductValuation,
    StockMovement,
    StockTransaction,
    TransactionDirection,
)
from src.core.exceptions import ProductNotFoundError
from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.services import StockTransactionProcessor, TransactionResult

logger = get_logger(__name__)


@dataclass
class IssueStockResult:
    """Result of issuing stock."""

    product: ProductValuation
    cost_of_goods_sold: float
    unit_rate: float
    movement: StockMovement | None = None  # None for dry runs
    simulated: bool = False


class IssueStockUseCase:
    """Issue stock (OUT movement) and return its cost of goods sold."""

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

    async def execute(self, request: IssueStockRequest) -> IssueStockResult:
        """Execute issue stock use case."""
        with aggregate_context(product_id=request.product_id):
            logger.info(
                "issue_stock_started",
                quantity=request.quantity,
                reference_type=request.reference_type.value,
                dry_run=request.dry_run,
            )
            store = await self._get_product_store()

            product = await store.get_product(request.product_id)
            if product is None:
                raise ProductNotFoundError(request.product_id)

            if request.dry_run:
                preview = self._processor.simulate_outgoing(product, request.quantity)
                return IssueStockResult(
                    product=product,
                    cost_of_goods_sold=preview.cost_of_goods_sold,
                    unit_rate=preview.unit_rate,
                    simulated=True,
                )

            outcome = self._processor.process_outgoing(product, request.quantity)
            transaction = StockTransaction(
                product_id=request.product_id,
                direction=TransactionDirection.OUT,
                quantity=request.quantity,
                reference_type=request.reference_type,
                reference_id=request.reference_id,
            )
            movement = TransactionResult(
                transaction=transaction,
                product=outcome.product,
                cost_of_goods_sold=outcome.cost_of_goods_sold,
                unit_rate=outcome.unit_rate,
            ).to_movement(notes=request.notes)

            saved = await store.save_product(
                outcome.product, [movement], expected_version=product.version
            )

            logger.info(
                "issue_stock_complete",
                cogs=outcome.cost_of_goods_sold,
                remaining_qty=saved.quantity,
            )
            return IssueStockResult(
                product=saved,
                cost_of_goods_sold=outcome.cost_of_goods_sold,
                unit_rate=outcome.unit_rate,
                movement=movement,
            )

    def to_response(self, result: IssueStockResult) -> IssueStockResponse:
        """Convert result to response DTO."""
        return IssueStockResponse(
            product=ProductValuationResponse.from_entity(result.product),
            movement=(
                StockMovementResponse.from_entity(result.movement)
                if result.movement is not None
                else None
            ),
            cost_of_goods_sold=result.cost_of_goods_sold,
            unit_rate=result.unit_rate,
            simulated=result.simulated,
        )
