"""Process Transactions Use Case."""

from dataclasses import dataclass

from src.application.dto.requests import ProcessTransactionsRequest
from src.application.dto.responses import (
    ErrorResponse,
    ProcessTransactionsResponse,
    ProductValuationResponse,
    StockMovementResponse,
)
from src.application.services import get_default_valuation_method, get_stock_processor
from src.config import aggregate_context, get_logger
from src.core.entities.inventory import ProductValuation, StockMovement, StockTransaction
from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.services import BatchProcessingResult, StockTransactionProcessor

logger = get_logger(__name__)


@dataclass
class ProcessTransactionsResult:
    """Persisted outcome of a batch run."""

    product: ProductValuation
    run: BatchProcessingResult
    movements: list[StockMovement]


class ProcessTransactionsUseCase:
    """
    Apply a list of transactions to one product in order.

    The run stops at the first failing transaction. Everything before it is
    persisted in a single save; the failure is reported, not raised.
    """

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

    async def execute(self, request: ProcessTransactionsRequest) -> ProcessTransactionsResult:
        """Execute batch use case."""
        with aggregate_context(product_id=request.product_id):
            store = await self._get_product_store()
            product = await store.get_product(request.product_id)
            if product is None:
                product = await store.create_product(
                    ProductValuation(
                        product_id=request.product_id,
                        valuation_method=get_default_valuation_method(),
                    )
                )

            transactions = [
                StockTransaction(product_id=request.product_id, **item.model_dump())
                for item in request.transactions
            ]
            run = self._processor.process_batch(product, transactions)

            movements = [result.to_movement() for result in run.results]
            saved = product
            if movements:
                saved = await store.save_product(
                    run.product, movements, expected_version=product.version
                )

            logger.info(
                "transactions_processed",
                submitted=len(transactions),
                applied=len(run.results),
                failed_index=run.failed_index,
            )
            return ProcessTransactionsResult(product=saved, run=run, movements=movements)

    def to_response(self, result: ProcessTransactionsResult) -> ProcessTransactionsResponse:
        run = result.run
        return ProcessTransactionsResponse(
            product=ProductValuationResponse.from_entity(result.product),
            applied=len(run.results),
            movements=[StockMovementResponse.from_entity(m) for m in result.movements],
            total_cost_of_goods_sold=run.total_cost_of_goods_sold,
            error=ErrorResponse.from_error(run.error) if run.error is not None else None,
            failed_index=run.failed_index,
        )
