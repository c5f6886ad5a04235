"""
Compare Valuation Methods Use Case.

What-if report: the same history valued under every method.
"""

from src.application.dto.requests import CompareValuationMethodsRequest
from src.application.dto.responses import (
    MethodValuationResponse,
    ValuationComparisonResponse,
)
from src.application.services import get_stock_processor
from src.config import get_logger
from src.core.entities.inventory import StockMovement, StockTransaction, TransactionDirection
from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.services import (
    StockTransactionProcessor,
    ValuationComparison,
    compare_valuation_methods,
)

logger = get_logger(__name__)

# Ledger rows fetched per round trip while replaying a product's history
LEDGER_PAGE_SIZE = 1_000


def movement_to_transaction(movement: StockMovement) -> StockTransaction:
    """Rebuild the transaction a ledger row was written for."""
    return StockTransaction(
        product_id=movement.product_id,
        direction=movement.direction,
        quantity=movement.quantity,
        rate=movement.rate if movement.direction == TransactionDirection.IN else None,
        reference_type=movement.reference_type,
        reference_id=movement.reference_id,
    )


class CompareValuationMethodsUseCase:
    """Replay a product's history under every valuation method."""

    def __init__(
        self,
        product_store: IProductValuationStore | None = None,
        processor: StockTransactionProcessor | None = None,
        page_size: int = LEDGER_PAGE_SIZE,
    ):
        self._product_store = product_store
        self._processor = processor or get_stock_processor()
        self._page_size = page_size

    async def _get_product_store(self) -> IProductValuationStore:
        if self._product_store is None:
            from src.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(self, request: CompareValuationMethodsRequest) -> ValuationComparison:
        if request.transactions is not None:
            transactions = [
                StockTransaction(product_id=request.product_id, **item.model_dump())
                for item in request.transactions
            ]
        else:
            movements = await self._load_ledger(request.product_id)
            transactions = [movement_to_transaction(m) for m in movements]
            logger.info(
                "valuation_comparison_from_ledger",
                product_id=request.product_id,
                movements=len(movements),
            )

        return compare_valuation_methods(request.product_id, transactions, self._processor)

    async def _load_ledger(self, product_id: str) -> list[StockMovement]:
        """Every ledger row of the product, oldest first."""
        store = await self._get_product_store()
        movements: list[StockMovement] = []
        after_id = None
        while True:
            page = await store.get_movements(
                product_id, limit=self._page_size, after_id=after_id
            )
            movements.extend(page)
            if len(page) < self._page_size:
                return movements
            after_id = page[-1].id

    def to_response(self, result: ValuationComparison) -> ValuationComparisonResponse:
        return ValuationComparisonResponse(
            product_id=result.product_id,
            methods=[
                MethodValuationResponse(
                    method=outcome.method.value,
                    quantity=outcome.quantity,
                    ending_value=outcome.ending_value,
                    cost_of_goods_sold=outcome.cost_of_goods_sold,
                    current_rate=outcome.current_rate,
                )
                for outcome in result.outcomes.values()
            ],
            max_variance=result.max_variance,
            variance_percentage=result.variance_percentage,
        )
