"""Convert Valuation Method Use Case."""

from src.application.dto.requests import ConvertValuationMethodRequest
from src.application.dto.responses import (
    ConvertValuationMethodResponse,
    ProductValuationResponse,
)
from src.application.services import get_stock_processor
from src.config import aggregate_context, get_logger
from src.core.exceptions import ProductNotFoundError, ValidationError
from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.services import StockTransactionProcessor, ValuationMethodConversion

logger = get_logger(__name__)


class ConvertValuationMethodUseCase:
    """
    Switch a product to another valuation method.

    The batch queue collapses into one batch at the current rate, so the
    caller must confirm the loss explicitly.
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

    async def execute(
        self, request: ConvertValuationMethodRequest
    ) -> ValuationMethodConversion:
        if not request.confirm_irreversible:
            raise ValidationError(
                "confirm_irreversible",
                "method conversion discards batch history and must be confirmed",
                request.confirm_irreversible,
            )

        with aggregate_context(product_id=request.product_id):
            store = await self._get_product_store()
            product = await store.get_product(request.product_id)
            if product is None:
                raise ProductNotFoundError(request.product_id)

            conversion = self._processor.convert_valuation_method(product, request.new_method)
            # Revaluation only; no stock moved, so no ledger row
            saved = await store.save_product(
                conversion.product, [], expected_version=product.version
            )
            return ValuationMethodConversion(
                product=saved,
                previous_method=conversion.previous_method,
                new_method=conversion.new_method,
                discarded_batches=conversion.discarded_batches,
                revaluation_delta=conversion.revaluation_delta,
            )

    def to_response(
        self, result: ValuationMethodConversion
    ) -> ConvertValuationMethodResponse:
        return ConvertValuationMethodResponse(
            product=ProductValuationResponse.from_entity(result.product),
            previous_method=result.previous_method.value,
            new_method=result.new_method.value,
            discarded_batches=result.discarded_batches,
            revaluation_delta=result.revaluation_delta,
            irreversible=result.irreversible,
        )
