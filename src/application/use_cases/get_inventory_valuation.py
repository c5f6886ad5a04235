"""Get Inventory Valuation Use Case: stock value grouped by valuation method."""

from dataclasses import dataclass, field

from src.application.dto.responses import InventoryValuationResponse, MethodTotalsResponse
from src.config import get_logger
from src.core.entities.inventory import ValuationMethod
from src.core.interfaces.inventory_store import IProductValuationStore

logger = get_logger(__name__)

PRODUCT_PAGE_SIZE = 500


@dataclass
class MethodTotals:
    method: ValuationMethod
    product_count: int = 0
    total_quantity: float = 0.0
    total_value: float = 0.0


@dataclass
class InventoryValuation:
    methods: dict[ValuationMethod, MethodTotals] = field(default_factory=dict)

    @property
    def product_count(self) -> int:
        return sum(t.product_count for t in self.methods.values())

    @property
    def total_value(self) -> float:
        return sum(t.total_value for t in self.methods.values())


class GetInventoryValuationUseCase:
    """Total quantity and value of every product, per valuation method."""

    def __init__(
        self,
        product_store: IProductValuationStore | None = None,
        page_size: int = PRODUCT_PAGE_SIZE,
    ):
        self._product_store = product_store
        self._page_size = page_size

    async def _get_product_store(self) -> IProductValuationStore:
        if self._product_store is None:
            from src.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(self) -> InventoryValuation:
        store = await self._get_product_store()
        valuation = InventoryValuation(
            methods={method: MethodTotals(method=method) for method in ValuationMethod}
        )

        offset = 0
        while True:
            page = await store.list_products(limit=self._page_size, offset=offset)
            for product in page:
                totals = valuation.methods[product.valuation_method]
                totals.product_count += 1
                totals.total_quantity += product.quantity
                totals.total_value += product.total_value
            if len(page) < self._page_size:
                break
            offset += self._page_size

        logger.debug(
            "inventory_valued",
            products=valuation.product_count,
            total_value=valuation.total_value,
        )
        return valuation

    def to_response(self, result: InventoryValuation) -> InventoryValuationResponse:
        return InventoryValuationResponse(
            methods=[
                MethodTotalsResponse(
                    method=totals.method.value,
                    product_count=totals.product_count,
                    total_quantity=totals.total_quantity,
                    total_value=totals.total_value,
                )
                for totals in result.methods.values()
            ],
            product_count=result.product_count,
            total_value=result.total_value,
        )
