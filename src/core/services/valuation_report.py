"""
Valuation method comparison.

Replays one movement history under every valuation method so the effect of
the choice of method on ending inventory value and cost of goods sold can be
seen side by side. This is a reporting boundary: figures are rounded to 2
decimals here and nowhere in the engine itself.
"""

from dataclasses import dataclass, field

from src.config import get_logger
from src.core.entities.inventory import ProductValuation, StockTransaction, ValuationMethod
from src.core.services.stock_processor import StockTransactionProcessor
from src.core.services.valuation_strategies import supported_methods

logger = get_logger(__name__)

REPORT_PRECISION = 2


@dataclass(frozen=True)
class MethodOutcome:
    """Ending position of a replay under one method."""

    method: ValuationMethod
    quantity: float
    ending_value: float
    cost_of_goods_sold: float
    current_rate: float


@dataclass(frozen=True)
class ValuationComparison:
    """Side-by-side replay of a movement history under all methods."""

    product_id: str
    outcomes: dict[ValuationMethod, MethodOutcome] = field(default_factory=dict)
    max_variance: float = 0.0
    variance_percentage: float = 0.0

    def value_for(self, method: ValuationMethod | str) -> float:
        return self.outcomes[ValuationMethod(method)].ending_value

    def cogs_for(self, method: ValuationMethod | str) -> float:
        return self.outcomes[ValuationMethod(method)].cost_of_goods_sold


def compare_valuation_methods(
    product_id: str,
    transactions: list[StockTransaction],
    processor: StockTransactionProcessor | None = None,
) -> ValuationComparison:
    """
    Replay ``transactions`` from an empty position under each method.

    Quantities do not depend on the method, so a transaction that fails under
    one method fails under all of them; the first such error is raised.

    ``max_variance`` is the spread between the highest and lowest ending
    value. ``variance_percentage`` expresses it relative to the lowest
    ending value (0 when that value is 0).
    """
    processor = processor or StockTransactionProcessor()
    outcomes: dict[ValuationMethod, MethodOutcome] = {}

    for method in supported_methods():
        start = ProductValuation(product_id=product_id, valuation_method=method)
        run = processor.process_batch(start, transactions)
        if run.error is not None:
            raise run.error
        outcomes[method] = MethodOutcome(
            method=method,
            quantity=round(run.product.quantity, REPORT_PRECISION),
            ending_value=round(run.product.total_value, REPORT_PRECISION),
            cost_of_goods_sold=round(run.total_cost_of_goods_sold, REPORT_PRECISION),
            current_rate=round(run.product.current_rate, REPORT_PRECISION),
        )

    values = [o.ending_value for o in outcomes.values()]
    spread = max(values) - min(values)
    lowest = min(values)
    percentage = spread / lowest * 100 if lowest > 0 else 0.0

    comparison = ValuationComparison(
        product_id=product_id,
        outcomes=outcomes,
        max_variance=round(spread, REPORT_PRECISION),
        variance_percentage=round(percentage, REPORT_PRECISION),
    )
    logger.info(
        "valuation_methods_compared",
        product_id=product_id,
        transactions=len(transactions),
        max_variance=comparison.max_variance,
    )
    return comparison
