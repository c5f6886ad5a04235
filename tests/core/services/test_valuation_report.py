"""Tests for the valuation method comparison report."""

import pytest

from src.core.entities.inventory import StockTransaction, TransactionDirection, ValuationMethod
from src.core.exceptions import InsufficientInventoryError
from src.core.services.valuation_report import compare_valuation_methods


def _tx(direction, qty, rate=None):
    return StockTransaction(
        product_id="P-CMP", direction=direction, quantity=qty, rate=rate
    )


@pytest.fixture
def history():
    return [
        _tx(TransactionDirection.IN, 100, 10),
        _tx(TransactionDirection.IN, 50, 12),
        _tx(TransactionDirection.OUT, 60),
    ]


class TestCompareValuationMethods:
    def test_outcomes_per_method(self, history):
        comparison = compare_valuation_methods("P-CMP", history)

        assert set(comparison.outcomes) == set(ValuationMethod)
        assert comparison.value_for(ValuationMethod.FIFO) == 1000
        assert comparison.cogs_for(ValuationMethod.FIFO) == 600
        assert comparison.value_for(ValuationMethod.LIFO) == 900
        assert comparison.cogs_for(ValuationMethod.LIFO) == 700
        assert comparison.value_for("Weighted Average") == 960
        assert comparison.cogs_for(ValuationMethod.MOVING_AVERAGE) == 640

    def test_quantity_independent_of_method(self, history):
        comparison = compare_valuation_methods("P-CMP", history)
        assert {o.quantity for o in comparison.outcomes.values()} == {90}

    def test_variance(self, history):
        comparison = compare_valuation_methods("P-CMP", history)
        assert comparison.max_variance == 100
        assert comparison.variance_percentage == pytest.approx(11.11)

    def test_rounded_to_cents(self):
        comparison = compare_valuation_methods(
            "P-CMP",
            [
                _tx(TransactionDirection.IN, 3, 1),
                _tx(TransactionDirection.IN, 3, 2),
                _tx(TransactionDirection.OUT, 1),
            ],
        )
        assert comparison.outcomes[ValuationMethod.WEIGHTED_AVERAGE].current_rate == 1.5
        assert comparison.cogs_for(ValuationMethod.WEIGHTED_AVERAGE) == 1.5

    def test_empty_history(self):
        comparison = compare_valuation_methods("P-CMP", [])
        assert comparison.max_variance == 0
        assert comparison.variance_percentage == 0

    def test_failure_raises(self):
        with pytest.raises(InsufficientInventoryError):
            compare_valuation_methods("P-CMP", [_tx(TransactionDirection.OUT, 1)])
