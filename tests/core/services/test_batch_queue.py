"""Tests for batch queue reconciliation."""

import pytest

from src.core.entities.inventory import Batch, ProductValuation, ValuationMethod
from src.core.exceptions import QueueIntegrityError
from src.core.services.batch_queue import DEFAULT_TOLERANCE, BatchQueueInvariant


@pytest.fixture
def invariant():
    return BatchQueueInvariant()


@pytest.fixture
def drifted_product():
    """Ledger says 80 units worth 900, queue holds 80 units worth 860."""
    return ProductValuation(
        product_id="P-DRIFT",
        valuation_method=ValuationMethod.FIFO,
        quantity=80.0,
        current_rate=10.0,
        total_value=900.0,
        batch_queue=(Batch(quantity=50, rate=10), Batch(quantity=30, rate=12)),
    )


class TestBatchQueueInvariant:
    def test_default_tolerance(self, invariant):
        assert invariant.tolerance == DEFAULT_TOLERANCE == 0.01

    def test_valid_product(self, invariant, fifo_product):
        assert invariant.validate(fifo_product)
        invariant.ensure_valid(fifo_product)

    def test_empty_product_is_valid(self, invariant, empty_wa_product):
        assert invariant.validate(empty_wa_product)

    def test_inspect(self, invariant, drifted_product):
        discrepancy = invariant.inspect(drifted_product)
        assert discrepancy.quantity_delta == 0
        assert discrepancy.value_delta == pytest.approx(40)
        assert not discrepancy.is_reconciled

    def test_within_tolerance(self, invariant, fifo_product):
        nudged = fifo_product.model_copy(update={"total_value": 860.005})
        assert invariant.validate(nudged)

    def test_negative_quantity_invalid(self, invariant):
        product = ProductValuation(product_id="P-NEG", quantity=-1.0)
        assert not invariant.validate(product)

    def test_ensure_valid_raises(self, invariant, drifted_product):
        with pytest.raises(QueueIntegrityError) as exc_info:
            invariant.ensure_valid(drifted_product)
        assert exc_info.value.details["item_id"] == "P-DRIFT"
        assert exc_info.value.details["value_delta"] == pytest.approx(40)

    def test_custom_tolerance(self, drifted_product):
        assert BatchQueueInvariant(tolerance=50).validate(drifted_product)


class TestRepair:
    def test_collapses_to_average_batch(self, invariant, drifted_product):
        repaired = invariant.repair(drifted_product)

        assert repaired.batch_queue == (Batch(quantity=80, rate=900 / 80),)
        assert repaired.current_rate == pytest.approx(11.25)
        assert repaired.quantity == 80
        assert repaired.total_value == 900
        assert invariant.validate(repaired)

    def test_does_not_mutate_input(self, invariant, drifted_product):
        invariant.repair(drifted_product)
        assert len(drifted_product.batch_queue) == 2

    def test_zero_quantity_resets(self, invariant):
        product = ProductValuation(
            product_id="P-0",
            quantity=0.0,
            total_value=12.0,
            batch_queue=(Batch(quantity=3, rate=4),),
        )
        repaired = invariant.repair(product)
        assert repaired.batch_queue == ()
        assert repaired.total_value == 0
        assert repaired.current_rate == 0
