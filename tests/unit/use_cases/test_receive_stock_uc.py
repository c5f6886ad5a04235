"""Tests for ReceiveStockUseCase."""

import pytest

from src.application.dto.requests import ReceiveStockRequest
from src.application.use_cases.receive_stock import ReceiveStockUseCase
from src.core.entities.inventory import (
    ReferenceType,
    TransactionDirection,
    ValuationMethod,
)
from src.core.exceptions import ConcurrencyConflictError, QueueIntegrityError


@pytest.fixture
def use_case(product_store):
    return ReceiveStockUseCase(product_store=product_store)


class TestReceiveStockUseCase:
    async def test_receive_into_existing_product(self, use_case, product_store, fifo_product):
        """Receipt appends a batch and saves snapshot and movement together."""
        product_store.get_product.return_value = fifo_product

        request = ReceiveStockRequest(
            product_id="P-FIFO", quantity=20, rate=15, reference_id="PO-1"
        )
        result = await use_case.execute(request)

        assert not result.created
        assert result.product.quantity == 100
        assert result.product.total_value == 1160
        assert result.product.version == 1
        product_store.create_product.assert_not_awaited()

        saved, movements = product_store.save_product.call_args[0][:2]
        assert saved.batch_queue[-1].rate == 15
        assert movements == [result.movement]
        assert product_store.save_product.call_args.kwargs["expected_version"] == 0

    async def test_movement_fields(self, use_case, product_store, fifo_product):
        product_store.get_product.return_value = fifo_product

        request = ReceiveStockRequest(
            product_id="P-FIFO", quantity=20, rate=15, reference_id="PO-1", notes="dock 3"
        )
        result = await use_case.execute(request)
        movement = result.movement

        assert movement.direction == TransactionDirection.IN
        assert movement.quantity == 20
        assert movement.rate == 15
        assert movement.reference_type == ReferenceType.PURCHASE
        assert movement.reference_id == "PO-1"
        assert movement.notes == "dock 3"

    async def test_creates_missing_product_with_default_method(self, use_case, product_store):
        product_store.get_product.return_value = None

        result = await use_case.execute(ReceiveStockRequest(product_id="P-NEW", quantity=100, rate=10))

        assert result.created
        created = product_store.create_product.call_args[0][0]
        assert created.valuation_method == ValuationMethod.WEIGHTED_AVERAGE
        assert result.product.current_rate == 10

    async def test_creates_missing_product_with_requested_method(self, use_case, product_store):
        product_store.get_product.return_value = None

        request = ReceiveStockRequest(
            product_id="P-NEW", quantity=5, rate=2, valuation_method=ValuationMethod.LIFO
        )
        result = await use_case.execute(request)

        assert result.product.valuation_method == ValuationMethod.LIFO

    async def test_weighted_average_sequence(self, use_case, product_store, empty_wa_product):
        product_store.get_product.return_value = empty_wa_product
        first = await use_case.execute(ReceiveStockRequest(product_id="P-001", quantity=100, rate=10))

        product_store.get_product.return_value = first.product
        second = await use_case.execute(ReceiveStockRequest(product_id="P-001", quantity=50, rate=12))

        assert second.product.quantity == 150
        assert second.product.total_value == pytest.approx(1600)
        assert second.product.current_rate == pytest.approx(10.6667, abs=1e-4)
        assert second.product.version == 2

    async def test_corrupted_snapshot_not_saved(self, use_case, product_store, fifo_product):
        product_store.get_product.return_value = fifo_product.model_copy(
            update={"total_value": 10.0}
        )

        with pytest.raises(QueueIntegrityError):
            await use_case.execute(ReceiveStockRequest(product_id="P-FIFO", quantity=1, rate=1))
        product_store.save_product.assert_not_awaited()

    async def test_concurrency_conflict_propagates(self, use_case, product_store, fifo_product):
        product_store.get_product.return_value = fifo_product
        product_store.save_product.side_effect = ConcurrencyConflictError("product:P-FIFO", 0, 1)

        with pytest.raises(ConcurrencyConflictError):
            await use_case.execute(ReceiveStockRequest(product_id="P-FIFO", quantity=1, rate=1))

    async def test_to_response(self, use_case, product_store, fifo_product):
        product_store.get_product.return_value = fifo_product
        result = await use_case.execute(ReceiveStockRequest(product_id="P-FIFO", quantity=20, rate=15))

        response = use_case.to_response(result)

        assert response.product.product_id == "P-FIFO"
        assert response.product.valuation_method == "FIFO"
        assert response.movement.direction == "in"
        assert response.created is False
