"""Tests for ReconcileInventoryUseCase."""

import pytest

from src.application.dto.requests import ReconcileInventoryRequest
from src.application.use_cases.reconcile_inventory import ReconcileInventoryUseCase
from src.core.exceptions import ProductNotFoundError


@pytest.fixture
def use_case(product_store):
    return ReconcileInventoryUseCase(product_store=product_store)


@pytest.fixture
def drifted(fifo_product):
    return fifo_product.model_copy(update={"total_value": 900.0})


class TestReconcileInventoryUseCase:
    async def test_valid_product(self, use_case, product_store, fifo_product):
        product_store.get_product.return_value = fifo_product

        result = await use_case.execute(ReconcileInventoryRequest(product_id="P-FIFO"))

        assert result.is_valid
        assert not result.repaired
        product_store.save_product.assert_not_awaited()

    async def test_reports_without_repair(self, use_case, product_store, drifted):
        product_store.get_product.return_value = drifted

        result = await use_case.execute(ReconcileInventoryRequest(product_id="P-FIFO"))

        assert not result.is_valid
        assert result.discrepancy.value_delta == pytest.approx(40)
        assert not result.repaired
        product_store.save_product.assert_not_awaited()

    async def test_repair(self, use_case, product_store, drifted):
        product_store.get_product.return_value = drifted

        result = await use_case.execute(
            ReconcileInventoryRequest(product_id="P-FIFO", repair=True)
        )

        assert result.repaired
        assert len(result.product.batch_queue) == 1
        assert result.product.current_rate == pytest.approx(11.25)
        assert result.product.version == 1

        response = use_case.to_response(result)
        assert response.repaired is True
        assert response.tolerance == 0.01

    async def test_not_found(self, use_case, product_store):
        product_store.get_product.return_value = None
        with pytest.raises(ProductNotFoundError):
            await use_case.execute(ReconcileInventoryRequest(product_id="P-X"))
