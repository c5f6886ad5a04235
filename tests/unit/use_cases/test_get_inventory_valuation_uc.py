"""Tests for GetInventoryValuationUseCase."""

import pytest

from src.application.use_cases.get_inventory_valuation import GetInventoryValuationUseCase
from src.core.entities.inventory import Batch, ProductValuation, ValuationMethod

PRODUCTS = [
    ProductValuation(
        product_id="RM-PP",
        valuation_method=ValuationMethod.FIFO,
        quantity=80,
        current_rate=10,
        total_value=860,
        batch_queue=(Batch(quantity=50, rate=10), Batch(quantity=30, rate=12)),
    ),
    ProductValuation(
        product_id="RM-INK",
        valuation_method=ValuationMethod.FIFO,
        quantity=5,
        current_rate=20,
        total_value=100,
        batch_queue=(Batch(quantity=5, rate=20),),
    ),
    ProductValuation(
        product_id="FG-CUP",
        valuation_method=ValuationMethod.WEIGHTED_AVERAGE,
        quantity=100,
        current_rate=72,
        total_value=7200,
    ),
    ProductValuation(product_id="PK-BOX", valuation_method=ValuationMethod.LIFO),
]


def _paged(products):
    async def list_products(limit=100, offset=0):
        return products[offset : offset + limit]

    return list_products


class TestGetInventoryValuationUseCase:
    async def test_groups_by_method(self, product_store):
        product_store.list_products.side_effect = _paged(PRODUCTS)
        use_case = GetInventoryValuationUseCase(product_store=product_store)

        valuation = await use_case.execute()

        fifo = valuation.methods[ValuationMethod.FIFO]
        assert fifo.product_count == 2
        assert fifo.total_quantity == 85
        assert fifo.total_value == 960
        assert valuation.methods[ValuationMethod.LIFO].product_count == 1
        assert valuation.methods[ValuationMethod.LIFO].total_value == 0
        assert valuation.methods[ValuationMethod.MOVING_AVERAGE].product_count == 0
        assert valuation.product_count == 4
        assert valuation.total_value == 8160
        product_store.list_products.assert_awaited_once()

    async def test_pages_through_catalogue(self, product_store):
        product_store.list_products.side_effect = _paged(PRODUCTS)
        use_case = GetInventoryValuationUseCase(product_store=product_store, page_size=3)

        valuation = await use_case.execute()

        assert valuation.product_count == 4
        offsets = [c.kwargs["offset"] for c in product_store.list_products.await_args_list]
        assert offsets == [0, 3]

    async def test_empty_catalogue(self, product_store):
        product_store.list_products.side_effect = _paged([])
        use_case = GetInventoryValuationUseCase(product_store=product_store)

        valuation = await use_case.execute()

        assert valuation.product_count == 0
        assert valuation.total_value == 0

    async def test_response(self, product_store):
        product_store.list_products.side_effect = _paged(PRODUCTS)
        use_case = GetInventoryValuationUseCase(product_store=product_store)

        response = use_case.to_response(await use_case.execute())

        by_method = {m.method: m for m in response.methods}
        assert set(by_method) == {"FIFO", "LIFO", "Weighted Average", "Moving Average"}
        assert by_method["Weighted Average"].total_value == pytest.approx(7200)
        assert response.product_count == 4
        assert response.total_value == pytest.approx(8160)
