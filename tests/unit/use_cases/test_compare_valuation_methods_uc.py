"""Tests for CompareValuationMethodsUseCase."""

import pytest

from src.application.dto.requests import CompareValuationMethodsRequest, StockTransactionItem
from src.application.use_cases.compare_valuation_methods import (
    LEDGER_PAGE_SIZE,
    CompareValuationMethodsUseCase,
    movement_to_transaction,
)
from src.core.entities.inventory import StockMovement, TransactionDirection, ValuationMethod


def _paged(ledger):
    async def _get(product_id, limit, after_id=None):
        rows = [m for m in ledger if after_id is None or m.id > after_id]
        return rows[:limit]

    return _get


@pytest.fixture
def use_case(product_store):
    return CompareValuationMethodsUseCase(product_store=product_store)


@pytest.fixture
def ledger():
    return [
        StockMovement(id=1, product_id="P-CMP", direction="in", quantity=100, rate=10),
        StockMovement(id=2, product_id="P-CMP", direction="in", quantity=50, rate=12),
        StockMovement(
            id=3,
            product_id="P-CMP",
            direction="out",
            quantity=60,
            rate=10.33,
            cost_of_goods_sold=620,
        ),
    ]


class TestCompareValuationMethodsUseCase:
    async def test_replays_ledger(self, use_case, product_store, ledger):
        product_store.get_movements.return_value = ledger

        result = await use_case.execute(CompareValuationMethodsRequest(product_id="P-CMP"))

        product_store.get_movements.assert_awaited_once_with(
            "P-CMP", limit=LEDGER_PAGE_SIZE, after_id=None
        )
        assert result.value_for(ValuationMethod.FIFO) == 1000
        assert result.value_for(ValuationMethod.LIFO) == 900
        assert result.max_variance == 100

    async def test_pages_through_whole_ledger(self, product_store, ledger):
        product_store.get_movements.side_effect = _paged(ledger)
        use_case = CompareValuationMethodsUseCase(product_store=product_store, page_size=2)

        result = await use_case.execute(CompareValuationMethodsRequest(product_id="P-CMP"))

        calls = product_store.get_movements.await_args_list
        assert [c.kwargs["after_id"] for c in calls] == [None, 2]
        assert result.value_for(ValuationMethod.FIFO) == 1000
        assert result.value_for(ValuationMethod.LIFO) == 900

    async def test_ledger_filling_last_page_exactly(self, product_store, ledger):
        product_store.get_movements.side_effect = _paged(ledger)
        use_case = CompareValuationMethodsUseCase(product_store=product_store, page_size=1)

        result = await use_case.execute(CompareValuationMethodsRequest(product_id="P-CMP"))

        calls = product_store.get_movements.await_args_list
        assert [c.kwargs["after_id"] for c in calls] == [None, 1, 2, 3]
        assert result.cogs_for(ValuationMethod.FIFO) == 600

    async def test_supplied_history_skips_store(self, use_case, product_store):
        request = CompareValuationMethodsRequest(
            product_id="P-CMP",
            transactions=[
                StockTransactionItem(direction="in", quantity=10, rate=2),
                StockTransactionItem(direction="out", quantity=4),
            ],
        )

        result = await use_case.execute(request)

        product_store.get_movements.assert_not_awaited()
        assert result.cogs_for(ValuationMethod.FIFO) == 8

    async def test_to_response(self, use_case, product_store, ledger):
        product_store.get_movements.return_value = ledger
        result = await use_case.execute(CompareValuationMethodsRequest(product_id="P-CMP"))

        response = use_case.to_response(result)

        assert {m.method for m in response.methods} == {m.value for m in ValuationMethod}
        assert response.variance_percentage == pytest.approx(11.11)


class TestMovementToTransaction:
    def test_outgoing_drops_rate(self, ledger):
        tx = movement_to_transaction(ledger[2])
        assert tx.direction == TransactionDirection.OUT
        assert tx.rate is None
        assert tx.quantity == 60

    def test_incoming_keeps_rate(self, ledger):
        assert movement_to_transaction(ledger[1]).rate == 12
