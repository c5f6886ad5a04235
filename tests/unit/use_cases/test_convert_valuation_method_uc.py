"""Tests for ConvertValuationMethodUseCase."""

import pytest

from src.application.dto.requests import ConvertValuationMethodRequest
from src.application.use_cases.convert_valuation_method import ConvertValuationMethodUseCase
from src.core.entities.inventory import Batch, ValuationMethod
from src.core.exceptions import ProductNotFoundError, ValidationError


@pytest.fixture
def use_case(product_store):
    return ConvertValuationMethodUseCase(product_store=product_store)


class TestConvertValuationMethodUseCase:
    async def test_requires_confirmation(self, use_case, product_store):
        request = ConvertValuationMethodRequest(
            product_id="P-FIFO", new_method=ValuationMethod.LIFO
        )
        with pytest.raises(ValidationError) as exc_info:
            await use_case.execute(request)
        assert exc_info.value.details["field"] == "confirm_irreversible"
        product_store.get_product.assert_not_awaited()

    async def test_conversion_saved_without_movements(self, use_case, product_store, fifo_product):
        product_store.get_product.return_value = fifo_product

        result = await use_case.execute(
            ConvertValuationMethodRequest(
                product_id="P-FIFO",
                new_method=ValuationMethod.MOVING_AVERAGE,
                confirm_irreversible=True,
            )
        )

        assert result.product.valuation_method == ValuationMethod.MOVING_AVERAGE
        assert result.product.batch_queue == (Batch(quantity=80, rate=10),)
        assert result.product.version == 1
        assert result.discarded_batches == 2
        assert result.revaluation_delta == pytest.approx(-60)
        assert product_store.save_product.call_args[0][1] == []

        response = use_case.to_response(result)
        assert response.previous_method == "FIFO"
        assert response.irreversible is True

    async def test_same_method(self, use_case, product_store, fifo_product):
        product_store.get_product.return_value = fifo_product

        with pytest.raises(ValidationError):
            await use_case.execute(
                ConvertValuationMethodRequest(
                    product_id="P-FIFO",
                    new_method=ValuationMethod.FIFO,
                    confirm_irreversible=True,
                )
            )

    async def test_not_found(self, use_case, product_store):
        product_store.get_product.return_value = None

        with pytest.raises(ProductNotFoundError):
            await use_case.execute(
                ConvertValuationMethodRequest(
                    product_id="P-X",
                    new_method=ValuationMethod.FIFO,
                    confirm_irreversible=True,
                )
            )
