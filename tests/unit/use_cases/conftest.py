"""Shared store doubles for use case tests."""

from unittest.mock import AsyncMock

import pytest


async def _bump_product(product, movements, expected_version):
    return product.model_copy(update={"version": expected_version + 1})


async def _bump_stage(stage, expected_version, postings=None):
    return stage.model_copy(update={"version": expected_version + 1})


async def _bump_transfer(stage, expected_version, next_stage, next_expected_version):
    return (
        stage.model_copy(update={"version": expected_version + 1}),
        next_stage.model_copy(update={"version": next_expected_version + 1}),
    )


async def _bump_stage_with_product(
    stage, expected_version, product, movements, product_expected_version, postings=None
):
    return (
        stage.model_copy(update={"version": expected_version + 1}),
        product.model_copy(update={"version": product_expected_version + 1}),
    )


async def _echo(entity):
    return entity


@pytest.fixture
def product_store():
    """Product store whose saves return the snapshot at the next version."""
    store = AsyncMock()
    store.save_product.side_effect = _bump_product
    store.create_product.side_effect = _echo
    return store


@pytest.fixture
def stage_store():
    """Stage store whose unit-of-work saves bump every version they write."""
    store = AsyncMock()
    store.save_stage.side_effect = _bump_stage
    store.save_stage_transfer.side_effect = _bump_transfer
    store.save_stage_with_product.side_effect = _bump_stage_with_product
    store.create_stage.side_effect = _echo
    return store


@pytest.fixture
def order_store():
    store = AsyncMock()
    store.create_order.side_effect = _echo
    return store
