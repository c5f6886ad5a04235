"""Tests for CompleteStageUseCase."""

import pytest

from src.application.dto.requests import CompleteStageRequest
from src.application.use_cases.complete_stage import CompleteStageUseCase
from src.core.entities.inventory import ProductValuation, ReferenceType, ValuationMethod
from src.core.entities.manufacturing import (
    CostComponents,
    ManufacturingOrder,
    ManufacturingStage,
    StageNumber,
    StageStatus,
)
from src.core.exceptions import (
    InvalidStageTransitionError,
    ManufacturingOrderNotFoundError,
    StageNotFoundError,
)


@pytest.fixture
def use_case(stage_store, order_store, product_store):
    return CompleteStageUseCase(
        stage_store=stage_store, order_store=order_store, product_store=product_store
    )


@pytest.fixture
def costed_rolling():
    return ManufacturingStage(
        mo_id="MO-001",
        stage_no=10,
        status=StageStatus.IN_PROGRESS,
        costs=CostComponents(direct_materials=5000, direct_labor=1000, manufacturing_overhead=500),
        version=3,
    )


@pytest.fixture
def terminal_stage():
    return ManufacturingStage(
        mo_id="MO-001",
        stage_no=50,
        status=StageStatus.IN_PROGRESS,
        previous_stage_unit_cost=70,
        costs=CostComponents(regrind_processing=160),
        version=2,
    )


def _stages(*stages):
    by_no = {int(s.stage_no): s for s in stages}

    async def _get(mo_id, stage_no):
        return by_no.get(int(stage_no))

    return _get


class TestIntermediateStage:
    async def test_transfers_unit_cost(self, use_case, stage_store, costed_rolling):
        planning_20 = ManufacturingStage(mo_id="MO-001", stage_no=20)
        stage_store.get_stage.side_effect = _stages(costed_rolling, planning_20)

        result = await use_case.execute(
            CompleteStageRequest(mo_id="MO-001", stage_no=10, completed_qty=100, scrap_qty=5)
        )

        assert result.stage.status == StageStatus.COMPLETED
        assert result.stage.unit_cost == 65
        assert result.stage.version == 4
        assert result.next_stage.stage_no is StageNumber.TRANSPARENCY_PROCESSING
        assert result.next_stage.previous_stage_unit_cost == 65
        assert result.next_stage.version == 1
        assert result.finished_goods is None
        stage_store.save_stage_transfer.assert_awaited_once()
        stage_store.save_stage.assert_not_awaited()

    async def test_missing_next_stage(self, use_case, stage_store, costed_rolling):
        stage_store.get_stage.side_effect = _stages(costed_rolling)

        with pytest.raises(StageNotFoundError):
            await use_case.execute(
                CompleteStageRequest(mo_id="MO-001", stage_no=10, completed_qty=100)
            )
        stage_store.save_stage.assert_not_awaited()
        stage_store.save_stage_transfer.assert_not_awaited()

    async def test_next_stage_already_completed(self, use_case, stage_store, costed_rolling):
        done_20 = ManufacturingStage(mo_id="MO-001", stage_no=20, status=StageStatus.COMPLETED)
        stage_store.get_stage.side_effect = _stages(costed_rolling, done_20)

        with pytest.raises(InvalidStageTransitionError):
            await use_case.execute(
                CompleteStageRequest(mo_id="MO-001", stage_no=10, completed_qty=100)
            )

    async def test_rework_recorded_not_costed(self, use_case, stage_store, costed_rolling):
        stage_store.get_stage.side_effect = _stages(
            costed_rolling, ManufacturingStage(mo_id="MO-001", stage_no=20)
        )

        result = await use_case.execute(
            CompleteStageRequest(
                mo_id="MO-001", stage_no=10, completed_qty=100, scrap_qty=5, rework_qty=7
            )
        )

        assert result.stage.rework_qty == 7
        assert result.stage.unit_cost == 65
        assert use_case.to_response(result).stage.rework_qty == 7

    async def test_completed_stage_rejected(self, use_case, stage_store):
        stage_store.get_stage.side_effect = _stages(
            ManufacturingStage(mo_id="MO-001", stage_no=10, status=StageStatus.COMPLETED)
        )

        with pytest.raises(InvalidStageTransitionError):
            await use_case.execute(
                CompleteStageRequest(mo_id="MO-001", stage_no=10, completed_qty=1)
            )


class TestTerminalStage:
    async def test_receives_finished_goods(
        self, use_case, stage_store, order_store, product_store, terminal_stage
    ):
        stage_store.get_stage.side_effect = _stages(terminal_stage)
        order_store.get_order.return_value = ManufacturingOrder(mo_id="MO-001", item_id="FG-CUP")
        product_store.get_product.return_value = None

        result = await use_case.execute(
            CompleteStageRequest(mo_id="MO-001", stage_no=50, completed_qty=80)
        )

        # transferred in 80 * 70 = 5600, plus regrind 160
        assert result.stage.unit_cost == pytest.approx(72)
        assert result.completion.transfers_to_finished_goods
        assert result.finished_goods.product_id == "FG-CUP"
        assert result.finished_goods.quantity == 80
        assert result.finished_goods.current_rate == pytest.approx(72)
        assert result.finished_goods.valuation_method == ValuationMethod.WEIGHTED_AVERAGE
        assert result.movement.reference_type == ReferenceType.PRODUCTION_IN
        assert result.movement.reference_id == "MO-001"
        product_store.create_product.assert_awaited_once()
        stage_store.save_stage_with_product.assert_awaited_once()
        product_store.save_product.assert_not_awaited()

    async def test_existing_finished_goods_product(
        self, use_case, stage_store, order_store, product_store, terminal_stage
    ):
        stage_store.get_stage.side_effect = _stages(terminal_stage)
        order_store.get_order.return_value = ManufacturingOrder(mo_id="MO-001", item_id="FG-CUP")
        product_store.get_product.return_value = ProductValuation(
            product_id="FG-CUP", valuation_method=ValuationMethod.FIFO, version=7
        )

        result = await use_case.execute(
            CompleteStageRequest(mo_id="MO-001", stage_no=50, completed_qty=80)
        )

        assert result.finished_goods.version == 8
        assert result.finished_goods.batch_queue[0].quantity == 80
        product_store.create_product.assert_not_awaited()

    async def test_zero_output_skips_receipt(
        self, use_case, stage_store, order_store, product_store, terminal_stage
    ):
        stage_store.get_stage.side_effect = _stages(terminal_stage)
        order_store.get_order.return_value = ManufacturingOrder(mo_id="MO-001", item_id="FG-CUP")

        result = await use_case.execute(
            CompleteStageRequest(mo_id="MO-001", stage_no=50, completed_qty=0, scrap_qty=3)
        )

        assert result.stage.status == StageStatus.COMPLETED
        assert result.stage.unit_cost == 0
        assert result.finished_goods is None
        product_store.save_product.assert_not_awaited()
        stage_store.save_stage_with_product.assert_not_awaited()

    async def test_order_not_found(self, use_case, stage_store, order_store, terminal_stage):
        stage_store.get_stage.side_effect = _stages(terminal_stage)
        order_store.get_order.return_value = None

        with pytest.raises(ManufacturingOrderNotFoundError):
            await use_case.execute(
                CompleteStageRequest(mo_id="MO-001", stage_no=50, completed_qty=1)
            )

    async def test_to_response(
        self, use_case, stage_store, order_store, product_store, terminal_stage
    ):
        stage_store.get_stage.side_effect = _stages(terminal_stage)
        order_store.get_order.return_value = ManufacturingOrder(mo_id="MO-001", item_id="FG-CUP")
        product_store.get_product.return_value = None
        result = await use_case.execute(
            CompleteStageRequest(mo_id="MO-001", stage_no=50, completed_qty=80)
        )

        response = use_case.to_response(result)

        assert response.next_stage_no is None
        assert response.finished_goods.product_id == "FG-CUP"
        assert response.finished_goods_movement.reference_type == "production_in"
