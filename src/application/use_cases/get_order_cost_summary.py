"""Get Order Cost Summary Use Case."""

from src.application.dto.responses import OrderCostSummaryResponse, StageResponse
from src.application.services import get_process_cost_manager
from src.config import get_logger
from src.core.exceptions import ManufacturingOrderNotFoundError
from src.core.interfaces.stage_store import IManufacturingOrderStore, IStageStore
from src.core.services import OrderCostSummary, ProcessCostManager

logger = get_logger(__name__)


class GetOrderCostSummaryUseCase:
    """Roll up stage costs of a manufacturing order."""

    def __init__(
        self,
        order_store: IManufacturingOrderStore | None = None,
        stage_store: IStageStore | None = None,
        manager: ProcessCostManager | None = None,
    ):
        self._order_store = order_store
        self._stage_store = stage_store
        self._manager = manager or get_process_cost_manager()

    async def _get_order_store(self) -> IManufacturingOrderStore:
        if self._order_store is None:
            from src.infrastructure.storage.sqlite import get_order_store

            self._order_store = await get_order_store()
        return self._order_store

    async def _get_stage_store(self) -> IStageStore:
        if self._stage_store is None:
            from src.infrastructure.storage.sqlite import get_stage_store

            self._stage_store = await get_stage_store()
        return self._stage_store

    async def execute(self, mo_id: str) -> OrderCostSummary:
        order_store = await self._get_order_store()
        if await order_store.get_order(mo_id) is None:
            raise ManufacturingOrderNotFoundError(mo_id)

        stage_store = await self._get_stage_store()
        stages = await stage_store.list_stages(mo_id)
        summary = self._manager.summarize_order(mo_id, stages)

        logger.debug(
            "order_cost_summarized",
            mo_id=mo_id,
            stages=len(summary.stages),
            total_cost=summary.total_cost,
        )
        return summary

    def to_response(self, result: OrderCostSummary) -> OrderCostSummaryResponse:
        return OrderCostSummaryResponse(
            mo_id=result.mo_id,
            stages=[StageResponse.from_entity(s) for s in result.stages],
            total_direct_materials=result.total_direct_materials,
            total_direct_labor=result.total_direct_labor,
            total_overhead=result.total_overhead,
            total_regrind=result.total_regrind,
            total_waste_credit=result.total_waste_credit,
            total_cost=result.total_cost,
            completed_qty=result.completed_qty,
            finished_unit_cost=result.finished_unit_cost,
        )
