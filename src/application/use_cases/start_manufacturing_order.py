"""Start Manufacturing Order Use Case."""

from dataclasses import dataclass, field

from src.application.dto.requests import StartManufacturingOrderRequest
from src.application.dto.responses import ManufacturingOrderResponse, StageResponse
from src.config import aggregate_context, get_logger
from src.core.entities.manufacturing import ManufacturingOrder, ManufacturingStage, StageNumber
from src.core.exceptions import ValidationError
from src.core.interfaces.stage_store import IManufacturingOrderStore, IStageStore

logger = get_logger(__name__)


@dataclass
class StartManufacturingOrderResult:
    order: ManufacturingOrder
    stages: list[ManufacturingStage] = field(default_factory=list)


class StartManufacturingOrderUseCase:
    """Create a manufacturing order with every stage in planning."""

    def __init__(
        self,
        order_store: IManufacturingOrderStore | None = None,
        stage_store: IStageStore | None = None,
    ):
        self._order_store = order_store
        self._stage_store = stage_store

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

    async def execute(
        self, request: StartManufacturingOrderRequest
    ) -> StartManufacturingOrderResult:
        with aggregate_context(mo_id=request.mo_id):
            order_store = await self._get_order_store()
            if await order_store.get_order(request.mo_id) is not None:
                raise ValidationError("mo_id", "manufacturing order already exists", request.mo_id)

            order = await order_store.create_order(
                ManufacturingOrder(
                    mo_id=request.mo_id,
                    item_id=request.item_id,
                    order_number=request.order_number,
                    planned_qty=request.planned_qty,
                )
            )

            stage_store = await self._get_stage_store()
            stages = []
            for stage_no in sorted(StageNumber):
                stage = await stage_store.create_stage(
                    ManufacturingStage(
                        mo_id=request.mo_id,
                        stage_no=stage_no,
                        work_center_id=request.work_center_id,
                    )
                )
                stages.append(stage)

            logger.info(
                "manufacturing_order_started",
                item_id=request.item_id,
                stages=[int(s.stage_no) for s in stages],
            )
            return StartManufacturingOrderResult(order=order, stages=stages)

    def to_response(self, result: StartManufacturingOrderResult) -> ManufacturingOrderResponse:
        return ManufacturingOrderResponse(
            mo_id=result.order.mo_id,
            item_id=result.order.item_id,
            order_number=result.order.order_number,
            planned_qty=result.order.planned_qty,
            stages=[StageResponse.from_entity(s) for s in result.stages],
        )
