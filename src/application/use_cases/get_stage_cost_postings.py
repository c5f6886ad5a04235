"""Get Stage Cost Postings Use Case."""

from dataclasses import dataclass, field

from src.application.dto.requests import GetStageCostPostingsRequest
from src.application.dto.responses import (
    CostComponentsResponse,
    StageCostPostingResponse,
    StageCostPostingsResponse,
)
from src.application.services import get_process_cost_manager
from src.config import get_logger
from src.core.entities.manufacturing import CostComponents, CostType, StageCostPosting
from src.core.exceptions import ManufacturingOrderNotFoundError
from src.core.interfaces.stage_store import IManufacturingOrderStore, IStageStore
from src.core.services import DEFAULT_TOLERANCE, ProcessCostManager, to_stage_number

logger = get_logger(__name__)


@dataclass
class StageCostPostingsResult:
    mo_id: str
    postings: list[StageCostPosting]
    posted_costs: CostComponents
    discrepancies: list[int] = field(default_factory=list)


class GetStageCostPostingsUseCase:
    """
    List the postings behind an order's stage costs.

    Without a cost type filter every listed stage is also checked: its
    stored cost buckets must equal the sums of its postings.
    """

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

    async def execute(self, request: GetStageCostPostingsRequest) -> StageCostPostingsResult:
        stage_no = to_stage_number(request.stage_no) if request.stage_no is not None else None

        order_store = await self._get_order_store()
        if await order_store.get_order(request.mo_id) is None:
            raise ManufacturingOrderNotFoundError(request.mo_id)

        stage_store = await self._get_stage_store()
        postings = await stage_store.list_postings(request.mo_id, stage_no)
        if request.cost_type is not None:
            postings = [p for p in postings if p.cost_type == request.cost_type]

        discrepancies: list[int] = []
        if request.cost_type is None:
            stages = await stage_store.list_stages(request.mo_id)
            for stage in stages:
                if stage_no is not None and stage.stage_no != stage_no:
                    continue
                posted = self._manager.posted_costs(
                    [p for p in postings if p.stage_no == stage.stage_no]
                )
                if not self._matches(stage.costs, posted):
                    discrepancies.append(int(stage.stage_no))

        if discrepancies:
            logger.warning(
                "stage_postings_unreconciled",
                mo_id=request.mo_id,
                stages=discrepancies,
            )
        return StageCostPostingsResult(
            mo_id=request.mo_id,
            postings=postings,
            posted_costs=self._manager.posted_costs(postings),
            discrepancies=discrepancies,
        )

    @staticmethod
    def _matches(stored: CostComponents, posted: CostComponents) -> bool:
        # transferred_in is derived on completion, never posted
        return all(
            abs(getattr(stored, t.component) - getattr(posted, t.component))
            <= DEFAULT_TOLERANCE
            for t in CostType
        )

    def to_response(self, result: StageCostPostingsResult) -> StageCostPostingsResponse:
        return StageCostPostingsResponse(
            mo_id=result.mo_id,
            postings=[StageCostPostingResponse.from_entity(p) for p in result.postings],
            posted_costs=CostComponentsResponse(**result.posted_costs.model_dump()),
            discrepancies=result.discrepancies,
        )
