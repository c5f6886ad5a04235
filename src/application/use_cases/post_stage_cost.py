"""Post Stage Cost Use Case: labor, overhead and other stage postings."""

from dataclasses import dataclass

from src.application.dto.requests import PostStageCostRequest
from src.application.dto.responses import StageCostPostingResponse, StageResponse
from src.application.services import get_process_cost_manager
from src.config import aggregate_context, get_logger
from src.core.entities.manufacturing import ManufacturingStage, StageCostPosting
from src.core.exceptions import StageNotFoundError
from src.core.interfaces.stage_store import IStageStore
from src.core.services import ProcessCostManager, to_stage_number

logger = get_logger(__name__)


@dataclass
class PostStageCostResult:
    stage: ManufacturingStage
    posting: StageCostPosting


class PostStageCostUseCase:
    """
    Apply one cost posting to a stage and persist it.

    The posting record is written in the same transaction as the stage, so
    the stage's cost buckets can always be rebuilt from its postings.
    """

    def __init__(
        self,
        stage_store: IStageStore | None = None,
        manager: ProcessCostManager | None = None,
    ):
        self._stage_store = stage_store
        self._manager = manager or get_process_cost_manager()

    async def _get_stage_store(self) -> IStageStore:
        if self._stage_store is None:
            from src.infrastructure.storage.sqlite import get_stage_store

            self._stage_store = await get_stage_store()
        return self._stage_store

    async def execute(self, request: PostStageCostRequest) -> PostStageCostResult:
        stage_no = to_stage_number(request.stage_no)
        with aggregate_context(mo_id=request.mo_id, stage_no=int(stage_no)):
            store = await self._get_stage_store()
            stage = await store.get_stage(request.mo_id, stage_no)
            if stage is None:
                raise StageNotFoundError(request.mo_id, stage_no)

            updated, posting = self._manager.post_cost(
                stage,
                request.kind,
                amount=request.amount,
                base_qty=request.quantity,
                rate=request.rate,
                basis=request.basis,
                employee_name=request.employee_name,
                operation_code=request.operation_code,
                reference_id=request.reference_id,
                notes=request.notes,
            )
            saved = await store.save_stage(
                updated, expected_version=stage.version, postings=[posting]
            )

            logger.info(
                "stage_cost_posted",
                kind=request.kind.value,
                amount=posting.amount,
                total_cost=saved.total_cost,
                status=saved.status.value,
            )
            return PostStageCostResult(stage=saved, posting=posting)

    def to_response(self, result: PostStageCostResult) -> StageResponse:
        return StageResponse.from_entity(result.stage)

    def posting_response(self, result: PostStageCostResult) -> StageCostPostingResponse:
        return StageCostPostingResponse.from_entity(result.posting)
