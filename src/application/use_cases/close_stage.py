"""Close Stage Use Case."""

from src.application.dto.requests import CloseStageRequest
from src.application.dto.responses import StageResponse
from src.application.services import get_process_cost_manager
from src.core.entities.manufacturing import ManufacturingStage
from src.core.exceptions import StageNotFoundError
from src.core.interfaces.stage_store import IStageStore
from src.core.services import ProcessCostManager, to_stage_number


class CloseStageUseCase:
    """Close a completed stage. Closed stages accept no further changes."""

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

    async def execute(self, request: CloseStageRequest) -> ManufacturingStage:
        stage_no = to_stage_number(request.stage_no)
        store = await self._get_stage_store()
        stage = await store.get_stage(request.mo_id, stage_no)
        if stage is None:
            raise StageNotFoundError(request.mo_id, stage_no)

        closed = self._manager.close_stage(stage)
        return await store.save_stage(closed, expected_version=stage.version)

    def to_response(self, result: ManufacturingStage) -> StageResponse:
        return StageResponse.from_entity(result)
