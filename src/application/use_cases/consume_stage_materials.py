"""
Consume Stage Materials Use Case.

Raw material issued from stock into stage 10.
"""

from dataclasses import dataclass

from src.application.dto.requests import ConsumeStageMaterialsRequest
from src.application.dto.responses import StageResponse
from src.application.services import get_process_cost_manager, get_stock_processor
from src.config import aggregate_context, get_logger
from src.core.entities.inventory import (
    ProductValuation,
    ReferenceType,
    StockMovement,
    StockTransaction,
    TransactionDirection,
)
from src.core.entities.manufacturing import (
    MATERIALS_STAGE,
    CostType,
    ManufacturingStage,
    StageCostPosting,
)
from src.core.exceptions import ProductNotFoundError, StageNotFoundError
from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.interfaces.stage_store import IStageStore
from src.core.services import ProcessCostManager, StockTransactionProcessor, TransactionResult

logger = get_logger(__name__)


@dataclass
class ConsumeStageMaterialsResult:
    stage: ManufacturingStage
    material: ProductValuation
    movement: StockMovement
    posting: StageCostPosting
    material_cost: float


class ConsumeStageMaterialsUseCase:
    """
    Issue raw material from stock and post its cost as direct materials.

    The material is costed under its own valuation method; that cost of
    goods sold becomes the stage's direct material cost. Both are computed
    before anything is saved and then committed in one transaction, so a
    rejected or conflicting stage never consumes stock.
    """

    def __init__(
        self,
        product_store: IProductValuationStore | None = None,
        stage_store: IStageStore | None = None,
        processor: StockTransactionProcessor | None = None,
        manager: ProcessCostManager | None = None,
    ):
        self._product_store = product_store
        self._stage_store = stage_store
        self._processor = processor or get_stock_processor()
        self._manager = manager or get_process_cost_manager()

    async def _get_product_store(self) -> IProductValuationStore:
        if self._product_store is None:
            from src.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def _get_stage_store(self) -> IStageStore:
        if self._stage_store is None:
            from src.infrastructure.storage.sqlite import get_stage_store

            self._stage_store = await get_stage_store()
        return self._stage_store

    async def execute(self, request: ConsumeStageMaterialsRequest) -> ConsumeStageMaterialsResult:
        with aggregate_context(mo_id=request.mo_id, product_id=request.material_id):
            stage_store = await self._get_stage_store()
            stage = await stage_store.get_stage(request.mo_id, MATERIALS_STAGE)
            if stage is None:
                raise StageNotFoundError(request.mo_id, MATERIALS_STAGE)

            product_store = await self._get_product_store()
            material = await product_store.get_product(request.material_id)
            if material is None:
                raise ProductNotFoundError(request.material_id)

            # 1. Cost the issue and the posting in memory
            outcome = self._processor.process_outgoing(material, request.quantity)
            updated_stage, posting = self._manager.post_cost(
                stage,
                CostType.DIRECT_MATERIALS,
                amount=outcome.cost_of_goods_sold,
                reference_id=request.reference_id,
                notes=f"{request.quantity:g} x {request.material_id}",
            )

            transaction = StockTransaction(
                product_id=request.material_id,
                direction=TransactionDirection.OUT,
                quantity=request.quantity,
                reference_type=ReferenceType.PRODUCTION_OUT,
                reference_id=request.reference_id or request.mo_id,
            )
            movement = TransactionResult(
                transaction=transaction,
                product=outcome.product,
                cost_of_goods_sold=outcome.cost_of_goods_sold,
                unit_rate=outcome.unit_rate,
            ).to_movement(notes=f"Consumed by {request.mo_id}")

            # 2. Stock, ledger row, stage and posting commit together
            saved_stage, saved_material = await stage_store.save_stage_with_product(
                updated_stage,
                expected_version=stage.version,
                product=outcome.product,
                movements=[movement],
                product_expected_version=material.version,
                postings=[posting],
            )

            logger.info(
                "stage_materials_consumed",
                quantity=request.quantity,
                material_cost=outcome.cost_of_goods_sold,
                stage_direct_materials=saved_stage.costs.direct_materials,
            )
            return ConsumeStageMaterialsResult(
                stage=saved_stage,
                material=saved_material,
                movement=movement,
                posting=posting,
                material_cost=outcome.cost_of_goods_sold,
            )

    def to_response(self, result: ConsumeStageMaterialsResult) -> StageResponse:
        return StageResponse.from_entity(result.stage)
