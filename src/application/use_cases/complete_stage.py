"""Complete Stage Use Case — stage output, cost transfer and FG receipt."""

from dataclasses import dataclass

from src.application.dto.requests import CompleteStageRequest
from src.application.dto.responses import (
    ProductValuationResponse,
    StageCompletionResponse,
    StageResponse,
    StockMovementResponse,
)
from src.application.services import (
    get_default_valuation_method,
    get_process_cost_manager,
    get_stock_processor,
)
from src.config import aggregate_context, get_logger
from src.core.entities.inventory import (
    ProductValuation,
    ReferenceType,
    StockMovement,
    StockTransaction,
    TransactionDirection,
)
from src.core.entities.manufacturing import ManufacturingStage
from src.core.exceptions import ManufacturingOrderNotFoundError, StageNotFoundError
from src.core.interfaces.inventory_store import IProductValuationStore
from src.core.interfaces.stage_store import IManufacturingOrderStore, IStageStore
from src.core.services import (
    ProcessCostManager,
    StageCompletion,
    StockTransactionProcessor,
    TransactionResult,
    to_stage_number,
)

logger = get_logger(__name__)


@dataclass
class CompleteStageResult:
    """Completed stage and the record its cost moved into."""

    stage: ManufacturingStage
    completion: StageCompletion
    next_stage: ManufacturingStage | None = None
    finished_goods: ProductValuation | None = None
    movement: StockMovement | None = None


class CompleteStageUseCase:
    """
    Complete a stage and move its cost forward.

    Intermediate stages hand their unit cost to the next stage as its
    transferred-in cost. The terminal stage receives its good output into
    the order's finished-goods item at the stage unit cost. Either way the
    completed stage and its counterpart are saved in one unit of work, so a
    version conflict leaves both untouched and the call can be retried.
    """

    def __init__(
        self,
        stage_store: IStageStore | None = None,
        order_store: IManufacturingOrderStore | None = None,
        product_store: IProductValuationStore | None = None,
        processor: StockTransactionProcessor | None = None,
        manager: ProcessCostManager | None = None,
    ):
        self._stage_store = stage_store
        self._order_store = order_store
        self._product_store = product_store
        self._processor = processor or get_stock_processor()
        self._manager = manager or get_process_cost_manager()

    async def _get_stage_store(self) -> IStageStore:
        if self._stage_store is None:
            from src.infrastructure.storage.sqlite import get_stage_store

            self._stage_store = await get_stage_store()
        return self._stage_store

    async def _get_order_store(self) -> IManufacturingOrderStore:
        if self._order_store is None:
            from src.infrastructure.storage.sqlite import get_order_store

            self._order_store = await get_order_store()
        return self._order_store

    async def _get_product_store(self) -> IProductValuationStore:
        if self._product_store is None:
            from src.infrastructure.storage.sqlite import get_product_store

            self._product_store = await get_product_store()
        return self._product_store

    async def execute(self, request: CompleteStageRequest) -> CompleteStageResult:
        """Execute stage completion."""
        stage_no = to_stage_number(request.stage_no)
        with aggregate_context(mo_id=request.mo_id, stage_no=int(stage_no)):
            stage_store = await self._get_stage_store()
            stage = await stage_store.get_stage(request.mo_id, stage_no)
            if stage is None:
                raise StageNotFoundError(request.mo_id, stage_no)

            completion = self._manager.complete_stage(
                stage, request.completed_qty, request.scrap_qty, request.rework_qty
            )

            if completion.next_stage_no is not None:
                return await self._transfer_to_next_stage(stage, completion)
            return await self._transfer_to_finished_goods(stage, completion)

    async def _transfer_to_next_stage(
        self, stage: ManufacturingStage, completion: StageCompletion
    ) -> CompleteStageResult:
        stage_store = await self._get_stage_store()
        next_no = completion.next_stage_no
        next_stage = await stage_store.get_stage(stage.mo_id, next_no)
        if next_stage is None:
            raise StageNotFoundError(stage.mo_id, next_no)
        receiving = self._manager.receive_transfer(next_stage, completion.result.unit_cost)

        saved, saved_next = await stage_store.save_stage_transfer(
            completion.stage,
            expected_version=stage.version,
            next_stage=receiving,
            next_expected_version=next_stage.version,
        )

        logger.info(
            "stage_cost_transferred",
            to_stage=int(next_no),
            unit_cost=completion.result.unit_cost,
        )
        return CompleteStageResult(stage=saved, completion=completion, next_stage=saved_next)

    async def _transfer_to_finished_goods(
        self, stage: ManufacturingStage, completion: StageCompletion
    ) -> CompleteStageResult:
        order_store = await self._get_order_store()
        order = await order_store.get_order(stage.mo_id)
        if order is None:
            raise ManufacturingOrderNotFoundError(stage.mo_id)

        stage_store = await self._get_stage_store()
        result = completion.result
        if result.good_qty <= 0:
            # Nothing to receive; only the stage record changes
            saved = await stage_store.save_stage(completion.stage, expected_version=stage.version)
            return CompleteStageResult(stage=saved, completion=completion)

        product_store = await self._get_product_store()
        product = await product_store.get_product(order.item_id)
        if product is None:
            product = await product_store.create_product(
                ProductValuation(
                    product_id=order.item_id,
                    valuation_method=get_default_valuation_method(),
                )
            )

        received = self._processor.process_incoming(product, result.good_qty, result.unit_cost)
        transaction = StockTransaction(
            product_id=order.item_id,
            direction=TransactionDirection.IN,
            quantity=result.good_qty,
            rate=result.unit_cost,
            reference_type=ReferenceType.PRODUCTION_IN,
            reference_id=stage.mo_id,
        )
        movement = TransactionResult(
            transaction=transaction,
            product=received,
            unit_rate=result.unit_cost,
        ).to_movement(notes=f"Output of {stage.mo_id} stage {int(stage.stage_no)}")

        saved, finished = await stage_store.save_stage_with_product(
            completion.stage,
            expected_version=stage.version,
            product=received,
            movements=[movement],
            product_expected_version=product.version,
        )

        logger.info(
            "finished_goods_received",
            item_id=order.item_id,
            quantity=result.good_qty,
            unit_cost=result.unit_cost,
        )
        return CompleteStageResult(
            stage=saved,
            completion=completion,
            finished_goods=finished,
            movement=movement,
        )

    def to_response(self, result: CompleteStageResult) -> StageCompletionResponse:
        next_no = result.completion.next_stage_no
        return StageCompletionResponse(
            stage=StageResponse.from_entity(result.stage),
            next_stage_no=int(next_no) if next_no is not None else None,
            finished_goods=(
                ProductValuationResponse.from_entity(result.finished_goods)
                if result.finished_goods is not None
                else None
            ),
            finished_goods_movement=(
                StockMovementResponse.from_entity(result.movement)
                if result.movement is not None
                else None
            ),
        )
