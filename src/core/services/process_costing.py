"""
Multi-stage process costing.

Layer-pure service. Costs accumulate on each ManufacturingStage as labor,
overhead and material postings arrive. Completing a stage computes its unit
cost, which either becomes the next stage's transferred-in unit cost or, for
the terminal stage, the rate at which output enters finished goods.

Equivalent units are good + scrap, without percentage-of-completion
weighting of work in process.

Caller contract: postings against one (mo_id, stage_no) must be applied
one at a time.
"""

from dataclasses import dataclass

from src.config import get_logger
from src.core.entities.manufacturing import (
    MATERIALS_STAGE,
    TERMINAL_STAGE,
    CostComponents,
    CostType,
    ManufacturingStage,
    OverheadBasis,
    StageCostPosting,
    StageCostResult,
    StageNumber,
    StageStatus,
)
from src.core.exceptions import InvalidStageTransitionError, ValidationError
from src.core.services.validation import require_non_negative

logger = get_logger(__name__)

# Allowed forward move from each status; closed has none
_NEXT_STATUS: dict[StageStatus, StageStatus] = {
    StageStatus.PLANNING: StageStatus.IN_PROGRESS,
    StageStatus.IN_PROGRESS: StageStatus.COMPLETED,
    StageStatus.COMPLETED: StageStatus.CLOSED,
}

_POSTABLE = frozenset({StageStatus.PLANNING, StageStatus.IN_PROGRESS})


@dataclass(frozen=True)
class StageCompletion:
    """Outcome of completing a stage."""

    stage: ManufacturingStage
    result: StageCostResult
    next_stage_no: StageNumber | None  # None when the stage is terminal

    @property
    def transfers_to_finished_goods(self) -> bool:
        return self.next_stage_no is None


@dataclass(frozen=True)
class OrderCostSummary:
    """Cost roll-up of all stages of one manufacturing order."""

    mo_id: str
    stages: list[ManufacturingStage]
    total_direct_materials: float
    total_direct_labor: float
    total_overhead: float
    total_regrind: float
    total_waste_credit: float
    completed_qty: float
    finished_unit_cost: float

    @property
    def total_cost(self) -> float:
        """Cost added across the order. Transferred-in cost is not counted twice."""
        return (
            self.total_direct_materials
            + self.total_direct_labor
            + self.total_overhead
            + self.total_regrind
            - self.total_waste_credit
        )


def to_stage_number(stage_no: int) -> StageNumber:
    """Validate a raw stage number."""
    try:
        return StageNumber(stage_no)
    except ValueError:
        raise ValidationError(
            "stage_no",
            f"must be one of {[int(s) for s in StageNumber]}",
            stage_no,
        ) from None


def next_stage_no(stage_no: int) -> StageNumber | None:
    """Stage that follows ``stage_no``, or None for the terminal stage."""
    current = to_stage_number(stage_no)
    later = [s for s in StageNumber if s > current]
    return min(later) if later else None


class ProcessCostManager:
    """Stage cost accumulation, completion and transfer."""

    def calculate_stage_cost(
        self,
        stage_no: int,
        good_qty: float,
        scrap_qty: float,
        costs: CostComponents,
        previous_stage_unit_cost: float = 0.0,
    ) -> StageCostResult:
        """
        Compute a stage's total and unit cost.

        transferred_in = (good + scrap) * previous unit cost, for stages
        after the materials stage. Direct materials are only valid on the
        materials stage; anything else raises InvalidStageTransitionError.
        """
        stage = to_stage_number(stage_no)
        good_qty = require_non_negative("good_qty", good_qty)
        scrap_qty = require_non_negative("scrap_qty", scrap_qty)
        previous_stage_unit_cost = require_non_negative(
            "previous_stage_unit_cost", previous_stage_unit_cost
        )
        self._check_components(stage, costs)

        equivalent_units = good_qty + scrap_qty
        transferred_in = 0.0
        if stage > MATERIALS_STAGE and previous_stage_unit_cost > 0:
            transferred_in = equivalent_units * previous_stage_unit_cost

        effective = costs.model_copy(
            update={
                "transferred_in": transferred_in,
                "direct_materials": costs.direct_materials if stage == MATERIALS_STAGE else 0.0,
            }
        )
        total_cost = effective.total
        unit_cost = total_cost / good_qty if good_qty > 0 else 0.0

        return StageCostResult(
            stage_no=stage,
            good_qty=good_qty,
            scrap_qty=scrap_qty,
            equivalent_units=equivalent_units,
            costs=effective,
            total_cost=total_cost,
            unit_cost=unit_cost,
        )

    # --- Postings -------------------------------------------------------

    def apply_labor_cost(
        self, stage: ManufacturingStage, hours: float, rate: float
    ) -> ManufacturingStage:
        """Add hours * rate to direct labor."""
        hours = require_non_negative("hours", hours)
        rate = require_non_negative("rate", rate)
        amount = hours * rate
        updated = self._post(stage, "direct_labor", amount)
        logger.info(
            "labor_cost_applied",
            mo_id=stage.mo_id,
            stage_no=int(stage.stage_no),
            hours=hours,
            rate=rate,
            amount=amount,
        )
        return updated

    def apply_overhead_cost(
        self,
        stage: ManufacturingStage,
        base_qty: float,
        rate: float,
        basis: OverheadBasis | str = OverheadBasis.LABOR_HOURS,
    ) -> ManufacturingStage:
        """Add base_qty * rate to manufacturing overhead."""
        base_qty = require_non_negative("base_qty", base_qty)
        rate = require_non_negative("rate", rate)
        try:
            basis = OverheadBasis(basis)
        except ValueError:
            raise ValidationError("basis", "unsupported overhead basis", basis) from None
        amount = base_qty * rate
        updated = self._post(stage, "manufacturing_overhead", amount)
        logger.info(
            "overhead_cost_applied",
            mo_id=stage.mo_id,
            stage_no=int(stage.stage_no),
            basis=basis.value,
            base_qty=base_qty,
            rate=rate,
            amount=amount,
        )
        return updated

    def apply_direct_materials(
        self, stage: ManufacturingStage, amount: float
    ) -> ManufacturingStage:
        """Add material cost. Only the materials stage accepts it."""
        amount = require_non_negative("direct_materials", amount)
        if stage.stage_no != MATERIALS_STAGE and amount != 0:
            raise InvalidStageTransitionError(
                int(stage.stage_no),
                f"direct materials can only be posted to stage {int(MATERIALS_STAGE)}",
                stage.status.value,
            )
        return self._post(stage, "direct_materials", amount)

    def apply_regrind_cost(self, stage: ManufacturingStage, amount: float) -> ManufacturingStage:
        amount = require_non_negative("regrind_processing", amount)
        return self._post(stage, "regrind_processing", amount)

    def apply_waste_credit(self, stage: ManufacturingStage, amount: float) -> ManufacturingStage:
        """Credit the value of saleable waste."""
        amount = require_non_negative("waste_credit", amount)
        return self._post(stage, "waste_credit", amount)

    def post_cost(
        self,
        stage: ManufacturingStage,
        cost_type: CostType | str,
        *,
        amount: float | None = None,
        base_qty: float | None = None,
        rate: float | None = None,
        basis: OverheadBasis | str | None = None,
        employee_name: str | None = None,
        operation_code: str | None = None,
        reference_id: str | None = None,
        notes: str | None = None,
    ) -> tuple[ManufacturingStage, StageCostPosting]:
        """
        Apply one posting and return the updated stage with its ledger record.

        Labor and overhead are priced as ``base_qty * rate``; every other
        cost type takes a flat ``amount``. The record's amount is exactly
        what the stage's cost bucket grew by.
        """
        try:
            cost_type = CostType(cost_type)
        except ValueError:
            raise ValidationError("cost_type", "unsupported cost type", cost_type) from None

        if cost_type in (CostType.LABOR, CostType.OVERHEAD):
            if base_qty is None or rate is None:
                raise ValidationError(
                    "base_qty", f"{cost_type.value} postings need a quantity and a rate"
                )
            if cost_type == CostType.LABOR:
                updated = self.apply_labor_cost(stage, base_qty, rate)
                basis = None
            else:
                basis = basis or OverheadBasis.LABOR_HOURS
                updated = self.apply_overhead_cost(stage, base_qty, rate, basis)
                basis = OverheadBasis(basis)
        else:
            if amount is None:
                raise ValidationError("amount", f"{cost_type.value} postings need an amount")
            apply = {
                CostType.DIRECT_MATERIALS: self.apply_direct_materials,
                CostType.REGRIND: self.apply_regrind_cost,
                CostType.WASTE_CREDIT: self.apply_waste_credit,
            }[cost_type]
            updated = apply(stage, amount)
            base_qty = rate = basis = None

        component = cost_type.component
        posting = StageCostPosting(
            mo_id=stage.mo_id,
            stage_no=stage.stage_no,
            cost_type=cost_type,
            amount=getattr(updated.costs, component) - getattr(stage.costs, component),
            base_qty=base_qty,
            rate=rate,
            basis=basis,
            employee_name=employee_name,
            operation_code=operation_code,
            reference_id=reference_id,
            notes=notes,
        )
        return updated, posting

    @staticmethod
    def posted_costs(postings: list[StageCostPosting]) -> CostComponents:
        """Rebuild a stage's posted cost buckets from its posting records."""
        totals = dict.fromkeys((t.component for t in CostType), 0.0)
        for posting in postings:
            totals[posting.cost_type.component] += posting.amount
        return CostComponents(**totals)

    def receive_transfer(
        self, stage: ManufacturingStage, previous_stage_unit_cost: float
    ) -> ManufacturingStage:
        """Record the unit cost handed over by the completed previous stage."""
        unit_cost = require_non_negative("previous_stage_unit_cost", previous_stage_unit_cost)
        if stage.status not in _POSTABLE:
            raise InvalidStageTransitionError(
                int(stage.stage_no),
                "cannot receive a transfer after the stage is completed",
                stage.status.value,
            )
        return stage.model_copy(update={"previous_stage_unit_cost": unit_cost})

    # --- Lifecycle ------------------------------------------------------

    def start_stage(self, stage: ManufacturingStage) -> ManufacturingStage:
        """planning -> in_progress."""
        return self._transition(stage, StageStatus.IN_PROGRESS)

    def close_stage(self, stage: ManufacturingStage) -> ManufacturingStage:
        """completed -> closed. Closed stages are final."""
        closed = self._transition(stage, StageStatus.CLOSED)
        logger.info("stage_closed", mo_id=stage.mo_id, stage_no=int(stage.stage_no))
        return closed

    def complete_stage(
        self,
        stage: ManufacturingStage,
        completed_qty: float,
        scrap_qty: float = 0.0,
        rework_qty: float = 0.0,
    ) -> StageCompletion:
        """
        Record output, recompute cost and mark the stage completed.

        Rework quantity is recorded on the stage but does not enter the
        cost calculation.

        A stage still in planning is started first, so it passes through
        in_progress rather than skipping it.
        """
        rework_qty = require_non_negative("rework_qty", rework_qty)
        if stage.status == StageStatus.PLANNING:
            stage = self.start_stage(stage)
        if stage.status != StageStatus.IN_PROGRESS:
            raise InvalidStageTransitionError(
                int(stage.stage_no),
                f"cannot complete a stage that is {stage.status.value}",
                stage.status.value,
            )

        result = self.calculate_stage_cost(
            stage.stage_no,
            completed_qty,
            scrap_qty,
            stage.costs,
            stage.previous_stage_unit_cost,
        )
        completed = stage.model_copy(
            update={
                "good_qty": result.good_qty,
                "scrap_qty": result.scrap_qty,
                "rework_qty": rework_qty,
                "costs": result.costs,
                "total_cost": result.total_cost,
                "unit_cost": result.unit_cost,
                "status": StageStatus.COMPLETED,
            }
        )
        following = next_stage_no(stage.stage_no)

        logger.info(
            "stage_completed",
            mo_id=stage.mo_id,
            stage_no=int(stage.stage_no),
            good_qty=result.good_qty,
            scrap_qty=result.scrap_qty,
            total_cost=result.total_cost,
            unit_cost=result.unit_cost,
            next_stage=int(following) if following else None,
        )
        return StageCompletion(stage=completed, result=result, next_stage_no=following)

    def summarize_order(self, mo_id: str, stages: list[ManufacturingStage]) -> OrderCostSummary:
        """Roll up the costs of an order's stages."""
        ordered = sorted(
            (s for s in stages if s.mo_id == mo_id), key=lambda s: s.stage_no
        )
        terminal = next((s for s in ordered if s.stage_no == TERMINAL_STAGE), None)
        finished = terminal is not None and terminal.status in (
            StageStatus.COMPLETED,
            StageStatus.CLOSED,
        )

        return OrderCostSummary(
            mo_id=mo_id,
            stages=ordered,
            total_direct_materials=sum(s.costs.direct_materials for s in ordered),
            total_direct_labor=sum(s.costs.direct_labor for s in ordered),
            total_overhead=sum(s.costs.manufacturing_overhead for s in ordered),
            total_regrind=sum(s.costs.regrind_processing for s in ordered),
            total_waste_credit=sum(s.costs.waste_credit for s in ordered),
            completed_qty=terminal.good_qty if finished else 0.0,
            finished_unit_cost=terminal.unit_cost if finished else 0.0,
        )

    # --- Internals ------------------------------------------------------

    def _post(
        self, stage: ManufacturingStage, component: str, amount: float
    ) -> ManufacturingStage:
        if stage.status not in _POSTABLE:
            raise InvalidStageTransitionError(
                int(stage.stage_no),
                f"cannot post costs to a stage that is {stage.status.value}",
                stage.status.value,
            )
        if stage.status == StageStatus.PLANNING:
            stage = self.start_stage(stage)

        costs = stage.costs.model_copy(
            update={component: getattr(stage.costs, component) + amount}
        )
        return stage.model_copy(update={"costs": costs, "total_cost": costs.total})

    def _transition(
        self, stage: ManufacturingStage, target: StageStatus
    ) -> ManufacturingStage:
        if _NEXT_STATUS.get(stage.status) != target:
            raise InvalidStageTransitionError(
                int(stage.stage_no),
                f"cannot move from {stage.status.value} to {target.value}",
                stage.status.value,
            )
        return stage.model_copy(update={"status": target})

    @staticmethod
    def _check_components(stage: StageNumber, costs: CostComponents) -> None:
        for name, value in costs.model_dump().items():
            require_non_negative(name, value)
        if stage != MATERIALS_STAGE and costs.direct_materials != 0:
            raise InvalidStageTransitionError(
                int(stage),
                f"direct materials can only be posted to stage {int(MATERIALS_STAGE)}",
            )
