"""Manufacturing stage costing entities."""

from datetime import UTC, datetime
from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field


class StageNumber(IntEnum):
    """The five production stages of a manufacturing order."""

    ROLLING = 10  # materials entry point
    TRANSPARENCY_PROCESSING = 20
    LID_FORMATION = 30
    CONTAINER_FORMATION = 40
    REGRIND_PROCESSING = 50  # rework / regrind loop

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


MATERIALS_STAGE = StageNumber.ROLLING
# Highest defined stage; its output transfers to finished goods
TERMINAL_STAGE = max(StageNumber)


class StageStatus(str, Enum):
    """Stage lifecycle: planning -> in_progress -> completed -> closed."""

    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CLOSED = "closed"


class OverheadBasis(str, Enum):
    """Allocation base for manufacturing overhead."""

    LABOR_HOURS = "labor_hours"
    MACHINE_HOURS = "machine_hours"
    LABOR_COST = "labor_cost"
    UNITS_PRODUCED = "units_produced"


class CostType(str, Enum):
    """Kinds of cost posted to a stage."""

    LABOR = "labor"
    OVERHEAD = "overhead"
    DIRECT_MATERIALS = "direct_materials"
    REGRIND = "regrind"
    WASTE_CREDIT = "waste_credit"

    @property
    def component(self) -> str:
        """CostComponents field the posting accumulates into."""
        return _COST_COMPONENT[self]


_COST_COMPONENT = {
    CostType.LABOR: "direct_labor",
    CostType.OVERHEAD: "manufacturing_overhead",
    CostType.DIRECT_MATERIALS: "direct_materials",
    CostType.REGRIND: "regrind_processing",
    CostType.WASTE_CREDIT: "waste_credit",
}


class CostComponents(BaseModel):
    """Cost buckets accumulated on a stage."""

    model_config = ConfigDict(frozen=True)

    transferred_in: float = 0.0
    direct_materials: float = 0.0  # stage 10 only
    direct_labor: float = 0.0
    manufacturing_overhead: float = 0.0
    regrind_processing: float = 0.0
    waste_credit: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.transferred_in
            + self.direct_materials
            + self.direct_labor
            + self.manufacturing_overhead
            + self.regrind_processing
            - self.waste_credit
        )


class StageCostResult(BaseModel):
    """Outcome of costing one stage."""

    model_config = ConfigDict(frozen=True)

    stage_no: StageNumber
    good_qty: float
    scrap_qty: float
    equivalent_units: float  # good + scrap, no completion weighting
    costs: CostComponents
    total_cost: float
    unit_cost: float


class ManufacturingStage(BaseModel):
    """Cost record of one stage of a manufacturing order."""

    model_config = ConfigDict(frozen=True)

    mo_id: str
    stage_no: StageNumber
    work_center_id: str | None = None
    good_qty: float = 0.0
    scrap_qty: float = 0.0
    rework_qty: float = 0.0
    costs: CostComponents = CostComponents()
    total_cost: float = 0.0
    unit_cost: float = 0.0
    status: StageStatus = StageStatus.PLANNING
    # Unit cost handed over by the previous stage on its completion
    previous_stage_unit_cost: float = 0.0
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.stage_no == TERMINAL_STAGE


class ManufacturingOrder(BaseModel):
    """Manufacturing order header: which finished-goods item it produces."""

    model_config = ConfigDict(frozen=True)

    mo_id: str
    item_id: str
    order_number: str | None = None
    planned_qty: float = 0.0


class StageCostPosting(BaseModel):
    """
    Immutable record of one cost posted to a stage.

    Labor postings carry hours and the hourly rate, overhead postings the
    allocation base and rate. ``amount`` is what was added to the stage.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    mo_id: str
    stage_no: StageNumber
    cost_type: CostType
    amount: float
    base_qty: float | None = None  # labor hours or overhead base
    rate: float | None = None
    basis: OverheadBasis | None = None  # overhead only
    employee_name: str | None = None
    operation_code: str | None = None
    reference_id: str | None = None
    notes: str | None = None
    posted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
