"""Abstract interfaces for manufacturing stage and order storage."""

from abc import ABC, abstractmethod

from src.core.entities.inventory import ProductValuation, StockMovement
from src.core.entities.manufacturing import (
    ManufacturingOrder,
    ManufacturingStage,
    StageCostPosting,
)


class IStageStore(ABC):
    """
    Interface for manufacturing stage cost records, keyed by (mo_id, stage_no).

    Every save method is one unit of work: all of its writes commit together
    or none do, and any stale ``expected_version`` fails the whole call with
    ConcurrencyConflictError.
    """

    @abstractmethod
    async def create_stage(self, stage: ManufacturingStage) -> ManufacturingStage:
        """Create a stage record."""
        pass

    @abstractmethod
    async def get_stage(self, mo_id: str, stage_no: int) -> ManufacturingStage | None:
        """Get a stage record."""
        pass

    @abstractmethod
    async def save_stage(
        self,
        stage: ManufacturingStage,
        expected_version: int,
        postings: list[StageCostPosting] | None = None,
    ) -> ManufacturingStage:
        """Persist a stage snapshot and the postings that produced it."""
        pass

    @abstractmethod
    async def save_stage_transfer(
        self,
        stage: ManufacturingStage,
        expected_version: int,
        next_stage: ManufacturingStage,
        next_expected_version: int,
    ) -> tuple[ManufacturingStage, ManufacturingStage]:
        """Persist a completed stage and the stage receiving its cost."""
        pass

    @abstractmethod
    async def save_stage_with_product(
        self,
        stage: ManufacturingStage,
        expected_version: int,
        product: ProductValuation,
        movements: list[StockMovement],
        product_expected_version: int,
        postings: list[StageCostPosting] | None = None,
    ) -> tuple[ManufacturingStage, ProductValuation]:
        """
        Persist a stage together with the product snapshot it moved stock of.

        Used where stock and stage cost change in the same business event:
        materials issued into a stage, and terminal output received into
        finished goods.
        """
        pass

    @abstractmethod
    async def list_stages(self, mo_id: str) -> list[ManufacturingStage]:
        """List all stage records of a manufacturing order by stage number."""
        pass

    @abstractmethod
    async def list_postings(
        self, mo_id: str, stage_no: int | None = None
    ) -> list[StageCostPosting]:
        """Cost postings of an order (or one of its stages), oldest first."""
        pass


class IManufacturingOrderStore(ABC):
    """Interface for manufacturing order headers."""

    @abstractmethod
    async def create_order(self, order: ManufacturingOrder) -> ManufacturingOrder:
        """Create a manufacturing order."""
        pass

    @abstractmethod
    async def get_order(self, mo_id: str) -> ManufacturingOrder | None:
        """Get a manufacturing order by ID."""
        pass
