"""SQLite implementation of manufacturing order and stage storage."""

from datetime import datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.inventory import ProductValuation, StockMovement
from src.core.entities.manufacturing import (
    CostComponents,
    CostType,
    ManufacturingOrder,
    ManufacturingStage,
    OverheadBasis,
    StageCostPosting,
    StageNumber,
    StageStatus,
)
from src.core.exceptions import ConcurrencyConflictError, DatabaseError, StageNotFoundError
from src.core.interfaces.stage_store import IManufacturingOrderStore, IStageStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.product_store import write_product_snapshot

logger = get_logger(__name__)


class SQLiteManufacturingOrderStore(IManufacturingOrderStore):
    """SQLite implementation of manufacturing order headers."""

    async def create_order(self, order: ManufacturingOrder) -> ManufacturingOrder:
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO manufacturing_orders (mo_id, item_id, order_number, planned_qty)
                    VALUES (?, ?, ?, ?)
                    """,
                    (order.mo_id, order.item_id, order.order_number, order.planned_qty),
                )
        except aiosqlite.IntegrityError as e:
            raise DatabaseError("create_order", str(e)) from e

        logger.info("manufacturing_order_created", mo_id=order.mo_id, item_id=order.item_id)
        return order

    async def get_order(self, mo_id: str) -> ManufacturingOrder | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM manufacturing_orders WHERE mo_id = ?", (mo_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return ManufacturingOrder(
                mo_id=row["mo_id"],
                item_id=row["item_id"],
                order_number=row["order_number"],
                planned_qty=float(row["planned_qty"]),
            )


class SQLiteStageStore(IStageStore):
    """SQLite implementation of stage cost records."""

    _COLUMNS = (
        "work_center_id",
        "good_qty",
        "scrap_qty",
        "rework_qty",
        "transferred_in",
        "direct_materials",
        "direct_labor",
        "manufacturing_overhead",
        "regrind_processing",
        "waste_credit",
        "total_cost",
        "unit_cost",
        "status",
        "previous_stage_unit_cost",
    )

    async def create_stage(self, stage: ManufacturingStage) -> ManufacturingStage:
        created = stage.model_copy(update={"version": 0})
        columns = ("mo_id", "stage_no", *self._COLUMNS, "version")
        placeholders = ", ".join("?" for _ in columns)
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    f"INSERT INTO manufacturing_stages ({', '.join(columns)}) "
                    f"VALUES ({placeholders})",
                    (
                        created.mo_id,
                        int(created.stage_no),
                        *self._values(created),
                        created.version,
                    ),
                )
        except aiosqlite.IntegrityError as e:
            raise DatabaseError("create_stage", str(e)) from e

        logger.info(
            "stage_created",
            mo_id=created.mo_id,
            stage_no=int(created.stage_no),
        )
        return created

    async def get_stage(self, mo_id: str, stage_no: int) -> ManufacturingStage | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM manufacturing_stages WHERE mo_id = ? AND stage_no = ?",
                (mo_id, int(stage_no)),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_stage(row)

    async def save_stage(
        self,
        stage: ManufacturingStage,
        expected_version: int,
        postings: list[StageCostPosting] | None = None,
    ) -> ManufacturingStage:
        """Update the stage if its stored version is ``expected_version``."""
        postings = postings or []
        async with get_transaction() as conn:
            saved = await self._write_stage(conn, stage, expected_version)
            await self._insert_postings(conn, postings)

        logger.info(
            "stage_saved",
            mo_id=saved.mo_id,
            stage_no=int(saved.stage_no),
            status=saved.status.value,
            version=saved.version,
            postings=len(postings),
        )
        return saved

    async def save_stage_transfer(
        self,
        stage: ManufacturingStage,
        expected_version: int,
        next_stage: ManufacturingStage,
        next_expected_version: int,
    ) -> tuple[ManufacturingStage, ManufacturingStage]:
        async with get_transaction() as conn:
            saved = await self._write_stage(conn, stage, expected_version)
            saved_next = await self._write_stage(conn, next_stage, next_expected_version)

        logger.info(
            "stage_transfer_saved",
            mo_id=saved.mo_id,
            stage_no=int(saved.stage_no),
            next_stage_no=int(saved_next.stage_no),
        )
        return saved, saved_next

    async def save_stage_with_product(
        self,
        stage: ManufacturingStage,
        expected_version: int,
        product: ProductValuation,
        movements: list[StockMovement],
        product_expected_version: int,
        postings: list[StageCostPosting] | None = None,
    ) -> tuple[ManufacturingStage, ProductValuation]:
        """Stage, product snapshot, ledger rows and postings in one transaction."""
        async with get_transaction() as conn:
            saved_product = await write_product_snapshot(
                conn, product, movements, product_expected_version
            )
            saved = await self._write_stage(conn, stage, expected_version)
            await self._insert_postings(conn, postings or [])

        logger.info(
            "stage_saved_with_product",
            mo_id=saved.mo_id,
            stage_no=int(saved.stage_no),
            product_id=saved_product.product_id,
            movements=len(movements),
        )
        return saved, saved_product

    async def list_stages(self, mo_id: str) -> list[ManufacturingStage]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM manufacturing_stages WHERE mo_id = ? ORDER BY stage_no",
                (mo_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_stage(row) for row in rows]

    async def list_postings(
        self, mo_id: str, stage_no: int | None = None
    ) -> list[StageCostPosting]:
        query = "SELECT * FROM stage_cost_postings WHERE mo_id = ?"
        params: list = [mo_id]
        if stage_no is not None:
            query += " AND stage_no = ?"
            params.append(int(stage_no))
        query += " ORDER BY id ASC"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_posting(row) for row in rows]

    async def _write_stage(
        self, conn: aiosqlite.Connection, stage: ManufacturingStage, expected_version: int
    ) -> ManufacturingStage:
        saved = stage.model_copy(update={"version": expected_version + 1})
        assignments = ", ".join(f"{column} = ?" for column in self._COLUMNS)
        cursor = await conn.execute(
            f"UPDATE manufacturing_stages SET {assignments}, version = ?, "
            "updated_at = datetime('now') "
            "WHERE mo_id = ? AND stage_no = ? AND version = ?",
            (
                *self._values(saved),
                saved.version,
                saved.mo_id,
                int(saved.stage_no),
                expected_version,
            ),
        )
        if cursor.rowcount == 0:
            cursor = await conn.execute(
                "SELECT version FROM manufacturing_stages WHERE mo_id = ? AND stage_no = ?",
                (saved.mo_id, int(saved.stage_no)),
            )
            row = await cursor.fetchone()
            if row is None:
                raise StageNotFoundError(saved.mo_id, saved.stage_no)
            raise ConcurrencyConflictError(
                f"stage:{saved.mo_id}/{int(saved.stage_no)}",
                expected_version=expected_version,
                actual_version=row["version"],
            )
        return saved

    @staticmethod
    async def _insert_postings(
        conn: aiosqlite.Connection, postings: list[StageCostPosting]
    ) -> None:
        for posting in postings:
            await conn.execute(
                """
                INSERT INTO stage_cost_postings (
                    mo_id, stage_no, cost_type, amount, base_qty, rate, basis,
                    employee_name, operation_code, reference_id, notes, posted_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    posting.mo_id,
                    int(posting.stage_no),
                    posting.cost_type.value,
                    posting.amount,
                    posting.base_qty,
                    posting.rate,
                    posting.basis.value if posting.basis else None,
                    posting.employee_name,
                    posting.operation_code,
                    posting.reference_id,
                    posting.notes,
                    posting.posted_at.isoformat(),
                ),
            )

    @staticmethod
    def _values(stage: ManufacturingStage) -> tuple:
        costs = stage.costs
        return (
            stage.work_center_id,
            stage.good_qty,
            stage.scrap_qty,
            stage.rework_qty,
            costs.transferred_in,
            costs.direct_materials,
            costs.direct_labor,
            costs.manufacturing_overhead,
            costs.regrind_processing,
            costs.waste_credit,
            stage.total_cost,
            stage.unit_cost,
            stage.status.value,
            stage.previous_stage_unit_cost,
        )

    @staticmethod
    def _row_to_stage(row: aiosqlite.Row) -> ManufacturingStage:
        """Convert a database row to a ManufacturingStage."""
        return ManufacturingStage(
            mo_id=row["mo_id"],
            stage_no=StageNumber(row["stage_no"]),
            work_center_id=row["work_center_id"],
            good_qty=float(row["good_qty"]),
            scrap_qty=float(row["scrap_qty"]),
            rework_qty=float(row["rework_qty"]),
            costs=CostComponents(
                transferred_in=float(row["transferred_in"]),
                direct_materials=float(row["direct_materials"]),
                direct_labor=float(row["direct_labor"]),
                manufacturing_overhead=float(row["manufacturing_overhead"]),
                regrind_processing=float(row["regrind_processing"]),
                waste_credit=float(row["waste_credit"]),
            ),
            total_cost=float(row["total_cost"]),
            unit_cost=float(row["unit_cost"]),
            status=StageStatus(row["status"]),
            previous_stage_unit_cost=float(row["previous_stage_unit_cost"]),
            version=int(row["version"]),
        )

    @staticmethod
    def _row_to_posting(row: aiosqlite.Row) -> StageCostPosting:
        return StageCostPosting(
            id=row["id"],
            mo_id=row["mo_id"],
            stage_no=StageNumber(row["stage_no"]),
            cost_type=CostType(row["cost_type"]),
            amount=float(row["amount"]),
            base_qty=row["base_qty"],
            rate=row["rate"],
            basis=OverheadBasis(row["basis"]) if row["basis"] else None,
            employee_name=row["employee_name"],
            operation_code=row["operation_code"],
            reference_id=row["reference_id"],
            notes=row["notes"],
            posted_at=datetime.fromisoformat(row["posted_at"]),
        )
