"""SQLite implementation of product valuation storage."""

import json
from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.inventory import (
    Batch,
    ProductValuation,
    ReferenceType,
    StockMovement,
    TransactionDirection,
    ValuationMethod,
)
from src.core.exceptions import ConcurrencyConflictError, ProductNotFoundError
from src.core.interfaces.inventory_store import IProductValuationStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteProductValuationStore(IProductValuationStore):
    """SQLite implementation of product snapshots and the stock ledger."""

    async def create_product(self, product: ProductValuation) -> ProductValuation:
        """Insert a new snapshot at version 0."""
        created = product.model_copy(update={"version": 0})
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO products (
                        product_id, valuation_method, quantity, current_rate,
                        total_value, batch_queue, version
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        created.product_id,
                        created.valuation_method.value,
                        created.quantity,
                        created.current_rate,
                        created.total_value,
                        dump_queue(created.batch_queue),
                        created.version,
                    ),
                )
        except aiosqlite.IntegrityError:
            # Another writer created it first
            raise ConcurrencyConflictError(
                f"product:{product.product_id}", expected_version=0, actual_version=None
            ) from None

        logger.info(
            "product_created",
            product_id=created.product_id,
            method=created.valuation_method.value,
        )
        return created

    async def get_product(self, product_id: str) -> ProductValuation | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products WHERE product_id = ?", (product_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_product(row)

    async def save_product(
        self,
        product: ProductValuation,
        movements: list[StockMovement],
        expected_version: int,
    ) -> ProductValuation:
        """
        Update the snapshot if its stored version is ``expected_version``
        and append the ledger rows, all in one transaction.
        """
        async with get_transaction() as conn:
            saved = await write_product_snapshot(conn, product, movements, expected_version)

        logger.info(
            "product_saved",
            product_id=saved.product_id,
            version=saved.version,
            movements=len(movements),
        )
        return saved

    async def list_products(
        self, limit: int = 100, offset: int = 0
    ) -> list[ProductValuation]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM products
                ORDER BY product_id
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_product(row) for row in rows]

    async def get_movements(
        self, product_id: str, limit: int = 100, after_id: int | None = None
    ) -> list[StockMovement]:
        """Ledger rows for a product in the order they were written."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_movements
                WHERE product_id = ? AND id > ?
                ORDER BY id ASC
                LIMIT ?
                """,
                (product_id, after_id or 0, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> ProductValuation:
        """Convert a database row to a ProductValuation snapshot."""
        queue = tuple(Batch(**item) for item in json.loads(row["batch_queue"] or "[]"))
        return ProductValuation(
            product_id=row["product_id"],
            valuation_method=ValuationMethod(row["valuation_method"]),
            quantity=float(row["quantity"]),
            current_rate=float(row["current_rate"]),
            total_value=float(row["total_value"]),
            batch_queue=queue,
            version=int(row["version"]),
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
        timestamp = datetime.now(UTC)
        if row["created_at"]:
            try:
                timestamp = datetime.fromisoformat(row["created_at"])
            except ValueError:
                logger.warning("movement_timestamp_unparseable", movement_id=row["id"])

        return StockMovement(
            id=row["id"],
            product_id=row["product_id"],
            direction=TransactionDirection(row["direction"]),
            quantity=float(row["quantity"]),
            rate=float(row["rate"]),
            cost_of_goods_sold=float(row["cost_of_goods_sold"]),
            reference_type=(
                ReferenceType(row["reference_type"]) if row["reference_type"] else None
            ),
            reference_id=row["reference_id"],
            notes=row["notes"],
            timestamp=timestamp,
        )


def dump_queue(queue: tuple[Batch, ...]) -> str:
    return json.dumps([batch.model_dump() for batch in queue])


async def write_product_snapshot(
    conn: aiosqlite.Connection,
    product: ProductValuation,
    movements: list[StockMovement],
    expected_version: int,
) -> ProductValuation:
    """
    Versioned snapshot update plus ledger rows on an open transaction.

    Shared by every store method that moves stock, so each caller decides
    what else commits in the same transaction.
    """
    saved = product.model_copy(update={"version": expected_version + 1})
    cursor = await conn.execute(
        """
        UPDATE products SET
            valuation_method = ?,
            quantity = ?,
            current_rate = ?,
            total_value = ?,
            batch_queue = ?,
            version = ?,
            updated_at = datetime('now')
        WHERE product_id = ? AND version = ?
        """,
        (
            saved.valuation_method.value,
            saved.quantity,
            saved.current_rate,
            saved.total_value,
            dump_queue(saved.batch_queue),
            saved.version,
            saved.product_id,
            expected_version,
        ),
    )
    if cursor.rowcount == 0:
        await _raise_for_missing_update(conn, saved.product_id, expected_version)

    for movement in movements:
        await _insert_movement(conn, movement)
    return saved


async def _raise_for_missing_update(
    conn: aiosqlite.Connection, product_id: str, expected_version: int
) -> None:
    cursor = await conn.execute(
        "SELECT version FROM products WHERE product_id = ?", (product_id,)
    )
    row = await cursor.fetchone()
    if row is None:
        raise ProductNotFoundError(product_id)
    logger.warning(
        "product_version_conflict",
        product_id=product_id,
        expected_version=expected_version,
        actual_version=row["version"],
    )
    raise ConcurrencyConflictError(
        f"product:{product_id}",
        expected_version=expected_version,
        actual_version=row["version"],
    )


async def _insert_movement(conn: aiosqlite.Connection, movement: StockMovement) -> None:
    await conn.execute(
        """
        INSERT INTO stock_movements (
            product_id, direction, quantity, rate, cost_of_goods_sold,
            reference_type, reference_id, notes, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            movement.product_id,
            movement.direction.value,
            movement.quantity,
            movement.rate,
            movement.cost_of_goods_sold,
            movement.reference_type.value if movement.reference_type else None,
            movement.reference_id,
            movement.notes,
            movement.timestamp.isoformat(),
        ),
    )
