"""
Inventory valuation strategies.

Four interchangeable algorithms over the same ProductValuation shape,
held in a table keyed by ValuationMethod. Each entry is a set of pure
functions: no strategy keeps state and none mutates its input.

- FIFO: receipts append a batch; issues consume from the oldest batch.
- LIFO: receipts append a batch; issues consume from the newest batch.
- Weighted Average: every receipt collapses the queue to one batch at the
  new average rate; issues cost all units at the current rate.
- Moving Average: same computation as Weighted Average, kept as its own
  method for reporting.

Full float precision is carried throughout. Rounding belongs to reports.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import NamedTuple

from src.core.entities.inventory import Batch, ProductValuation, ValuationMethod
from src.core.exceptions import InsufficientInventoryError, ValidationError
from src.core.services.validation import require_non_negative, require_positive


class OutgoingValuation(NamedTuple):
    """Result of issuing stock: the new snapshot and what the issue cost."""

    product: ProductValuation
    cost_of_goods_sold: float
    unit_rate: float


def _queue_value(queue: Iterable[Batch]) -> float:
    return sum(batch.quantity * batch.rate for batch in queue)


def _check_outgoing(state: ProductValuation, qty: float) -> float:
    qty = require_positive("quantity", qty)
    if qty > state.quantity:
        raise InsufficientInventoryError(
            item_id=state.product_id, required=qty, available=state.quantity
        )
    return qty


# --- Batch-walking methods (FIFO / LIFO) ---------------------------------


def _append_batch(state: ProductValuation, qty: float, rate: float) -> tuple[Batch, ...]:
    qty = require_positive("quantity", qty)
    rate = require_non_negative("rate", rate)
    return (*state.batch_queue, Batch(quantity=qty, rate=rate))


def _consume(
    batches: Iterable[Batch], qty: float
) -> tuple[list[Batch], float]:
    """
    Take ``qty`` units from ``batches`` in iteration order.

    Returns the surviving batches (in iteration order) and the cost taken.
    A partially consumed batch survives with its quantity reduced and its
    rate unchanged; fully consumed batches are dropped.
    """
    remaining = qty
    cost = 0.0
    kept: list[Batch] = []
    for batch in batches:
        if remaining <= 0:
            kept.append(batch)
            continue
        take = min(batch.quantity, remaining)
        cost += take * batch.rate
        remaining -= take
        if batch.quantity > take:
            kept.append(Batch(quantity=batch.quantity - take, rate=batch.rate))
    return kept, cost


def _fifo_current_rate(state: ProductValuation) -> float:
    return state.batch_queue[0].rate if state.batch_queue else 0.0


def _lifo_current_rate(state: ProductValuation) -> float:
    return state.batch_queue[-1].rate if state.batch_queue else 0.0


def _fifo_incoming(state: ProductValuation, qty: float, rate: float) -> ProductValuation:
    queue = _append_batch(state, qty, rate)
    updated = state.model_copy(
        update={
            "quantity": state.quantity + qty,
            "total_value": state.total_value + qty * rate,
            "batch_queue": queue,
        }
    )
    # Head batch is unchanged unless the queue was empty
    return updated.model_copy(update={"current_rate": _fifo_current_rate(updated)})


def _fifo_outgoing(state: ProductValuation, qty: float) -> OutgoingValuation:
    qty = _check_outgoing(state, qty)
    kept, cogs = _consume(state.batch_queue, qty)
    queue = tuple(kept)
    updated = state.model_copy(
        update={
            "quantity": state.quantity - qty,
            "total_value": _queue_value(queue),
            "batch_queue": queue,
            "current_rate": queue[0].rate if queue else 0.0,
        }
    )
    return OutgoingValuation(updated, cogs, cogs / qty)


def _lifo_incoming(state: ProductValuation, qty: float, rate: float) -> ProductValuation:
    queue = _append_batch(state, qty, rate)
    return state.model_copy(
        update={
            "quantity": state.quantity + qty,
            "total_value": state.total_value + qty * rate,
            "batch_queue": queue,
            "current_rate": rate,
        }
    )


def _lifo_outgoing(state: ProductValuation, qty: float) -> OutgoingValuation:
    qty = _check_outgoing(state, qty)
    kept, cogs = _consume(reversed(state.batch_queue), qty)
    queue = tuple(reversed(kept))
    updated = state.model_copy(
        update={
            "quantity": state.quantity - qty,
            "total_value": _queue_value(queue),
            "batch_queue": queue,
            "current_rate": queue[-1].rate if queue else 0.0,
        }
    )
    return OutgoingValuation(updated, cogs, cogs / qty)


# --- Average methods ------------------------------------------------------


def _average_current_rate(state: ProductValuation) -> float:
    return state.batch_queue[0].rate if state.batch_queue else 0.0


def _average_incoming(state: ProductValuation, qty: float, rate: float) -> ProductValuation:
    qty = require_positive("quantity", qty)
    rate = require_non_negative("rate", rate)
    new_qty = state.quantity + qty
    new_value = state.total_value + qty * rate
    new_rate = new_value / new_qty
    return state.model_copy(
        update={
            "quantity": new_qty,
            "total_value": new_value,
            "current_rate": new_rate,
            "batch_queue": (Batch(quantity=new_qty, rate=new_rate),),
        }
    )


def _average_outgoing(state: ProductValuation, qty: float) -> OutgoingValuation:
    qty = _check_outgoing(state, qty)
    rate = _average_current_rate(state)
    cogs = qty * rate
    new_qty = state.quantity - qty
    queue = (Batch(quantity=new_qty, rate=rate),) if new_qty > 0 else ()
    updated = state.model_copy(
        update={
            "quantity": new_qty,
            "total_value": new_qty * rate,
            "current_rate": rate if queue else 0.0,
            "batch_queue": queue,
        }
    )
    return OutgoingValuation(updated, cogs, rate)


# --- Strategy table -------------------------------------------------------


@dataclass(frozen=True)
class ValuationStrategy:
    """The function set implementing one valuation method."""

    method: ValuationMethod
    apply_incoming: Callable[[ProductValuation, float, float], ProductValuation]
    apply_outgoing: Callable[[ProductValuation, float], OutgoingValuation]
    current_rate: Callable[[ProductValuation], float]


STRATEGIES: dict[ValuationMethod, ValuationStrategy] = {
    ValuationMethod.FIFO: ValuationStrategy(
        ValuationMethod.FIFO, _fifo_incoming, _fifo_outgoing, _fifo_current_rate
    ),
    ValuationMethod.LIFO: ValuationStrategy(
        ValuationMethod.LIFO, _lifo_incoming, _lifo_outgoing, _lifo_current_rate
    ),
    ValuationMethod.WEIGHTED_AVERAGE: ValuationStrategy(
        ValuationMethod.WEIGHTED_AVERAGE,
        _average_incoming,
        _average_outgoing,
        _average_current_rate,
    ),
    ValuationMethod.MOVING_AVERAGE: ValuationStrategy(
        ValuationMethod.MOVING_AVERAGE,
        _average_incoming,
        _average_outgoing,
        _average_current_rate,
    ),
}


def get_strategy(method: ValuationMethod | str) -> ValuationStrategy:
    """Look up the strategy for a method. Unknown methods are an error."""
    try:
        return STRATEGIES[ValuationMethod(method)]
    except (ValueError, KeyError):
        raise ValidationError("valuation_method", "unsupported valuation method", method) from None


def supported_methods() -> list[ValuationMethod]:
    """All valuation methods the engine can apply."""
    return list(STRATEGIES)
