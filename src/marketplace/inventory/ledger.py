"""Inventory Ledger — the one mutual-exclusion point of the checkout path.

Every change to a stock quantity is a single guarded update evaluated by the
store, never a read/compare/write issued from application code:

* On SQL providers the ledger issues
  ``UPDATE inventory_records SET stock_quantity = stock_quantity - :n
  WHERE product_id = :id AND stock_quantity >= :n`` and reads the affected
  row count.
* On the in-memory provider (development and tests) it performs a
  compare-and-set: the update is filtered on the quantity that was observed,
  so a writer that bypassed the ledger makes it match zero rows and the
  ledger re-reads. Memory sessions copy the whole store, so ledger calls in
  one process are also serialized by a lock.

Either way two decrements that together exceed the available stock can never
both succeed.
"""

import threading
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.query import Q
from sqlalchemy import update

from marketplace.domain import marketplace
from marketplace.errors import StockContention
from marketplace.inventory.record import SCHEMA_NAME, InventoryRecord
from marketplace.utils.db import is_sql_provider

logger = structlog.get_logger(__name__)

MAX_CAS_ATTEMPTS = 5

_memory_lock = threading.Lock()


@dataclass(frozen=True)
class StockChange:
    """Outcome of a ledger mutation."""

    product_id: str
    quantity: int
    applied: bool

    @property
    def insufficient(self) -> bool:
        return not self.applied


def _check_quantity(quantity, allow_zero=False):
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError({"quantity": ["Quantity must be an integer"]})
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise ValidationError({"quantity": ["Quantity must be positive"]})


def guarded_stock_update(session, table, product_id: str, delta: int) -> bool:
    """Apply ``delta`` in one statement; a decrement only matches a row holding enough stock."""
    stmt = update(table).where(table.c.product_id == product_id)
    if delta < 0:
        stmt = stmt.where(table.c.stock_quantity >= -delta)
    stmt = stmt.values(
        stock_quantity=table.c.stock_quantity + delta,
        updated_at=datetime.now(UTC),
    )

    try:
        result = session.execute(stmt)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    return result.rowcount == 1


@marketplace.repository(part_of=InventoryRecord)
class InventoryLedger:
    def get_stock(self, product_id) -> int:
        """Current quantity; a product without a record has no stock."""
        try:
            record = self.get(str(product_id))
        except ObjectNotFoundError:
            return 0
        return record.stock_quantity or 0

    def set_stock(self, product_id, quantity) -> InventoryRecord:
        """Administrative overwrite, used by vendor product management."""
        _check_quantity(quantity, allow_zero=True)

        try:
            record = self.get(str(product_id))
            record.overwrite(quantity)
        except ObjectNotFoundError:
            record = InventoryRecord.create(product_id=str(product_id), stock_quantity=quantity)

        self.add(record)
        logger.info("Stock overwritten", product_id=str(product_id), stock_quantity=quantity)
        return record

    def decrement(self, product_id, quantity) -> StockChange:
        """Subtract ``quantity`` only if the result stays at or above zero."""
        _check_quantity(quantity)
        applied = self._apply_delta(str(product_id), -quantity)

        if applied:
            logger.debug("Stock decremented", product_id=str(product_id), quantity=quantity)
        else:
            logger.info("Stock decrement refused", product_id=str(product_id), quantity=quantity)
        return StockChange(product_id=str(product_id), quantity=quantity, applied=applied)

    def increment(self, product_id, quantity) -> StockChange:
        """Add ``quantity`` back. Used to compensate an aborted checkout."""
        _check_quantity(quantity)
        applied = self._apply_delta(str(product_id), quantity)
        logger.debug("Stock incremented", product_id=str(product_id), quantity=quantity, applied=applied)
        return StockChange(product_id=str(product_id), quantity=quantity, applied=applied)

    # -------------------------------------------------------------------
    # Guarded updates
    # -------------------------------------------------------------------
    def _apply_delta(self, product_id: str, delta: int) -> bool:
        if is_sql_provider(self._provider):
            return self._guarded_update(product_id, delta)
        return self._compare_and_set(product_id, delta)

    def _guarded_update(self, product_id: str, delta: int) -> bool:
        self._dao  # noqa: B018 - registers the model with the provider metadata
        table = self._provider._metadata.tables[SCHEMA_NAME]
        return guarded_stock_update(self._provider.get_connection(), table, product_id, delta)

    def _compare_and_set(self, product_id: str, delta: int) -> bool:
        for _ in range(MAX_CAS_ATTEMPTS):
            with _memory_lock:
                try:
                    observed = self.get(product_id).stock_quantity or 0
                except ObjectNotFoundError:
                    return False

                if observed + delta < 0:
                    return False

                updated = self._dao._update_all(
                    Q(product_id=product_id, stock_quantity=observed),
                    stock_quantity=observed + delta,
                    updated_at=datetime.now(UTC),
                )
            if updated:
                return True

        raise StockContention(product_id)
