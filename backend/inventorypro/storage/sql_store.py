# Overview: Relational store over the inventory_items / sales tables (Flask-SQLAlchemy).

from __future__ import annotations

import json
import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from sqlalchemy import func, text, update
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

from inventorypro.extensions import db
from inventorypro.models import InventoryItemRow, SaleRow, StoreCounter
from inventorypro.records import InventoryItem, Sale, SaleItem
from inventorypro.services import sales_service
from inventorypro.services.concurrency import (
    RETRYABLE_ERRORS,
    StockConflict,
    begin_write_transaction,
    lock_for_update,
    run_with_retry,
)
from inventorypro.time_utils import now_iso
from inventorypro.validation import coerce_number

from .base import StorageError, StoreBackend, new_id

logger = logging.getLogger(__name__)

RECEIPT_COUNTER = "sale_receipt"

# SQLSTATE for "function does not exist"
UNDEFINED_FUNCTION = "42883"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

ITEM_COLUMNS = ("name", "category", "price", "cost_price", "stock_level", "low_stock_threshold", "last_sold_date")


def _as_int(value: Any) -> int:
    number = coerce_number(value)
    return int(number)


def item_from_row(row: Any) -> InventoryItem:
    """Map an inventory_items row (ORM object or mapping) to a record."""
    get = row.get if isinstance(row, Mapping) else lambda key: getattr(row, key)
    return InventoryItem(
        id=str(get("id")),
        name=get("name"),
        category=get("category"),
        price=coerce_number(get("price"), key="price"),
        cost_price=coerce_number(get("cost_price"), key="cost_price"),
        stock_level=_as_int(get("stock_level")),
        low_stock_threshold=_as_int(get("low_stock_threshold")),
        last_sold_date=get("last_sold_date"),
    )


def sale_from_row(row: Any) -> Sale:
    """Map a sales row (ORM object or mapping) to a record."""
    get = row.get if isinstance(row, Mapping) else lambda key: getattr(row, key)
    items = get("items")
    if isinstance(items, str):
        items = json.loads(items)
    date = get("date")
    if not isinstance(date, str) and date is not None:
        date = date.isoformat()
    return Sale(
        id=str(get("id")),
        receipt_number=_as_int(get("receipt_number")),
        items=tuple(
            SaleItem(
                item_id=str(line["itemId"]),
                quantity=_as_int(line["quantity"]),
                price=coerce_number(line["price"], key="price"),
            )
            for line in items or []
        ),
        total=coerce_number(get("total"), key="total"),
        profit=coerce_number(get("profit"), key="profit"),
        date=date,
    )


def _items_of(raw: Any) -> list[dict]:
    if isinstance(raw, str):
        raw = json.loads(raw)
    return raw or []


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError(f"Failed to {action}: {exc}") from exc


class SqlStore(StoreBackend):
    """
    Store over two relational tables.

    Sales go through the database procedure named by `sale_procedure` when
    the backend is PostgreSQL and the procedure exists; otherwise the sale
    runs here inside one transaction with stock updates conditioned on the
    level read at the start, retried when another writer changed it.
    """

    kind = "remote"

    def __init__(self, sale_procedure: str | None = "process_sale", retry_attempts: int = 3):
        if sale_procedure and not _IDENTIFIER.match(sale_procedure):
            raise ValueError(f"Invalid procedure name: {sale_procedure!r}")
        self.sale_procedure = sale_procedure or None
        self.retry_attempts = retry_attempts
        self._procedure_missing = False

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def list_inventory(self) -> list[InventoryItem]:
        with _storage_errors("list inventory"):
            rows = (
                db.session.query(InventoryItemRow)
                .order_by(InventoryItemRow.created_at.desc(), InventoryItemRow.id.desc())
                .all()
            )
            return [item_from_row(r) for r in rows]

    def list_sales(self) -> list[Sale]:
        with _storage_errors("list sales"):
            rows = db.session.query(SaleRow).order_by(SaleRow.receipt_number.desc()).all()
            return [sale_from_row(r) for r in rows]

    def get_item(self, item_id: str) -> InventoryItem | None:
        with _storage_errors("load inventory item"):
            row = db.session.get(InventoryItemRow, item_id)
            return item_from_row(row) if row else None

    # ------------------------------------------------------------------
    # inventory writes
    # ------------------------------------------------------------------

    def add_item(self, fields: dict) -> InventoryItem:
        with _storage_errors("add inventory item"):
            row = InventoryItemRow(id=new_id(), last_sold_date=None, **fields)
            db.session.add(row)
            db.session.commit()
            return item_from_row(row)

    def update_item(self, item_id: str, patch: dict) -> InventoryItem | None:
        with _storage_errors("update inventory item"):
            row = db.session.get(InventoryItemRow, item_id)
            if row is None:
                return None
            for key, value in patch.items():
                if key in ITEM_COLUMNS:
                    setattr(row, key, value)
            db.session.commit()
            return item_from_row(row)

    def delete_item(self, item_id: str) -> bool:
        def _op() -> bool:
            begin_write_transaction()
            row = lock_for_update(db.session.query(InventoryItemRow).filter_by(id=item_id)).first()
            if row is None:
                db.session.rollback()
                return False

            doomed = [
                sale_id
                for sale_id, items in db.session.query(SaleRow.id, SaleRow.items).all()
                if any(line.get("itemId") == item_id for line in _items_of(items))
            ]
            if doomed:
                db.session.query(SaleRow).filter(SaleRow.id.in_(doomed)).delete(synchronize_session=False)
            db.session.delete(row)
            db.session.commit()
            logger.info("Deleted item %s and %d referencing sale(s)", item_id, len(doomed))
            return True

        with _storage_errors("delete inventory item"):
            return run_with_retry(_op, attempts=self.retry_attempts)

    def clear_sales(self) -> None:
        with _storage_errors("clear sales"):
            db.session.query(SaleRow).delete(synchronize_session=False)
            db.session.commit()

    # ------------------------------------------------------------------
    # sales
    # ------------------------------------------------------------------

    def _procedure_available(self) -> bool:
        return (
            self.sale_procedure is not None
            and not self._procedure_missing
            and db.engine.dialect.name == "postgresql"
        )

    def _call_procedure(self, cart: list[SaleItem]) -> Sale | None:
        """Returns None when the procedure does not exist."""
        payload = json.dumps([line.to_dict() for line in cart])
        stmt = text(f"SELECT * FROM {self.sale_procedure}(CAST(:cart AS jsonb))")
        try:
            row = db.session.execute(stmt, {"cart": payload}).mappings().first()
            db.session.commit()
        except DBAPIError as exc:
            db.session.rollback()
            code = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
            if code == UNDEFINED_FUNCTION:
                self._procedure_missing = True
                logger.warning(
                    "Sale procedure %s not found; processing sales in-application",
                    self.sale_procedure,
                )
                return None
            raise StorageError(f"Sale procedure {self.sale_procedure} failed: {exc.orig}") from exc
        if row is None:
            raise StorageError(f"Sale procedure {self.sale_procedure} returned no row")
        return sale_from_row(row)

    def _next_receipt_number(self) -> int:
        """
        Allocate the next receipt number inside the current transaction.

        Never goes below max(receipt_number) + 1, so numbers issued by the
        database procedure are not reused.
        """
        counter = lock_for_update(
            db.session.query(StoreCounter).filter_by(name=RECEIPT_COUNTER)
        ).first()
        floor = (db.session.query(func.max(SaleRow.receipt_number)).scalar() or 0) + 1
        if counter is None:
            counter = StoreCounter(name=RECEIPT_COUNTER, next_value=floor)
            db.session.add(counter)
        allocated = max(counter.next_value, floor)
        counter.next_value = allocated + 1
        return allocated

    def _record_sale_in_transaction(self, cart: list[SaleItem]) -> Sale:
        begin_write_transaction()
        item_ids = sorted({line.item_id for line in cart})
        rows = lock_for_update(
            db.session.query(InventoryItemRow).filter(InventoryItemRow.id.in_(item_ids))
        ).all()
        snapshot = {row.id: item_from_row(row) for row in rows}

        requested = sales_service.check_cart(snapshot, cart)
        now = now_iso()

        for item_id, qty in requested.items():
            observed = snapshot[item_id].stock_level
            result = db.session.execute(
                update(InventoryItemRow)
                .where(InventoryItemRow.id == item_id, InventoryItemRow.stock_level == observed)
                .values(stock_level=observed - qty, last_sold_date=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise StockConflict(item_id)

        sale = sales_service.build_sale(
            sale_id=new_id(),
            receipt_number=self._next_receipt_number(),
            inventory=snapshot,
            cart=cart,
            now=now,
        )
        db.session.add(
            SaleRow(
                id=sale.id,
                receipt_number=sale.receipt_number,
                items=[line.to_dict() for line in sale.items],
                total=sale.total,
                profit=sale.profit,
                date=sale.date,
            )
        )
        db.session.commit()
        return sale

    def record_sale(self, cart: list[SaleItem]) -> tuple[Sale, list[InventoryItem]]:
        sale = self._call_procedure(cart) if self._procedure_available() else None

        if sale is None:
            try:
                sale = run_with_retry(
                    lambda: self._record_sale_in_transaction(cart),
                    attempts=self.retry_attempts,
                    retry_on=RETRYABLE_ERRORS + (IntegrityError,),
                )
            except sales_service.SaleError:
                db.session.rollback()
                raise
            except StockConflict as exc:
                raise StorageError(f"Stock for item {exc} kept changing; sale not recorded") from exc
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise StorageError(f"Failed to record sale: {exc}") from exc

        return sale, self.list_inventory()

    # ------------------------------------------------------------------
    # maintenance
    # ------------------------------------------------------------------

    def create_schema(self) -> None:
        with _storage_errors("create tables"):
            db.create_all()
