# backend/inventorypro/models.py
"""
Tables of the remote (relational) store.

Column names follow the snake_case wire schema; the camelCase record shape
lives in records.py and the translation in storage/sql_store.py.
"""
from __future__ import annotations

from .extensions import db
from inventorypro.time_utils import utcnow


class InventoryItemRow(db.Model):
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.Index("ix_inventory_items_created_at", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(120), nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    cost_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    stock_level = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=0)
    last_sold_date = db.Column(db.String(32), nullable=True)

    # Python-side default keeps sub-second ordering on SQLite
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<InventoryItemRow id={self.id!r} name={self.name!r} stock={self.stock_level}>"


class SaleRow(db.Model):
    __tablename__ = "sales"
    __table_args__ = (
        db.UniqueConstraint("receipt_number", name="uq_sales_receipt_number"),
    )

    id = db.Column(db.String(36), primary_key=True)
    receipt_number = db.Column(db.Integer, nullable=False)

    # Frozen cart: [{"itemId", "quantity", "price"}, ...]
    items = db.Column(db.JSON, nullable=False)

    total = db.Column(db.Numeric(14, 2), nullable=False)
    profit = db.Column(db.Numeric(14, 2), nullable=False)
    date = db.Column(db.String(32), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<SaleRow id={self.id!r} receipt_number={self.receipt_number}>"


class StoreCounter(db.Model):
    """
    Named counters allocated under row update (receipt numbers).

    next_value is the number the next allocation returns.
    """
    __tablename__ = "store_counters"

    name = db.Column(db.String(64), primary_key=True)
    next_value = db.Column(db.Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<StoreCounter name={self.name!r} next_value={self.next_value}>"
