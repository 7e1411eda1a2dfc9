# backend/inventorypro/records.py
"""
Value records shared by both storage backends.

Records are immutable; every mutation builds a replacement with
dataclasses.replace(). The dict form is the camelCase wire/JSON shape.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional


def _stored_text(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string")
    return value


def _stored_optional_text(data: dict, key: str) -> Optional[str]:
    if data.get(key) is None:
        return None
    return _stored_text(data, key)


def _stored_number(data: dict, key: str):
    # validation imports this module; import lazily
    from inventorypro.validation import coerce_number

    return coerce_number(data[key], key=key)


def _stored_int(data: dict, key: str) -> int:
    from inventorypro.validation import coerce_int

    return coerce_int(data[key], key=key)


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str
    category: str
    price: float
    cost_price: float
    stock_level: int
    low_stock_threshold: int
    last_sold_date: Optional[str] = None

    @property
    def is_low_stock(self) -> bool:
        return self.stock_level <= self.low_stock_threshold

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": self.price,
            "costPrice": self.cost_price,
            "stockLevel": self.stock_level,
            "lowStockThreshold": self.low_stock_threshold,
            "lastSoldDate": self.last_sold_date,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryItem":
        return cls(
            id=_stored_text(data, "id"),
            name=_stored_text(data, "name"),
            category=_stored_text(data, "category"),
            price=_stored_number(data, "price"),
            cost_price=_stored_number(data, "costPrice"),
            stock_level=_stored_int(data, "stockLevel"),
            low_stock_threshold=_stored_int(data, "lowStockThreshold"),
            last_sold_date=_stored_optional_text(data, "lastSoldDate"),
        )


@dataclass(frozen=True)
class SaleItem:
    """One cart line. `price` is the unit price charged at sale time."""
    item_id: str
    quantity: int
    price: float

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {"itemId": self.item_id, "quantity": self.quantity, "price": self.price}

    @classmethod
    def from_dict(cls, data: dict) -> "SaleItem":
        return cls(
            item_id=_stored_text(data, "itemId"),
            quantity=_stored_int(data, "quantity"),
            price=_stored_number(data, "price"),
        )


@dataclass(frozen=True)
class Sale:
    id: str
    receipt_number: int
    items: tuple[SaleItem, ...]
    total: float
    profit: float
    date: str

    @property
    def unit_count(self) -> int:
        return sum(line.quantity for line in self.items)

    def references(self, item_id: str) -> bool:
        return any(line.item_id == item_id for line in self.items)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "receiptNumber": self.receipt_number,
            "items": [line.to_dict() for line in self.items],
            "total": self.total,
            "profit": self.profit,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Sale":
        return cls(
            id=_stored_text(data, "id"),
            receipt_number=_stored_int(data, "receiptNumber"),
            items=tuple(SaleItem.from_dict(line) for line in data["items"]),
            total=_stored_number(data, "total"),
            profit=_stored_number(data, "profit"),
            date=_stored_text(data, "date"),
        )


@dataclass
class StoreState:
    """
    Whole persisted state of the file-backed store.

    `inventory` maps id -> item and keeps insertion order, which is the
    display order (newest first). `sales` is newest first.
    """
    inventory: dict[str, InventoryItem] = field(default_factory=dict)
    sales: list[Sale] = field(default_factory=list)
    next_sale_number: int = 1

    @classmethod
    def empty(cls) -> "StoreState":
        return cls()

    def copy(self) -> "StoreState":
        # Records are frozen, so copying the containers is enough.
        return replace(self, inventory=dict(self.inventory), sales=list(self.sales))

    def items(self) -> list[InventoryItem]:
        return list(self.inventory.values())

    def replace_inventory(self, items: Iterable[InventoryItem]) -> None:
        self.inventory = {item.id: item for item in items}

    def prepend_item(self, item: InventoryItem) -> None:
        self.inventory = {item.id: item, **self.inventory}

    def max_receipt_number(self) -> int:
        return max((s.receipt_number for s in self.sales), default=0)

    def to_dict(self) -> dict:
        return {
            "inventory": [item.to_dict() for item in self.inventory.values()],
            "sales": [sale.to_dict() for sale in self.sales],
            "nextSaleNumber": self.next_sale_number,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["StoreState"]:
        """
        Build a state from a decoded JSON document.

        Returns None when the document does not have the expected shape.
        Raises KeyError/TypeError/ValueError for records missing fields.
        """
        if not isinstance(data, dict):
            return None
        inventory = data.get("inventory")
        sales = data.get("sales")
        if not isinstance(inventory, list) or not isinstance(sales, list):
            return None

        state = cls(
            inventory={},
            sales=[Sale.from_dict(s) for s in sales],
        )
        state.replace_inventory(InventoryItem.from_dict(i) for i in inventory)

        floor = state.max_receipt_number() + 1
        stored = data.get("nextSaleNumber")
        if isinstance(stored, int) and not isinstance(stored, bool) and stored > 0:
            state.next_sale_number = max(stored, floor)
        else:
            state.next_sale_number = floor
        return state
