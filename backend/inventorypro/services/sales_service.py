"""
Sales Service - cart checkout against live stock

A sale is all-or-nothing: the whole cart is validated against one inventory
snapshot before anything is applied, and a receipt number is only consumed
by a sale that commits. Storage backends run the functions below inside
their own transaction (file lock or database transaction).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from inventorypro.records import InventoryItem, Sale, SaleItem, StoreState
from inventorypro.time_utils import now_iso
from inventorypro.validation import validate_cart

if TYPE_CHECKING:
    from inventorypro.storage.base import StoreBackend

logger = logging.getLogger(__name__)


class SaleError(Exception):
    """Raised for sale validation errors."""
    code = "SALE_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ItemNotFoundError(SaleError):
    code = "ITEM_NOT_FOUND"


class InvalidQuantityError(SaleError):
    code = "INVALID_QUANTITY"


class InsufficientStockError(SaleError):
    code = "INSUFFICIENT_STOCK"


@dataclass(frozen=True)
class SaleResult:
    sale: Sale
    inventory: list[InventoryItem]

    def to_dict(self) -> dict:
        return {
            "sale": self.sale.to_dict(),
            "updatedInventory": [item.to_dict() for item in self.inventory],
        }


def check_cart(inventory: Mapping[str, InventoryItem], cart: Iterable[SaleItem]) -> dict[str, int]:
    """
    Validate every line in order, stopping at the first failure.

    Quantities for repeated item ids are summed before comparing with stock.
    Returns the requested quantity per item id.
    """
    requested: dict[str, int] = {}
    for index, line in enumerate(cart):
        item = inventory.get(line.item_id)
        if item is None:
            raise ItemNotFoundError(
                f"Item not found: {line.item_id}",
                details={"line": index, "item_id": line.item_id},
            )
        if line.quantity <= 0:
            raise InvalidQuantityError(
                "Quantity must be positive",
                details={"line": index, "item_id": line.item_id, "quantity": line.quantity},
            )
        total_qty = requested.get(line.item_id, 0) + line.quantity
        if item.stock_level < total_qty:
            raise InsufficientStockError(
                f"Not enough stock for {item.name}",
                details={
                    "line": index,
                    "item_id": item.id,
                    "requested_quantity": total_qty,
                    "on_hand": item.stock_level,
                },
            )
        requested[line.item_id] = total_qty
    return requested


def sale_totals(inventory: Mapping[str, InventoryItem], cart: Iterable[SaleItem]) -> tuple[Any, Any]:
    """Total and profit, using cost prices from the given snapshot."""
    total = 0
    profit = 0
    for line in cart:
        total += line.price * line.quantity
        profit += (line.price - inventory[line.item_id].cost_price) * line.quantity
    return total, profit


def apply_cart(items: Iterable[InventoryItem], requested: Mapping[str, int], now: str) -> list[InventoryItem]:
    """Copy of the full inventory with stock taken for the requested items."""
    updated = []
    for item in items:
        qty = requested.get(item.id)
        if qty is None:
            updated.append(item)
            continue
        updated.append(
            InventoryItem(
                id=item.id,
                name=item.name,
                category=item.category,
                price=item.price,
                cost_price=item.cost_price,
                stock_level=item.stock_level - qty,
                low_stock_threshold=item.low_stock_threshold,
                last_sold_date=now,
            )
        )
    return updated


def build_sale(
    *,
    sale_id: str,
    receipt_number: int,
    inventory: Mapping[str, InventoryItem],
    cart: list[SaleItem],
    now: str,
) -> Sale:
    total, profit = sale_totals(inventory, cart)
    return Sale(
        id=sale_id,
        receipt_number=receipt_number,
        items=tuple(cart),
        total=total,
        profit=profit,
        date=now,
    )


def apply_sale(state: StoreState, cart: list[SaleItem], sale_id: str, now: str | None = None) -> Sale:
    """
    Run the sale against an in-memory working state.

    The caller owns the state copy; on SaleError nothing on it has changed.
    """
    requested = check_cart(state.inventory, cart)
    now = now or now_iso()

    receipt_number = state.next_sale_number
    sale = build_sale(
        sale_id=sale_id,
        receipt_number=receipt_number,
        inventory=state.inventory,
        cart=cart,
        now=now,
    )

    state.replace_inventory(apply_cart(state.items(), requested, now))
    state.sales = [sale, *state.sales]
    state.next_sale_number = receipt_number + 1
    return sale


def process_sale(store: "StoreBackend", cart_payload: Any) -> SaleResult:
    """
    Validate and commit one cart.

    Raises ValidationError for a malformed cart, SaleError subclasses for
    unknown items, bad quantities and short stock, StorageError on I/O.
    """
    cart = validate_cart(cart_payload)
    sale, inventory = store.record_sale(cart)
    logger.info(
        "Sale #%s recorded: %d line(s), total=%s profit=%s",
        sale.receipt_number, len(sale.items), sale.total, sale.profit,
    )
    return SaleResult(sale=sale, inventory=inventory)


def list_sales(store: "StoreBackend") -> list[Sale]:
    return store.list_sales()


def clear_sales(store: "StoreBackend") -> None:
    """Remove all sales. Inventory and the receipt counter are kept."""
    store.clear_sales()
    logger.info("Sales history cleared")
