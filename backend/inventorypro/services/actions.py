# Overview: Operation boundary; turns service outcomes into structured results.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from inventorypro.validation import ValidationError

from . import inventory_service, sales_service
from .sales_service import SaleError

if TYPE_CHECKING:
    from inventorypro.storage.base import StoreBackend

logger = logging.getLogger(__name__)

INVALID_INPUT = "INVALID_INPUT"
NOT_FOUND = "NOT_FOUND"
STORAGE_FAILURE = "STORAGE_FAILURE"


@dataclass(frozen=True)
class ActionResult:
    success: bool
    message: str
    code: str | None = None
    data: Any = None
    details: dict = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, code: str, message: str, details: dict | None = None) -> "ActionResult":
        return cls(success=False, message=message, code=code, details=details or {})


def _guarded(failure_message: str, fn: Callable[[], ActionResult]) -> ActionResult:
    """
    Run fn, converting input and sale errors into failures.

    Anything else (StorageError, unexpected bugs) is logged with its
    traceback and reported with the generic failure message.
    """
    try:
        return fn()
    except ValidationError as e:
        return ActionResult.fail(INVALID_INPUT, str(e))
    except SaleError as e:
        return ActionResult.fail(e.code, str(e), e.details)
    except Exception:
        logger.exception(failure_message)
        return ActionResult.fail(STORAGE_FAILURE, failure_message)


def list_inventory_action(store: "StoreBackend") -> ActionResult:
    return _guarded(
        "Failed to load inventory",
        lambda: ActionResult.ok("Inventory loaded", inventory_service.list_items(store)),
    )


def add_inventory_item_action(store: "StoreBackend", payload: Any) -> ActionResult:
    return _guarded(
        "Failed to add product",
        lambda: ActionResult.ok("Product added", inventory_service.add_item(store, payload)),
    )


def update_inventory_item_action(store: "StoreBackend", item_id: str, payload: Any) -> ActionResult:
    def _op() -> ActionResult:
        updated = inventory_service.update_item(store, item_id, payload)
        if updated is None:
            return ActionResult.fail(NOT_FOUND, "Product not found", {"item_id": item_id})
        return ActionResult.ok("Updated", updated)

    return _guarded("Failed to update", _op)


def delete_inventory_item_action(store: "StoreBackend", item_id: str) -> ActionResult:
    def _op() -> ActionResult:
        if not inventory_service.delete_item(store, item_id):
            return ActionResult.fail(NOT_FOUND, "Product not found", {"item_id": item_id})
        return ActionResult.ok("Deleted")

    return _guarded("Failed to delete", _op)


def process_sale_action(store: "StoreBackend", cart: Any) -> ActionResult:
    return _guarded(
        "Failed to process sale",
        lambda: ActionResult.ok("Sale processed", sales_service.process_sale(store, cart)),
    )


def list_sales_action(store: "StoreBackend") -> ActionResult:
    return _guarded(
        "Failed to load sales",
        lambda: ActionResult.ok("Sales loaded", sales_service.list_sales(store)),
    )


def clear_sales_action(store: "StoreBackend") -> ActionResult:
    def _op() -> ActionResult:
        sales_service.clear_sales(store)
        return ActionResult.ok("Sales cleared")

    return _guarded("Failed to clear sales", _op)
