# backend/inventorypro/services/inventory_service.py
"""
Inventory catalog operations over the injected store.

Missing ids are reported as None / False rather than raised, so callers
can tell "not found" apart from storage failures (StorageError).
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from inventorypro.records import InventoryItem
from inventorypro.validation import ITEM_CREATE_POLICY, ITEM_UPDATE_POLICY, validate_payload

if TYPE_CHECKING:
    from inventorypro.storage.base import StoreBackend

logger = logging.getLogger(__name__)


def list_items(store: "StoreBackend") -> list[InventoryItem]:
    """All items, most recently created first."""
    return store.list_inventory()


def get_item(store: "StoreBackend", item_id: str) -> InventoryItem | None:
    return store.get_item(item_id)


def add_item(store: "StoreBackend", payload: Any) -> InventoryItem:
    """
    Create an item from a camelCase payload.

    Raises ValidationError when a field is missing or out of range.
    """
    fields = validate_payload(payload=payload, policy=ITEM_CREATE_POLICY, partial=False)
    item = store.add_item(fields)
    logger.info("Added inventory item %s (%s)", item.id, item.name)
    return item


def update_item(store: "StoreBackend", item_id: str, payload: Any) -> InventoryItem | None:
    """Merge the provided fields into an existing item; None when it does not exist."""
    patch = validate_payload(payload=payload, policy=ITEM_UPDATE_POLICY, partial=True)
    return store.update_item(item_id, patch)


def delete_item(store: "StoreBackend", item_id: str) -> bool:
    """Delete an item together with every sale that references it."""
    deleted = store.delete_item(item_id)
    if deleted:
        logger.info("Deleted inventory item %s", item_id)
    return deleted


def low_stock_items(store: "StoreBackend") -> list[InventoryItem]:
    return [item for item in store.list_inventory() if item.is_low_stock]
