# Overview: Storage backend contract shared by the JSON file store and the SQL store.

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod

from inventorypro.records import InventoryItem, Sale, SaleItem


class StorageError(Exception):
    """Raised when the backing file or database cannot be read or written."""


def new_id() -> str:
    return str(uuid.uuid4())


class StoreBackend(ABC):
    """
    Persistence contract used by the services.

    Not-found is reported through return values (None / False), not
    exceptions. Sale validation failures raise SaleError subclasses from
    record_sale(); I/O problems raise StorageError.
    """

    kind: str = "abstract"

    @abstractmethod
    def list_inventory(self) -> list[InventoryItem]:
        ...

    @abstractmethod
    def list_sales(self) -> list[Sale]:
        ...

    @abstractmethod
    def get_item(self, item_id: str) -> InventoryItem | None:
        ...

    @abstractmethod
    def add_item(self, fields: dict) -> InventoryItem:
        """Create an item from validated attribute-keyed fields."""

    @abstractmethod
    def update_item(self, item_id: str, patch: dict) -> InventoryItem | None:
        ...

    @abstractmethod
    def delete_item(self, item_id: str) -> bool:
        """Delete the item and every sale referencing it."""

    @abstractmethod
    def record_sale(self, cart: list[SaleItem]) -> tuple[Sale, list[InventoryItem]]:
        """Run one sale transaction; returns the sale and the new inventory."""

    @abstractmethod
    def clear_sales(self) -> None:
        ...

    def close(self) -> None:
        """Release resources; the default backend holds none."""
