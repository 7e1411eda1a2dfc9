# Overview: JSON-document store; the whole state is rewritten on every mutation.

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Iterator

from inventorypro.records import InventoryItem, Sale, SaleItem, StoreState
from inventorypro.services import sales_service
from inventorypro.time_utils import utcnow

from .base import StorageError, StoreBackend, new_id
from .write_queue import WriteQueue

logger = logging.getLogger(__name__)


class JsonFileStore(StoreBackend):
    """
    File-backed store holding the state in memory and mirroring it to disk.

    Every mutating operation runs under one transaction lock: read the
    in-memory state, work on a copy, persist the copy through the write
    queue, then publish it. A failure anywhere leaves both the published
    state and the file as they were.
    """

    kind = "file"

    def __init__(self, path: str | os.PathLike, write_queue: WriteQueue | None = None):
        self.path = Path(path)
        self._writer = write_queue or WriteQueue()
        self._state: StoreState | None = None
        self._load_lock = threading.Lock()
        self._txn_lock = threading.RLock()

    # ------------------------------------------------------------------
    # load / save
    # ------------------------------------------------------------------

    def load(self) -> StoreState:
        """
        Read the document from disk.

        A missing or malformed document yields an empty state which is
        written out immediately.
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.info("No store file at %s; initializing empty store", self.path)
            return self._bootstrap()
        except OSError as exc:
            raise StorageError(f"Cannot read store file {self.path}: {exc}") from exc

        try:
            state = StoreState.from_dict(json.loads(raw.decode("utf-8")))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Store file %s is malformed (%s)", self.path, exc)
            state = None

        if state is None:
            self._set_aside_corrupt_file()
            return self._bootstrap()
        return state

    def save(self, state: StoreState) -> None:
        """Persist a full state; blocks until the write has reached disk."""
        document = json.dumps(state.to_dict(), indent=2)
        self._writer.enqueue_write(lambda: self._write_file(document))

    def _bootstrap(self) -> StoreState:
        state = StoreState.empty()
        self.save(state)
        return state

    def _set_aside_corrupt_file(self) -> None:
        stamp = utcnow().strftime("%Y%m%dT%H%M%S%f")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        try:
            shutil.copy2(self.path, backup)
        except OSError:
            logger.exception("Could not copy malformed store file to %s", backup)
            return
        logger.warning("Malformed store file copied to %s; starting from an empty store", backup)

    def _write_file(self, document: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(document)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write store file {self.path}: {exc}") from exc

    # ------------------------------------------------------------------
    # state lifecycle
    # ------------------------------------------------------------------

    def _ensure_loaded(self) -> StoreState:
        if self._state is None:
            with self._load_lock:
                if self._state is None:
                    self._state = self.load()
        return self._state

    def snapshot(self) -> StoreState:
        with self._txn_lock:
            return self._ensure_loaded().copy()

    @contextmanager
    def transaction(self) -> Iterator[StoreState]:
        """
        Serialize a read-modify-write section.

        Yields a working copy; it is persisted and published only when the
        block exits without an exception.
        """
        with self._txn_lock:
            working = self._ensure_loaded().copy()
            yield working
            self.save(working)
            self._state = working

    def close(self) -> None:
        self._writer.close()

    # ------------------------------------------------------------------
    # StoreBackend
    # ------------------------------------------------------------------

    def list_inventory(self) -> list[InventoryItem]:
        return self.snapshot().items()

    def list_sales(self) -> list[Sale]:
        return list(self.snapshot().sales)

    def get_item(self, item_id: str) -> InventoryItem | None:
        return self.snapshot().inventory.get(item_id)

    def add_item(self, fields: dict) -> InventoryItem:
        item = InventoryItem(id=new_id(), last_sold_date=None, **fields)
        with self.transaction() as state:
            state.prepend_item(item)
        return item

    def update_item(self, item_id: str, patch: dict) -> InventoryItem | None:
        with self._txn_lock:
            if item_id not in self._ensure_loaded().inventory:
                return None
            with self.transaction() as state:
                updated = replace(state.inventory[item_id], **patch)
                state.inventory[item_id] = updated
        return updated

    def delete_item(self, item_id: str) -> bool:
        with self._txn_lock:
            if item_id not in self._ensure_loaded().inventory:
                return False
            with self.transaction() as state:
                del state.inventory[item_id]
                state.sales = [s for s in state.sales if not s.references(item_id)]
        return True

    def record_sale(self, cart: list[SaleItem]) -> tuple[Sale, list[InventoryItem]]:
        with self.transaction() as state:
            sale = sales_service.apply_sale(state, cart, sale_id=new_id())
        return sale, state.items()

    def clear_sales(self) -> None:
        with self.transaction() as state:
            state.sales = []
