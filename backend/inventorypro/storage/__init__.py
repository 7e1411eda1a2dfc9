# Overview: Storage backend selection; one backend is built at startup and injected.

from __future__ import annotations

import logging
from typing import Mapping

from .base import StorageError, StoreBackend, new_id
from .file_store import JsonFileStore
from .sql_store import SqlStore
from .write_queue import WriteQueue

logger = logging.getLogger(__name__)

__all__ = [
    "JsonFileStore",
    "SqlStore",
    "StorageError",
    "StoreBackend",
    "WriteQueue",
    "build_store",
    "new_id",
    "remote_configured",
]


def remote_configured(config: Mapping) -> bool:
    """The remote store is used only when both its URL and credential are set."""
    return bool(config.get("REMOTE_STORE_URL") and config.get("REMOTE_STORE_KEY"))


def build_store(config: Mapping) -> StoreBackend:
    if remote_configured(config):
        logger.info("Using remote store")
        return SqlStore(
            sale_procedure=config.get("REMOTE_SALE_PROCEDURE") or None,
            retry_attempts=int(config.get("REMOTE_RETRY_ATTEMPTS", 3)),
        )

    logger.info("Using JSON file store at %s", config["DATA_FILE"])
    return JsonFileStore(config["DATA_FILE"])
