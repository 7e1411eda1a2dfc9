# backend/inventorypro/routes/system.py
"""
System health endpoint.

Reports which storage backend is active and whether it can be read.
"""

import time

from flask import Blueprint, current_app, jsonify

from ..extensions import get_store

system_bp = Blueprint("system", __name__)


def check_store_health() -> dict:
    """
    Check the storage backend by reading both collections.

    Returns dict with status and details.
    """
    store = get_store()
    start_time = time.time()
    try:
        item_count = len(store.list_inventory())
        sale_count = len(store.list_sales())
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "backend": store.kind,
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "inventory_items": item_count,
                "sales": sale_count,
            },
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Store health check failed")
        return {
            "status": "unhealthy",
            "backend": store.kind,
            "latency_ms": round(elapsed_ms, 2),
            "error": "Storage error",
        }


@system_bp.get("/health")
def health():
    result = check_store_health()
    status = 200 if result["status"] == "healthy" else 503
    return jsonify(result), status
