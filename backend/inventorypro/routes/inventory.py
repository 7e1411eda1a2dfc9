# Overview: Flask API routes for the inventory catalog; parses input and returns JSON responses.

# backend/inventorypro/routes/inventory.py
"""Inventory catalog routes"""

from flask import Blueprint, jsonify, request

from ..extensions import get_store
from ..services import actions
from ._responses import error_response


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/")
def list_inventory_route():
    """List catalog items, newest first."""
    result = actions.list_inventory_action(get_store())
    if not result.success:
        return error_response(result)
    return jsonify({"items": [i.to_dict() for i in result.data], "count": len(result.data)}), 200


@inventory_bp.post("/")
def add_item_route():
    """
    Add a catalog item.

    Body: name, category, price, costPrice, stockLevel, lowStockThreshold
    """
    payload = request.get_json(silent=True)
    result = actions.add_inventory_item_action(get_store(), payload)
    if not result.success:
        return error_response(result)
    return jsonify({"item": result.data.to_dict(), "message": result.message}), 201


@inventory_bp.patch("/<item_id>")
def update_item_route(item_id: str):
    """Partial update, e.g. {"stockLevel": 12}."""
    payload = request.get_json(silent=True)
    result = actions.update_inventory_item_action(get_store(), item_id, payload)
    if not result.success:
        return error_response(result)
    return jsonify({"item": result.data.to_dict(), "message": result.message}), 200


@inventory_bp.delete("/<item_id>")
def delete_item_route(item_id: str):
    """Delete an item and every sale that references it."""
    result = actions.delete_inventory_item_action(get_store(), item_id)
    if not result.success:
        return error_response(result)
    return jsonify({"message": result.message}), 200
