# Overview: Flask API routes for checkout and sales history; parses input and returns JSON responses.

# backend/inventorypro/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, jsonify, request

from ..extensions import get_store
from ..services import actions
from ._responses import error_response


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("/")
def list_sales_route():
    """Sales history, newest receipt first."""
    result = actions.list_sales_action(get_store())
    if not result.success:
        return error_response(result)
    return jsonify({"sales": [s.to_dict() for s in result.data], "count": len(result.data)}), 200


@sales_bp.post("/")
def process_sale_route():
    """
    Check out a cart.

    Body: {"cart": [{"itemId": "...", "quantity": 2, "price": 10}, ...]}
    Returns the recorded sale and the inventory after the sale.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or "cart" not in data:
        return jsonify({"error": "cart required", "code": actions.INVALID_INPUT}), 400

    result = actions.process_sale_action(get_store(), data["cart"])
    if not result.success:
        return error_response(result)
    return jsonify({**result.data.to_dict(), "message": result.message}), 201


@sales_bp.delete("/")
def clear_sales_route():
    """Wipe the sales history. Inventory and receipt numbering are kept."""
    result = actions.clear_sales_action(get_store())
    if not result.success:
        return error_response(result)
    return jsonify({"message": result.message}), 200
