# Overview: Error-code to HTTP status mapping shared by the JSON API blueprints.

from __future__ import annotations

from flask import jsonify

from ..services.actions import INVALID_INPUT, NOT_FOUND, STORAGE_FAILURE, ActionResult
from ..services.sales_service import InsufficientStockError, InvalidQuantityError, ItemNotFoundError

ERROR_STATUS = {
    INVALID_INPUT: 400,
    ItemNotFoundError.code: 400,
    InvalidQuantityError.code: 400,
    NOT_FOUND: 404,
    InsufficientStockError.code: 409,
    STORAGE_FAILURE: 500,
}


def error_response(result: ActionResult):
    body = {"error": result.message, "code": result.code}
    if result.details:
        body["details"] = result.details
    return jsonify(body), ERROR_STATUS.get(result.code, 500)
