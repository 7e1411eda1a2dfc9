# Overview: Flask API routes for dashboard and sales report figures.

from flask import Blueprint, current_app, jsonify, request

from ..extensions import get_store
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
def dashboard_route():
    try:
        return jsonify(reporting_service.dashboard_summary(get_store())), 200
    except Exception:
        current_app.logger.exception("Failed to build dashboard summary")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/sales")
def sales_report_route():
    """
    Sales report.

    Query params: top (default 5), low_stock (default 5)
    """
    top_n = request.args.get("top", default=5, type=int)
    low_stock_n = request.args.get("low_stock", default=5, type=int)
    if top_n < 0 or low_stock_n < 0:
        return jsonify({"error": "top and low_stock must be >= 0"}), 400

    try:
        report = reporting_service.sales_report(get_store(), top_n=top_n, low_stock_n=low_stock_n)
    except Exception:
        current_app.logger.exception("Failed to build sales report")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(report), 200
