# Overview: Dashboard and sales report figures computed from the store.

from __future__ import annotations

from typing import TYPE_CHECKING

from inventorypro.records import InventoryItem, Sale

if TYPE_CHECKING:
    from inventorypro.storage.base import StoreBackend


def _revenue_and_profit(sales: list[Sale]) -> tuple:
    return sum(s.total for s in sales), sum(s.profit for s in sales)


def dashboard_summary(store: "StoreBackend") -> dict:
    inventory = store.list_inventory()
    sales = store.list_sales()
    total_revenue, total_profit = _revenue_and_profit(sales)

    latest = sales[0] if sales else None
    return {
        "totalProducts": len(inventory),
        "lowStockCount": sum(1 for i in inventory if i.is_low_stock),
        "totalRevenue": total_revenue,
        "totalProfit": total_profit,
        "latestSale": (
            {**latest.to_dict(), "unitCount": latest.unit_count} if latest else None
        ),
    }


def top_products(inventory: list[InventoryItem], sales: list[Sale], limit: int = 5) -> list[dict]:
    """Items ranked by revenue across the given sales."""
    by_id = {item.id: item for item in inventory}
    agg: dict[str, dict] = {}
    for sale in sales:
        for line in sale.items:
            current = agg.setdefault(line.item_id, {"itemId": line.item_id, "revenue": 0, "quantity": 0})
            current["quantity"] += line.quantity
            current["revenue"] += line.price * line.quantity

    ranked = sorted(agg.values(), key=lambda p: p["revenue"], reverse=True)[:limit]
    rows = []
    for product in ranked:
        item = by_id.get(product["itemId"])
        rows.append({
            **product,
            "name": item.name if item else product["itemId"],
            "category": item.category if item else None,
        })
    return rows


def sales_report(store: "StoreBackend", *, top_n: int = 5, low_stock_n: int = 5) -> dict:
    inventory = store.list_inventory()
    sales = store.list_sales()

    total_revenue, total_profit = _revenue_and_profit(sales)
    total_sales = len(sales)
    low_stock = sorted((i for i in inventory if i.is_low_stock), key=lambda i: i.stock_level)

    return {
        "totalRevenue": total_revenue,
        "totalProfit": total_profit,
        "profitMarginPct": round(total_profit / total_revenue * 100) if total_revenue > 0 else 0,
        "totalSales": total_sales,
        "averageSaleValue": round(total_revenue / total_sales) if total_sales else 0,
        "itemsSold": sum(s.unit_count for s in sales),
        "topProducts": top_products(inventory, sales, limit=top_n),
        "lowStockItems": [i.to_dict() for i in low_stock[:low_stock_n]],
    }
