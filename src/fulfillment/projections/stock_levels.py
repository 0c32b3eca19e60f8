"""Stock levels — per-SKU level view and the inventory summary.

Read straight from the ledger on every call. Every record read is checked
against the ledger invariant, so a corrupted record surfaces as
``InvariantViolation`` here rather than as a clamped number.
"""

from protean.utils.globals import current_domain

from fulfillment.stock.stock import SkuRecord


def _row(record) -> dict:
    record.verify_levels()
    return {
        "sku": record.sku,
        "name": record.name,
        "category": record.category,
        "location": record.location,
        "on_hand": record.on_hand,
        "allocated": record.allocated,
        "available": record.available,
        "reorder_point": record.reorder_point,
        "needs_replenishment": record.available <= (record.reorder_point or 0),
        "unit_price": record.unit_price,
    }


def stock_level(sku: str) -> dict:
    record = current_domain.repository_for(SkuRecord).get_known(sku)
    return _row(record)


def stock_levels() -> list[dict]:
    return [_row(r) for r in current_domain.repository_for(SkuRecord).all_records()]


def inventory_summary() -> dict:
    """Totals across the ledger plus replenishment and stock-out counts."""
    rows = stock_levels()
    return {
        "sku_count": len(rows),
        "total_on_hand": sum(r["on_hand"] for r in rows),
        "total_allocated": sum(r["allocated"] for r in rows),
        "total_available": sum(r["available"] for r in rows),
        "inventory_value": sum(r["on_hand"] * (r["unit_price"] or 0.0) for r in rows),
        "needs_replenishment": sum(1 for r in rows if r["needs_replenishment"]),
        "stock_outs": sum(1 for r in rows if r["available"] <= 0),
    }
