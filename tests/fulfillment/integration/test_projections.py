"""Read views served through the engine."""

from datetime import date

import pytest
from fulfillment.errors import ErrorKind
from fulfillment.projections.order_status import orders_in_status


@pytest.fixture()
def warehouse(engine):
    engine.register_sku(
        "ELEC-001", "Industrial Relay", "Zone A-12", on_hand=150, reorder_point=20, unit_price=15.0
    )
    engine.register_sku("ACC-088", "Strap", "Zone C-04", on_hand=10, reorder_point=20, unit_price=2.0)
    engine.register_sku("FUR-010", "Shelf", "Zone B-01", on_hand=0, reorder_point=5, unit_price=80.0)
    return engine


def _order(engine, order_number, lines, priority="Normal"):
    return engine.create_order(
        order_number=order_number,
        customer="Acme",
        priority=priority,
        lines=[{"sku": sku, "quantity": qty, "unit_price": 1.0} for sku, qty in lines],
    ).value


class TestInventoryViews:
    def test_inventory_summary(self, warehouse):
        warehouse.reserve("ELEC-001", 50)

        summary = warehouse.inventory_summary().value

        assert summary["sku_count"] == 3
        assert summary["total_on_hand"] == 160
        assert summary["total_allocated"] == 50
        assert summary["total_available"] == 110
        assert summary["inventory_value"] == pytest.approx(150 * 15.0 + 10 * 2.0)
        assert summary["needs_replenishment"] == 2
        assert summary["stock_outs"] == 1

    def test_stock_level_of_unknown_sku(self, warehouse):
        outcome = warehouse.stock_level("NOPE")
        assert outcome.error == ErrorKind.UNKNOWN_SKU

    def test_batch_ledger_counts_compliance(self, warehouse):
        warehouse.receive_goods("ELEC-001", 10, "B-1")
        warehouse.receive_goods("ELEC-001", 10, "B-2")
        warehouse.receive_goods("ACC-088", 5, "B-3")
        warehouse.update_batch_compliance("ELEC-001", "B-1", "Compliant")
        warehouse.update_batch_compliance("ACC-088", "B-3", "Non_Compliant")

        ledger = warehouse.batch_ledger().value
        assert len(ledger["batches"]) == 3
        assert ledger["compliance_counts"] == {
            "Compliant": 1,
            "Non_Compliant": 1,
            "Pending_Review": 1,
        }

        relay_only = warehouse.batch_ledger("ELEC-001").value
        assert [b["batch_number"] for b in relay_only["batches"]] == ["B-1", "B-2"]

    def test_batch_ledger_flags_expired_batches(self, warehouse):
        warehouse.receive_goods("ACC-088", 5, "B-OLD", expiry_date=date(2020, 1, 31))
        warehouse.receive_goods("ACC-088", 5, "B-NEW", expiry_date=date(2099, 1, 31))

        ledger = warehouse.batch_ledger("ACC-088").value

        assert [b["expired"] for b in ledger["batches"]] == [True, False]
        assert ledger["expired_count"] == 1


class TestOrderViews:
    def test_order_status_lists_lines(self, warehouse):
        order_id = _order(warehouse, "SO-1", [("ELEC-001", 2), ("ACC-088", 1)])

        view = warehouse.order_status(order_id).value

        assert view["status"] == "Confirmed"
        assert [ln["sku"] for ln in view["lines"]] == ["ELEC-001", "ACC-088"]
        assert all(ln["pick_status"] == "Pending" for ln in view["lines"])

    def test_orders_in_status(self, warehouse):
        first = _order(warehouse, "SO-1", [("ELEC-001", 2)])
        _order(warehouse, "SO-2", [("ELEC-001", 3)])
        warehouse.process_order(first)

        picking = orders_in_status("Warehouse_Pick")
        confirmed = orders_in_status("Confirmed")

        assert [o["order_number"] for o in picking] == ["SO-1"]
        assert [o["order_number"] for o in confirmed] == ["SO-2"]


class TestPickingViews:
    def test_grouped_picking_tasks(self, warehouse):
        warehouse.receive_goods("FUR-010", 20, "B-9")
        critical = _order(warehouse, "SO-1", [("ELEC-001", 2), ("FUR-010", 1)], priority="Critical")
        normal = _order(warehouse, "SO-2", [("ELEC-001", 4)])
        assert warehouse.process_order(normal).ok
        assert warehouse.process_order(critical).ok

        waves = warehouse.picking_tasks("Wave").value
        assert [g.key for g in waves] == ["Critical", "Normal"]
        assert [g.total_quantity for g in waves] == [3, 4]

        batches = warehouse.picking_tasks("Batch").value
        assert [(g.key, g.total_quantity) for g in batches] == [("ELEC-001", 6), ("FUR-010", 1)]

        zones = warehouse.picking_tasks("Zone").value
        assert [g.title for g in zones] == ["Zone A Picking List", "Zone B Picking List"]

    def test_unknown_strategy(self, warehouse):
        outcome = warehouse.picking_tasks("Random")
        assert outcome.error == ErrorKind.INVALID_INPUT

    def test_pack_ready_orders_and_progress(self, warehouse):
        order_id = _order(warehouse, "SO-1", [("ELEC-001", 2), ("ACC-088", 1)])
        warehouse.process_order(order_id)
        assert warehouse.pack_ready_orders().value == []

        for task in warehouse.picking_tasks().value:
            warehouse.confirm_pick(task.task_id, task.location, task.sku)
        warehouse.toggle_verified(order_id, "ACC-088")

        ready = warehouse.pack_ready_orders().value
        assert [r["order_number"] for r in ready] == ["SO-1"]
        assert ready[0]["session_open"] is True
        assert ready[0]["verified_count"] == 1

        progress = warehouse.packing_progress(order_id).value
        assert progress["missing"] == ["ELEC-001"]
        assert progress["complete"] is False

    def test_packing_progress_without_session(self, warehouse):
        progress = warehouse.packing_progress("ord-x").value
        assert progress["open"] is False
        assert progress["complete"] is False


class TestInboundViews:
    def test_putaway_queue_puts_high_priority_first(self, warehouse):
        warehouse.receive_goods("ELEC-001", 10, "B-1")
        warehouse.receive_goods("ACC-088", 10, "B-2")

        queue = warehouse.pending_putaway_tasks().value

        assert [t["sku"] for t in queue] == ["ACC-088", "ELEC-001"]
        assert queue[0]["priority"] == "High"
        assert queue[0]["suggested_location"] == "Zone C-04"
        assert queue[0]["source_location"] == "Receiving Dock"

    def test_confirmed_putaway_leaves_the_queue(self, warehouse):
        warehouse.receive_goods("ELEC-001", 10, "B-1")
        task_id = warehouse.pending_putaway_tasks().value[0]["task_id"]

        assert warehouse.confirm_putaway(task_id).ok
        assert warehouse.pending_putaway_tasks().value == []
        assert warehouse.confirm_putaway(task_id).error == ErrorKind.UNKNOWN_TASK

    def test_purchase_order_progress(self, warehouse):
        warehouse.create_purchase_order(
            "PO-7",
            "Shenzhen Components",
            [
                {"sku": "ELEC-001", "name": "Relay", "expected_quantity": 40},
                {"sku": "ACC-088", "name": "Strap", "expected_quantity": 60},
            ],
        )
        warehouse.receive_goods("ELEC-001", 40, "B-1", po_number="PO-7")
        warehouse.receive_goods("ACC-088", 20, "B-2", po_number="PO-7")

        progress = warehouse.purchase_order_progress("PO-7").value

        assert progress["status"] == "Partial"
        assert progress["percent_received"] == pytest.approx(60.0)
        assert [ln["status"] for ln in progress["lines"]] == ["Pending", "Received"]

    def test_unknown_purchase_order(self, warehouse):
        assert warehouse.purchase_order_progress("PO-404").error == ErrorKind.UNKNOWN_ORDER
