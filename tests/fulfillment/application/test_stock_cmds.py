"""Application tests for ledger, receiving and putaway commands via domain.process()."""

import json

import pytest
from fulfillment.errors import InsufficientStock, UnknownSKU, UnknownTask
from fulfillment.purchasing.creation import CreatePurchaseOrder
from fulfillment.purchasing.purchase_order import PurchaseOrder, PurchaseOrderStatus
from fulfillment.putaway.confirmation import ConfirmPutaway
from fulfillment.putaway.putaway import PutawayPriority, PutawayStatus, PutawayTask
from fulfillment.stock.compliance import UpdateBatchCompliance
from fulfillment.stock.receiving import ReceiveGoods
from fulfillment.stock.registration import RegisterSku
from fulfillment.stock.reservation import ReleaseStock, ReserveStock
from fulfillment.stock.stock import SkuRecord
from protean import current_domain
from protean.exceptions import ValidationError


def _register(sku="ELEC-001", on_hand=150, reorder_point=20, location="Zone A-12"):
    return current_domain.process(
        RegisterSku(
            sku=sku,
            name="Industrial Relay",
            location=location,
            on_hand=on_hand,
            reorder_point=reorder_point,
            unit_price=15.0,
            category="Electronics",
        ),
        asynchronous=False,
    )


def _receive(sku="ELEC-001", quantity=50, batch_number="B-2024-07", po_number=None):
    return current_domain.process(
        ReceiveGoods(
            sku=sku,
            quantity=quantity,
            batch_number=batch_number,
            reference="GRN-1",
            po_number=po_number,
        ),
        asynchronous=False,
    )


class TestRegisterSku:
    def test_register_persists_record(self):
        assert _register() == "ELEC-001"
        record = current_domain.repository_for(SkuRecord).get("ELEC-001")
        assert record.on_hand == 150
        assert record.location == "Zone A-12"

    def test_duplicate_sku_rejected(self):
        _register()
        with pytest.raises(ValidationError) as exc_info:
            _register()
        assert "sku" in exc_info.value.messages


class TestReservation:
    def test_reserve_and_release(self):
        _register(on_hand=100)
        available = current_domain.process(ReserveStock(sku="ELEC-001", quantity=30), asynchronous=False)
        assert available == 70

        available = current_domain.process(
            ReleaseStock(sku="ELEC-001", quantity=10, reason="Line reduced"),
            asynchronous=False,
        )
        assert available == 80
        assert current_domain.repository_for(SkuRecord).get("ELEC-001").allocated == 20

    def test_failed_reservation_is_not_persisted(self):
        _register(sku="ACC-088", on_hand=500)
        current_domain.process(ReserveStock(sku="ACC-088", quantity=120), asynchronous=False)

        with pytest.raises(InsufficientStock):
            current_domain.process(ReserveStock(sku="ACC-088", quantity=400), asynchronous=False)

        record = current_domain.repository_for(SkuRecord).get("ACC-088")
        assert record.allocated == 120
        assert record.available == 380

    def test_reserve_unknown_sku(self):
        with pytest.raises(UnknownSKU):
            current_domain.process(ReserveStock(sku="NOPE", quantity=1), asynchronous=False)


class TestReceiveGoods:
    def test_receipt_increases_on_hand_and_appends_batch(self):
        _register()
        batch_id = _receive()
        record = current_domain.repository_for(SkuRecord).get("ELEC-001")
        assert record.on_hand == 200
        assert len(record.batches) == 1
        assert str(record.batches[0].id) == batch_id
        assert record.batches[0].compliance_status == "Pending_Review"

    def test_receipt_creates_exactly_one_putaway_task(self):
        _register()
        batch_id = _receive()
        tasks = current_domain.repository_for(PutawayTask).for_receipt(batch_id)
        assert len(tasks) == 1
        task = tasks[0]
        assert task.suggested_location == "Zone A-12"
        assert task.source_location == "Receiving Dock"
        assert task.quantity == 50
        assert task.priority == PutawayPriority.NORMAL.value

    def test_low_stock_receipt_gets_high_priority_putaway(self):
        _register(on_hand=5, reorder_point=20)
        batch_id = _receive()
        task = current_domain.repository_for(PutawayTask).for_receipt(batch_id)[0]
        assert task.priority == PutawayPriority.HIGH.value

    def test_receipt_for_unknown_sku(self):
        with pytest.raises(UnknownSKU):
            _receive(sku="NOPE")
        assert current_domain.repository_for(PutawayTask).pending() == []

    def test_receipt_with_zero_quantity_rejected(self):
        _register()
        with pytest.raises(ValidationError):
            _receive(quantity=0)
        assert current_domain.repository_for(SkuRecord).get("ELEC-001").on_hand == 150
        assert current_domain.repository_for(PutawayTask).pending() == []

    def test_receipt_against_purchase_order(self):
        _register()
        current_domain.process(
            CreatePurchaseOrder(
                po_number="PO-500",
                supplier="Shenzhen Components",
                lines=json.dumps([{"sku": "ELEC-001", "name": "Relay", "expected_quantity": 80}]),
            ),
            asynchronous=False,
        )
        batch_id = _receive(po_number="PO-500")

        po = current_domain.repository_for(PurchaseOrder).get("PO-500")
        assert po.status == PurchaseOrderStatus.PARTIAL.value
        assert po.lines[0].received_quantity == 50
        assert current_domain.repository_for(PutawayTask).for_receipt(batch_id)[0].po_number == "PO-500"

    def test_receipt_against_unknown_purchase_order_changes_nothing(self):
        _register()
        with pytest.raises(ValidationError) as exc_info:
            _receive(po_number="PO-404")
        assert "po_number" in exc_info.value.messages
        assert current_domain.repository_for(SkuRecord).get("ELEC-001").on_hand == 150


class TestPutawayConfirmation:
    def test_confirm_completes_task(self):
        _register()
        batch_id = _receive()
        task = current_domain.repository_for(PutawayTask).for_receipt(batch_id)[0]

        current_domain.process(ConfirmPutaway(task_id=str(task.id)), asynchronous=False)

        task = current_domain.repository_for(PutawayTask).get(task.id)
        assert task.status == PutawayStatus.COMPLETED.value
        assert current_domain.repository_for(PutawayTask).pending() == []

    def test_second_confirm_is_unknown_task(self):
        _register()
        batch_id = _receive()
        task_id = str(current_domain.repository_for(PutawayTask).for_receipt(batch_id)[0].id)
        current_domain.process(ConfirmPutaway(task_id=task_id), asynchronous=False)
        with pytest.raises(UnknownTask):
            current_domain.process(ConfirmPutaway(task_id=task_id), asynchronous=False)

    def test_unknown_task(self):
        with pytest.raises(UnknownTask):
            current_domain.process(ConfirmPutaway(task_id="missing"), asynchronous=False)


class TestBatchCompliance:
    def test_update_batch_compliance(self):
        _register()
        _receive(batch_number="B-9")
        current_domain.process(
            UpdateBatchCompliance(sku="ELEC-001", batch_number="B-9", status="Compliant"),
            asynchronous=False,
        )
        record = current_domain.repository_for(SkuRecord).get("ELEC-001")
        assert record.batches[0].compliance_status == "Compliant"
