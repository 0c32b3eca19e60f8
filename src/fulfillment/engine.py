"""Fulfillment engine — the single entry point embedding applications call.

The engine owns three things the domain model does not:

* Serialization. Every ledger mutation runs with its SKU lock held, and the
  command's unit of work commits before the lock is released. Order
  transitions take the order lock without waiting; a second transition
  attempt on the same order gets ``AlreadyTransitioning`` back. Pick
  confirmations wait for the order lock instead.
* Orchestration of ``process_order``: validation pipeline, all-or-nothing
  reservation of every line, then the move to WAREHOUSE_PICK.
* Typed results. Business failures come back as an ``Outcome``; only
  ``InvariantViolation`` is ever raised.

Callers run inside the fulfillment domain context.
"""

import json
from contextlib import nullcontext

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from fulfillment.concurrency import order_locks, order_number_locks, purchase_order_locks, sku_locks
from fulfillment.domain import logger
from fulfillment.errors import (
    AlreadyTransitioning,
    ErrorKind,
    IllegalTransition,
    InvariantViolation,
    ReservationConflict,
)
from fulfillment.order.intake import CreateOrder
from fulfillment.order.invoicing import IssueInvoice
from fulfillment.order.order import OrderStatus, SalesOrder
from fulfillment.order.transitions import RecordValidationFailure, ReleaseOrder, ShipOrder
from fulfillment.outcome import Outcome
from fulfillment.packing.verification import CancelPackSession, ToggleVerified
from fulfillment.picking.confirmation import ConfirmPick
from fulfillment.picking.grouping import PickStrategy
from fulfillment.picking.tasks import parse_task_id
from fulfillment.projections import (
    batch_ledger,
    order_status,
    picking_board,
    purchase_orders,
    putaway_queue,
    stock_levels,
)
from fulfillment.purchasing.creation import CreatePurchaseOrder
from fulfillment.putaway.confirmation import ConfirmPutaway
from fulfillment.settings import get_settings
from fulfillment.stock.compliance import UpdateBatchCompliance
from fulfillment.stock.receiving import ReceiveGoods
from fulfillment.stock.registration import RegisterSku
from fulfillment.stock.reservation import ReleaseStock, ReserveStock
from fulfillment.stock.stock import SkuRecord
from fulfillment.utils.logging import operation_context
from fulfillment.validation.pipeline import ValidationPipeline
from fulfillment.validation.providers import get_compliance_provider, get_credit_provider


def _process(command):
    return current_domain.process(command, asynchronous=False)


class FulfillmentEngine:
    def __init__(self, settings=None, credit_provider=None, compliance_provider=None):
        self.settings = settings or get_settings()
        self.pipeline = ValidationPipeline(
            credit_provider or get_credit_provider(),
            compliance_provider or get_compliance_provider(),
            check_timeout=self.settings.check_timeout,
        )

    def _run(self, operation: str, fn, **context) -> Outcome:
        with operation_context(operation=operation, **context):
            try:
                return fn()
            except ValidationError as exc:
                outcome = Outcome.from_error(exc)
                logger.info("Operation refused", error=outcome.error.value, reasons=outcome.reasons)
                return outcome
            except InvariantViolation as exc:
                logger.error(
                    "Ledger invariant violated",
                    sku=exc.sku,
                    on_hand=exc.on_hand,
                    allocated=exc.allocated,
                )
                raise

    # -------------------------------------------------------------------
    # Inbound
    # -------------------------------------------------------------------
    def register_sku(self, sku, name, location, on_hand=0, reorder_point=0, unit_price=0.0, category=None) -> Outcome:
        def run():
            with sku_locks.hold(sku):
                return Outcome.success(
                    _process(
                        RegisterSku(
                            sku=sku,
                            name=name,
                            location=location,
                            on_hand=on_hand,
                            reorder_point=reorder_point,
                            unit_price=unit_price,
                            category=category,
                        )
                    )
                )

        return self._run("register_sku", run, sku=sku)

    def receive_goods(
        self,
        sku,
        quantity,
        batch_number,
        lot_number=None,
        expiry_date=None,
        reference=None,
        po_number=None,
    ) -> Outcome:
        """Receive goods; the value is the id of the new batch."""

        def run():
            command = ReceiveGoods(
                sku=sku,
                quantity=quantity,
                batch_number=batch_number,
                lot_number=lot_number,
                expiry_date=expiry_date,
                reference=reference,
                po_number=po_number,
                receiving_dock=self.settings.receiving_dock,
            )
            po_lock = purchase_order_locks.hold(po_number) if po_number else nullcontext()
            with po_lock, sku_locks.hold(sku):
                return Outcome.success(_process(command))

        return self._run("receive_goods", run, sku=sku)

    def create_order(
        self,
        order_number,
        customer,
        lines,
        priority="Normal",
        channel="Direct",
        shipping_address=None,
    ) -> Outcome:
        """Take in a confirmed sales order; the value is the new order id."""

        def run():
            command = CreateOrder(
                order_number=order_number,
                customer=customer,
                lines=json.dumps(list(lines)),
                priority=priority,
                channel=channel,
                shipping_address=shipping_address,
            )
            with order_number_locks.hold(order_number):
                return Outcome.success(_process(command))

        return self._run("create_order", run, order_number=order_number)

    def create_purchase_order(self, po_number, supplier, lines, expected_date=None) -> Outcome:
        def run():
            with purchase_order_locks.hold(po_number):
                return Outcome.success(
                    _process(
                        CreatePurchaseOrder(
                            po_number=po_number,
                            supplier=supplier,
                            expected_date=expected_date,
                            lines=json.dumps(list(lines)),
                        )
                    )
                )

        return self._run("create_purchase_order", run, po_number=po_number)

    # -------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------
    def reserve(self, sku, quantity, order_id=None) -> Outcome:
        """Allocate stock; the value is the SKU's new available quantity."""

        def run():
            with sku_locks.hold(sku):
                return Outcome.success(_process(ReserveStock(sku=sku, quantity=quantity, order_id=order_id)))

        return self._run("reserve", run, sku=sku)

    def release(self, sku, quantity, order_id=None, reason=None) -> Outcome:
        def run():
            with sku_locks.hold(sku):
                return Outcome.success(
                    _process(ReleaseStock(sku=sku, quantity=quantity, order_id=order_id, reason=reason))
                )

        return self._run("release", run, sku=sku)

    def available(self, sku) -> Outcome:
        def run():
            record = current_domain.repository_for(SkuRecord).get_known(sku)
            record.verify_levels()
            return Outcome.success(record.available, changed=False)

        return self._run("available", run, sku=sku)

    def update_batch_compliance(self, sku, batch_number, status) -> Outcome:
        def run():
            with sku_locks.hold(sku):
                _process(UpdateBatchCompliance(sku=sku, batch_number=batch_number, status=status))
            return Outcome.success(status)

        return self._run("update_batch_compliance", run, sku=sku, batch_number=batch_number)

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def validate_order(self, order_id, cancel_event=None) -> Outcome:
        """Run the validation pipeline without touching stock or the order."""

        def run():
            order = current_domain.repository_for(SalesOrder).get_known(order_id)
            return self._report_outcome(self._validate(order, cancel_event))

        return self._run("validate_order", run, order_id=str(order_id))

    def process_order(self, order_id, cancel_event=None) -> Outcome:
        """Validate, reserve every line, and release the order to the warehouse."""

        def run():
            with order_locks.try_hold(order_id) as acquired:
                if not acquired:
                    raise AlreadyTransitioning(f"Order {order_id} is already being transitioned")
                return self._process_order(order_id, cancel_event)

        return self._run("process_order", run, order_id=str(order_id))

    def _validate(self, order, cancel_event):
        find = current_domain.repository_for(SkuRecord).find
        return self.pipeline.run(order, find, cancel_event=cancel_event)

    def _report_outcome(self, report) -> Outcome:
        if report.cancelled:
            return Outcome.failure(ErrorKind.CANCELLED, ["Validation was cancelled"], report=report)
        if report.passed:
            return Outcome.success(report.stage.value, changed=False, report=report)
        kind = ErrorKind.INDETERMINATE if report.is_indeterminate else ErrorKind.VALIDATION_FAILED
        return Outcome.failure(kind, report.reasons, check=report.failed_check.value, report=report)

    def _process_order(self, order_id, cancel_event) -> Outcome:
        order = current_domain.repository_for(SalesOrder).get_known(order_id)
        if order.current_status == OrderStatus.WAREHOUSE_PICK:
            return Outcome.success(order.status, changed=False)
        if not order.is_validatable:
            raise IllegalTransition(f"Cannot transition from {order.status} to {OrderStatus.WAREHOUSE_PICK.value}")

        report = self._validate(order, cancel_event)
        outcome = self._report_outcome(report)
        if report.cancelled:
            return outcome
        if not report.passed:
            _process(
                RecordValidationFailure(
                    order_id=str(order.id),
                    check=report.failed_check.value,
                    outcome=outcome.error.value,
                    reasons=json.dumps(report.reasons),
                )
            )
            return outcome

        if cancel_event is not None and cancel_event.is_set():
            return Outcome.failure(ErrorKind.CANCELLED, ["Processing was cancelled"], report=report)

        reserved = self._reserve_lines(order)
        try:
            status = _process(ReleaseOrder(order_id=str(order.id)))
        except ValidationError:
            self._release_lines(order, reserved, reason="Order release failed")
            raise
        return Outcome.success(status, report=report)

    def _reserve_lines(self, order) -> list:
        """Reserve every line or none. Returns the reserved lines."""
        lines = order.ordered_lines()
        with sku_locks.hold_many(ln.sku for ln in lines):
            reserved = []
            for line in lines:
                try:
                    _process(ReserveStock(sku=line.sku, quantity=line.quantity, order_id=str(order.id)))
                except ValidationError as exc:
                    self._release_lines(order, reserved, reason="Reservation rolled back", locked=True)
                    reasons = getattr(exc, "reasons", None) or [str(exc)]
                    raise ReservationConflict(
                        f"Could not reserve {line.quantity} of {line.sku}", *reasons
                    ) from exc
                reserved.append(line)
        logger.info("Order stock reserved", order_id=str(order.id), lines=len(reserved))
        return reserved

    def _release_lines(self, order, lines, reason, locked=False):
        if not lines:
            return
        if not locked:
            with sku_locks.hold_many(ln.sku for ln in lines):
                self._release_lines(order, lines, reason, locked=True)
            return
        for line in lines:
            _process(ReleaseStock(sku=line.sku, quantity=line.quantity, order_id=str(order.id), reason=reason))
        logger.info("Order stock released", order_id=str(order.id), lines=len(lines), reason=reason)

    def finalize_shipment(self, order_id) -> Outcome:
        """Ship an order whose packing session covers every line SKU."""

        def run():
            with order_locks.try_hold(order_id) as acquired:
                if not acquired:
                    raise AlreadyTransitioning(f"Order {order_id} is already being transitioned")
                order = current_domain.repository_for(SalesOrder).get_known(order_id)
                if order.current_status == OrderStatus.SHIPPED:
                    return Outcome.success(order.status, changed=False)
                return Outcome.success(_process(ShipOrder(order_id=str(order.id))))

        return self._run("finalize_shipment", run, order_id=str(order_id))

    def issue_invoice(self, order_id, invoice_number=None) -> Outcome:
        """Invoice a shipped order; the value is the invoice number."""

        def run():
            with order_locks.try_hold(order_id) as acquired:
                if not acquired:
                    raise AlreadyTransitioning(f"Order {order_id} is already being transitioned")
                order = current_domain.repository_for(SalesOrder).get_known(order_id)
                if order.current_status == OrderStatus.INVOICED:
                    return Outcome.success(order.invoice_number, changed=False)
                return Outcome.success(
                    _process(IssueInvoice(order_id=str(order.id), invoice_number=invoice_number))
                )

        return self._run("issue_invoice", run, order_id=str(order_id))

    # -------------------------------------------------------------------
    # Operator gates
    # -------------------------------------------------------------------
    def confirm_pick(self, task_id, scanned_location, scanned_sku) -> Outcome:
        def run():
            order_id, _ = parse_task_id(task_id)
            with order_locks.hold(order_id):
                changed = _process(
                    ConfirmPick(
                        task_id=task_id,
                        scanned_location=scanned_location,
                        scanned_sku=scanned_sku,
                    )
                )
            return Outcome.success(task_id, changed=changed)

        return self._run("confirm_pick", run, task_id=task_id)

    def toggle_verified(self, order_id, sku) -> Outcome:
        """Flip a SKU in the packing checklist; the value is its new verified state."""

        def run():
            with order_locks.hold(order_id):
                return Outcome.success(_process(ToggleVerified(order_id=str(order_id), sku=sku)))

        return self._run("toggle_verified", run, order_id=str(order_id), sku=sku)

    def cancel_pack_session(self, order_id) -> Outcome:
        def run():
            with order_locks.hold(order_id):
                _process(CancelPackSession(order_id=str(order_id)))
            return Outcome.success()

        return self._run("cancel_pack_session", run, order_id=str(order_id))

    def confirm_putaway(self, task_id) -> Outcome:
        def run():
            _process(ConfirmPutaway(task_id=str(task_id)))
            return Outcome.success(str(task_id))

        return self._run("confirm_putaway", run, task_id=str(task_id))

    # -------------------------------------------------------------------
    # Projections
    # -------------------------------------------------------------------
    def _read(self, operation, fn, *args) -> Outcome:
        return self._run(operation, lambda: Outcome.success(fn(*args), changed=False))

    def order_status(self, order_id) -> Outcome:
        return self._read("order_status", order_status.order_status, order_id)

    def stock_level(self, sku) -> Outcome:
        return self._read("stock_level", stock_levels.stock_level, sku)

    def inventory_summary(self) -> Outcome:
        return self._read("inventory_summary", stock_levels.inventory_summary)

    def batch_ledger(self, sku=None) -> Outcome:
        return self._read("batch_ledger", batch_ledger.batch_ledger, sku)

    def picking_tasks(self, strategy=None) -> Outcome:
        """Pending picking tasks, flat or grouped by ``Wave``, ``Batch`` or ``Zone``."""
        if strategy is None:
            return self._read("picking_tasks", picking_board.picking_tasks)
        try:
            strategy = PickStrategy(strategy)
        except ValueError:
            return Outcome.failure(ErrorKind.INVALID_INPUT, [f"Unknown picking strategy: {strategy}"])
        return self._read("picking_tasks", picking_board.grouped_picking_tasks, strategy)

    def pack_ready_orders(self) -> Outcome:
        return self._read("pack_ready_orders", picking_board.pack_ready_orders)

    def packing_progress(self, order_id) -> Outcome:
        return self._read("packing_progress", picking_board.packing_progress, order_id)

    def pending_putaway_tasks(self) -> Outcome:
        return self._read("pending_putaway_tasks", putaway_queue.pending_putaway_tasks)

    def purchase_order_progress(self, po_number) -> Outcome:
        return self._read("purchase_order_progress", purchase_orders.purchase_order_progress, po_number)


_engine_instance = None


def get_engine() -> FulfillmentEngine:
    """Return the process-wide engine (singleton)."""
    global _engine_instance
    if _engine_instance is None:
        _engine_instance = FulfillmentEngine()
    return _engine_instance


def reset_engine():
    """Reset the engine singleton (useful for testing)."""
    global _engine_instance
    _engine_instance = None

