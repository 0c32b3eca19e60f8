"""SalesOrder aggregate (CQRS) — the order state machine.

State Machine (forward only):
    CONFIRMED → WAREHOUSE_PICK → SHIPPED → INVOICED

CREDIT_CHECK and COMPLIANCE_SCREENING sit between CONFIRMED and
WAREHOUSE_PICK in the status order. They name the stage an order is in while
its credit or compliance check runs; validation never persists them, because
a failed check must leave the order CONFIRMED and status may not move
backward. Orders loaded in either stage can still be released to the
warehouse.

Entering WAREHOUSE_PICK is the only point where stock is reserved and picking
tasks start to exist; the engine reserves before calling
``release_to_warehouse``.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Integer, String, Text

from fulfillment.domain import fulfillment
from fulfillment.errors import IllegalTransition, IncompletePacking, UnknownTask
from fulfillment.order.events import (
    LinePicked,
    OrderCreated,
    OrderInvoiced,
    OrderReleasedToWarehouse,
    OrderShipped,
    OrderValidationFailed,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    CONFIRMED = "Confirmed"
    CREDIT_CHECK = "Credit_Check"
    COMPLIANCE_SCREENING = "Compliance_Screening"
    WAREHOUSE_PICK = "Warehouse_Pick"
    SHIPPED = "Shipped"
    INVOICED = "Invoiced"

    @property
    def rank(self) -> int:
        return _STATUS_SEQUENCE.index(self)


_STATUS_SEQUENCE = list(OrderStatus)


class OrderPriority(Enum):
    NORMAL = "Normal"
    HIGH = "High"
    CRITICAL = "Critical"


class SalesChannel(Enum):
    CRM = "CRM"
    WEB = "Web"
    DIRECT = "Direct"
    EDI = "EDI"


class PickStatus(Enum):
    PENDING = "Pending"
    PICKED = "Picked"


_VALID_TRANSITIONS = {
    OrderStatus.CONFIRMED: {OrderStatus.WAREHOUSE_PICK},
    OrderStatus.CREDIT_CHECK: {OrderStatus.WAREHOUSE_PICK},
    OrderStatus.COMPLIANCE_SCREENING: {OrderStatus.WAREHOUSE_PICK},
    OrderStatus.WAREHOUSE_PICK: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.INVOICED},
    OrderStatus.INVOICED: set(),  # terminal
}

# Statuses in which the validation pipeline may (re)run
_VALIDATABLE_STATUSES = {
    OrderStatus.CONFIRMED,
    OrderStatus.CREDIT_CHECK,
    OrderStatus.COMPLIANCE_SCREENING,
}


def _check_line_keys(lines_data, required):
    """Every line must be a mapping carrying the required keys."""
    problems = []
    for index, line in enumerate(lines_data):
        if not isinstance(line, dict):
            problems.append(f"Line {index} is not a mapping")
            continue
        missing = [key for key in required if line.get(key) in (None, "")]
        if missing:
            problems.append(f"Line {index} is missing {', '.join(missing)}")
    if problems:
        raise ValidationError({"lines": problems})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@fulfillment.entity(part_of="SalesOrder")
class OrderLine:
    """One ordered SKU. Its pick status drives picking task derivation."""

    line_index = Integer(required=True, min_value=0)
    sku = String(required=True, max_length=50)
    name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(default=0.0, min_value=0.0)
    pick_status = String(
        choices=PickStatus,
        default=PickStatus.PENDING.value,
    )
    picked_location = String(max_length=100)
    picked_at = DateTime()

    @property
    def is_picked(self) -> bool:
        return self.pick_status == PickStatus.PICKED.value


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@fulfillment.aggregate
class SalesOrder:
    order_number = String(required=True, max_length=50)
    customer = String(required=True, max_length=255)
    channel = String(
        choices=SalesChannel,
        default=SalesChannel.DIRECT.value,
    )
    priority = String(
        choices=OrderPriority,
        default=OrderPriority.NORMAL.value,
    )
    status = String(
        choices=OrderStatus,
        default=OrderStatus.CONFIRMED.value,
    )
    lines = HasMany(OrderLine)
    shipping_address = String(max_length=500)
    total_amount = Float(default=0.0)
    last_failed_check = String(max_length=50)
    last_failure_reasons = Text()  # JSON list of strings
    invoice_number = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()
    released_at = DateTime()
    shipped_at = DateTime()
    invoiced_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number: str,
        customer: str,
        lines_data: list[dict],
        priority: str = OrderPriority.NORMAL.value,
        shipping_address: str | None = None,
        channel: str = SalesChannel.DIRECT.value,
    ):
        """Take in a confirmed sales order.

        Each line dict carries ``sku``, ``quantity``, ``unit_price`` and an
        optional ``name``. A SKU may appear on only one line.
        """
        if not lines_data:
            raise ValidationError({"lines": ["An order needs at least one line"]})
        _check_line_keys(lines_data, ("sku", "quantity"))

        skus = [line["sku"] for line in lines_data]
        duplicates = sorted({sku for sku in skus if skus.count(sku) > 1})
        if duplicates:
            raise ValidationError({"lines": [f"Duplicate SKU on order: {', '.join(duplicates)}"]})

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer=customer,
            channel=channel,
            priority=priority,
            status=OrderStatus.CONFIRMED.value,
            shipping_address=shipping_address,
            created_at=now,
            updated_at=now,
        )
        for index, line in enumerate(lines_data):
            order.add_lines(
                OrderLine(
                    line_index=index,
                    sku=line["sku"],
                    name=line.get("name") or line["sku"],
                    quantity=line["quantity"],
                    unit_price=line.get("unit_price", 0.0),
                )
            )
        order.total_amount = sum(ln.quantity * ln.unit_price for ln in order.lines)

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order_number,
                customer=customer,
                priority=order.priority,
                lines=json.dumps(lines_data),
                total_amount=order.total_amount,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    def ordered_lines(self) -> list:
        return sorted(self.lines or [], key=lambda ln: ln.line_index)

    def line(self, line_index: int):
        found = next((ln for ln in (self.lines or []) if ln.line_index == line_index), None)
        if found is None:
            raise UnknownTask(f"Order {self.order_number} has no line {line_index}")
        return found

    @property
    def line_skus(self) -> set[str]:
        return {ln.sku for ln in (self.lines or [])}

    @property
    def all_lines_picked(self) -> bool:
        return bool(self.lines) and all(ln.is_picked for ln in self.lines)

    @property
    def is_validatable(self) -> bool:
        return self.current_status in _VALIDATABLE_STATUSES

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = self.current_status
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise IllegalTransition(f"Cannot transition from {current.value} to {target_status.value}")

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------
    def record_validation_failure(self, check: str, outcome: str, reasons: list[str]) -> None:
        """Keep the reasons a release attempt was refused. Status does not change."""
        if not self.is_validatable:
            raise IllegalTransition(f"Order in {self.status} state is past validation")

        now = datetime.now(UTC)
        self.last_failed_check = check
        self.last_failure_reasons = json.dumps(list(reasons))
        self.updated_at = now
        self.raise_(
            OrderValidationFailed(
                order_id=str(self.id),
                check=check,
                outcome=outcome,
                reasons=json.dumps(list(reasons)),
                failed_at=now,
            )
        )

    @property
    def failure_reasons(self) -> list[str]:
        return json.loads(self.last_failure_reasons) if self.last_failure_reasons else []

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def release_to_warehouse(self) -> None:
        """Enter WAREHOUSE_PICK. Stock for every line must already be reserved."""
        self._assert_can_transition(OrderStatus.WAREHOUSE_PICK)

        now = datetime.now(UTC)
        self.status = OrderStatus.WAREHOUSE_PICK.value
        self.last_failed_check = None
        self.last_failure_reasons = None
        self.released_at = now
        self.updated_at = now
        self.raise_(
            OrderReleasedToWarehouse(
                order_id=str(self.id),
                order_number=self.order_number,
                line_count=len(self.lines),
                released_at=now,
            )
        )

    def record_pick(self, line_index: int, location: str) -> bool:
        """Mark a line picked. Returns False if it already was."""
        if self.current_status != OrderStatus.WAREHOUSE_PICK:
            raise UnknownTask(f"Order {self.order_number} is not in picking (status {self.status})")

        line = self.line(line_index)
        if line.is_picked:
            return False

        now = datetime.now(UTC)
        line.pick_status = PickStatus.PICKED.value
        line.picked_location = location
        line.picked_at = now
        self.updated_at = now
        self.raise_(
            LinePicked(
                order_id=str(self.id),
                line_index=line_index,
                sku=line.sku,
                quantity=line.quantity,
                location=location,
                picked_at=now,
            )
        )
        return True

    def assert_can_ship(self) -> None:
        self._assert_can_transition(OrderStatus.SHIPPED)

    def mark_shipped(self) -> None:
        """Enter SHIPPED. The packing gate has already verified the item set."""
        self._assert_can_transition(OrderStatus.SHIPPED)
        if not self.all_lines_picked:
            unpicked = [ln.sku for ln in self.ordered_lines() if not ln.is_picked]
            raise IncompletePacking(f"Lines not yet picked: {', '.join(unpicked)}")

        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        self.shipped_at = now
        self.updated_at = now
        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                order_number=self.order_number,
                shipped_at=now,
            )
        )

    def issue_invoice(self, invoice_number: str) -> None:
        """Enter INVOICED."""
        self._assert_can_transition(OrderStatus.INVOICED)
        if not invoice_number:
            raise ValidationError({"invoice_number": ["Invoice number is required"]})

        now = datetime.now(UTC)
        self.status = OrderStatus.INVOICED.value
        self.invoice_number = invoice_number
        self.invoiced_at = now
        self.updated_at = now
        self.raise_(
            OrderInvoiced(
                order_id=str(self.id),
                invoice_number=invoice_number,
                amount=self.total_amount,
                invoiced_at=now,
            )
        )
