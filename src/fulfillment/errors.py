"""Error taxonomy for the fulfillment engine.

Business-rule violations are raised inside the domain as subclasses of
protean's ``ValidationError`` so command handlers and unit-of-work rollback
behave as usual. The engine converts them into typed ``Outcome`` values at its
boundary. ``InvariantViolation`` is deliberately not a ``ValidationError``:
it signals corrupted ledger state and is never converted.
"""

from enum import Enum

from protean.exceptions import ValidationError


class ErrorKind(Enum):
    INSUFFICIENT_STOCK = "InsufficientStock"
    UNKNOWN_SKU = "UnknownSKU"
    UNKNOWN_ORDER = "UnknownOrder"
    UNKNOWN_TASK = "UnknownTask"
    VALIDATION_FAILED = "ValidationFailed"
    INDETERMINATE = "Indeterminate"
    RESERVATION_CONFLICT = "ReservationConflict"
    ALREADY_TRANSITIONING = "AlreadyTransitioning"
    ILLEGAL_TRANSITION = "IllegalTransition"
    MISMATCH = "MismatchError"
    INCOMPLETE_PACKING = "IncompletePacking"
    CANCELLED = "Cancelled"
    INVALID_INPUT = "InvalidInput"


class FulfillmentError(ValidationError):
    """Base class for business-rule failures carrying an ``ErrorKind``."""

    kind = ErrorKind.INVALID_INPUT
    field = "fulfillment"

    def __init__(self, *reasons):
        self.reasons = [str(r) for r in reasons]
        super().__init__({self.field: self.reasons})


class InsufficientStock(FulfillmentError):
    kind = ErrorKind.INSUFFICIENT_STOCK
    field = "quantity"


class UnknownSKU(FulfillmentError):
    kind = ErrorKind.UNKNOWN_SKU
    field = "sku"


class UnknownOrder(FulfillmentError):
    kind = ErrorKind.UNKNOWN_ORDER
    field = "order_id"


class UnknownTask(FulfillmentError):
    kind = ErrorKind.UNKNOWN_TASK
    field = "task_id"


class ReservationConflict(FulfillmentError):
    kind = ErrorKind.RESERVATION_CONFLICT
    field = "reservation"


class AlreadyTransitioning(FulfillmentError):
    kind = ErrorKind.ALREADY_TRANSITIONING
    field = "status"


class IllegalTransition(FulfillmentError):
    kind = ErrorKind.ILLEGAL_TRANSITION
    field = "status"


class MismatchError(FulfillmentError):
    kind = ErrorKind.MISMATCH
    field = "scan"


class IncompletePacking(FulfillmentError):
    kind = ErrorKind.INCOMPLETE_PACKING
    field = "packing"


class InvariantViolation(Exception):
    """Ledger state breaks ``0 <= allocated <= on_hand``.

    Raised on read for operator attention. The remedy (write-off or re-audit)
    is a business decision, so the engine never corrects the record itself.
    """

    def __init__(self, sku, on_hand, allocated):
        self.sku = sku
        self.on_hand = on_hand
        self.allocated = allocated
        super().__init__(f"Ledger invariant broken for {sku}: allocated {allocated} exceeds on-hand {on_hand}")
