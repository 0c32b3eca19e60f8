"""Validation results: per-check states and the pipeline report."""

from dataclasses import dataclass, field
from enum import Enum

from fulfillment.order.order import OrderStatus


class CheckName(Enum):
    INVENTORY = "Inventory"
    CREDIT = "Credit"
    COMPLIANCE = "Compliance"


class CheckState(Enum):
    NOT_RUN = "Not_Run"
    PASSED = "Passed"
    FAILED = "Failed"
    INDETERMINATE = "Indeterminate"


# The stage an order has reached while a given check runs
_STAGE_FOR_CHECK = {
    CheckName.INVENTORY: OrderStatus.CONFIRMED,
    CheckName.CREDIT: OrderStatus.CREDIT_CHECK,
    CheckName.COMPLIANCE: OrderStatus.COMPLIANCE_SCREENING,
}


@dataclass(frozen=True)
class CheckResult:
    check: CheckName
    state: CheckState = CheckState.NOT_RUN
    reasons: tuple[str, ...] = ()

    @classmethod
    def passed(cls, check):
        return cls(check=check, state=CheckState.PASSED)

    @classmethod
    def failed(cls, check, reasons):
        return cls(check=check, state=CheckState.FAILED, reasons=tuple(reasons))

    @classmethod
    def indeterminate(cls, check, reason):
        return cls(check=check, state=CheckState.INDETERMINATE, reasons=(reason,))


@dataclass
class ValidationReport:
    """Outcome of one pipeline run over one order."""

    order_id: str
    results: dict = field(default_factory=lambda: {name: CheckResult(check=name) for name in CheckName})
    cancelled: bool = False

    def record(self, result: CheckResult) -> None:
        self.results[result.check] = result

    def state_of(self, check: CheckName) -> CheckState:
        return self.results[check].state

    @property
    def passed(self) -> bool:
        return not self.cancelled and all(r.state == CheckState.PASSED for r in self.results.values())

    @property
    def failing_result(self) -> CheckResult | None:
        for name in CheckName:
            if self.results[name].state in (CheckState.FAILED, CheckState.INDETERMINATE):
                return self.results[name]
        return None

    @property
    def failed_check(self) -> CheckName | None:
        result = self.failing_result
        return result.check if result else None

    @property
    def is_indeterminate(self) -> bool:
        result = self.failing_result
        return result is not None and result.state == CheckState.INDETERMINATE

    @property
    def reasons(self) -> list[str]:
        result = self.failing_result
        return list(result.reasons) if result else []

    @property
    def stage(self) -> OrderStatus:
        """Furthest status the order reached in this run."""
        if self.passed:
            return OrderStatus.WAREHOUSE_PICK
        result = self.failing_result
        if result is not None:
            return _STAGE_FOR_CHECK[result.check]
        # Cancelled: the first check not yet passed is where it stopped
        for name in CheckName:
            if self.results[name].state != CheckState.PASSED:
                return _STAGE_FOR_CHECK[name]
        return OrderStatus.COMPLIANCE_SCREENING

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "passed": self.passed,
            "cancelled": self.cancelled,
            "stage": self.stage.value,
            "failed_check": self.failed_check.value if self.failed_check else None,
            "reasons": self.reasons,
            "checks": {name.value: self.results[name].state.value for name in CheckName},
        }
