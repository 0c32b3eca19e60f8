"""Validation pipeline — Inventory, then Credit, then Compliance.

Checks run strictly in that order for one order and stop at the first check
that does not pass; the rest stay ``Not_Run``. The pipeline only reads. It
never reserves stock and never changes the order, so a failed or cancelled
run has no side effects.

External checks run on a daemon worker thread and are abandoned after
``check_timeout`` seconds, so a hung provider never holds up interpreter
exit. A provider that stalls, raises or answers Indeterminate yields
``Indeterminate``, never ``Passed``.
"""

import threading

import structlog

from fulfillment.validation.outcomes import CheckName, CheckResult, CheckState, ValidationReport
from fulfillment.validation.providers.port import VerdictState

logger = structlog.get_logger(__name__)


class ValidationPipeline:
    def __init__(self, credit_provider, compliance_provider, check_timeout: float = 2.0):
        self.credit_provider = credit_provider
        self.compliance_provider = compliance_provider
        self.check_timeout = check_timeout

    def run(self, order, find_sku, cancel_event: threading.Event | None = None) -> ValidationReport:
        """Validate ``order``. ``find_sku(sku)`` returns the ledger record or None."""
        report = ValidationReport(order_id=str(order.id))
        steps = [
            (CheckName.INVENTORY, lambda: self.check_inventory(order, find_sku)),
            (CheckName.CREDIT, lambda: self.check_credit(order)),
            (CheckName.COMPLIANCE, lambda: self.check_compliance(order)),
        ]

        for name, step in steps:
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                logger.info("Validation cancelled", order_id=report.order_id, before=name.value)
                return report

            result = step()
            report.record(result)
            logger.debug(
                "Validation check finished",
                order_id=report.order_id,
                check=name.value,
                state=result.state.value,
            )
            if result.state != CheckState.PASSED:
                break

        return report

    # -------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------
    def check_inventory(self, order, find_sku) -> CheckResult:
        """Every line must be coverable from available stock. All problems are reported."""
        reasons = []
        for line in order.ordered_lines():
            record = find_sku(line.sku)
            if record is None:
                reasons.append(f"SKU not found: {line.sku}")
                continue
            record.verify_levels()
            if record.available < line.quantity:
                reasons.append(
                    f"Insufficient stock for {record.name}. Need {line.quantity}, Available {record.available}"
                )

        if reasons:
            return CheckResult.failed(CheckName.INVENTORY, reasons)
        return CheckResult.passed(CheckName.INVENTORY)

    def check_credit(self, order) -> CheckResult:
        return self._call_provider(
            CheckName.CREDIT,
            self.credit_provider.check,
            order.customer,
            order.total_amount,
        )

    def check_compliance(self, order) -> CheckResult:
        return self._call_provider(
            CheckName.COMPLIANCE,
            self.compliance_provider.check,
            order.customer,
            order.priority,
            order.shipping_address,
        )

    def _call_provider(self, name: CheckName, fn, *args) -> CheckResult:
        answer = {}

        def call():
            try:
                answer["verdict"] = fn(*args)
            except Exception as exc:
                answer["error"] = exc

        worker = threading.Thread(target=call, name=f"check-{name.value.lower()}", daemon=True)
        worker.start()
        worker.join(self.check_timeout)

        if worker.is_alive():
            logger.warning("Check timed out", check=name.value, timeout=self.check_timeout)
            return CheckResult.indeterminate(name, f"{name.value} check timed out after {self.check_timeout}s")
        if "error" in answer:
            logger.warning("Check provider error", check=name.value, error=str(answer["error"]))
            return CheckResult.indeterminate(name, f"{name.value} check unavailable: {answer['error']}")

        verdict = answer["verdict"]
        if verdict.state == VerdictState.INDETERMINATE:
            logger.info("Check undecided", check=name.value, reasons=list(verdict.reasons))
            reason = verdict.reasons[0] if verdict.reasons else f"{name.value} check undecided"
            return CheckResult.indeterminate(name, reason)
        if verdict.approved:
            return CheckResult.passed(name)
        return CheckResult.failed(name, verdict.reasons or (f"{name.value} check rejected the order",))
