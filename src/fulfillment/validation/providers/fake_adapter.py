"""Fake check providers — deterministic checks for testing and development.

Approve by default. Configurable to reject, to answer Indeterminate, to
raise, or to stall for a while before answering (to exercise the pipeline's
timeout).
"""

import time

from fulfillment.validation.providers.port import CheckVerdict, ComplianceCheckProvider, CreditCheckProvider


class _ConfigurableCheck:
    def __init__(self):
        self.configure()

    def configure(
        self,
        should_approve: bool = True,
        reason: str = "Rejected by fake provider",
        delay: float = 0.0,
        error: Exception | None = None,
        undecided: bool = False,
    ):
        """Configure the fake provider behavior for testing."""
        self.should_approve = should_approve
        self.reason = reason
        self.delay = delay
        self.error = error
        self.undecided = undecided
        self.calls = []

    def _answer(self) -> CheckVerdict:
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.undecided:
            return CheckVerdict.indeterminate(self.reason)
        if not self.should_approve:
            return CheckVerdict.reject(self.reason)
        return CheckVerdict.approve()


class FakeCreditCheck(_ConfigurableCheck, CreditCheckProvider):
    def check(self, customer: str, amount: float) -> CheckVerdict:
        self.calls.append((customer, amount))
        return self._answer()


class FakeComplianceCheck(_ConfigurableCheck, ComplianceCheckProvider):
    def check(self, customer: str, priority: str, destination: str | None) -> CheckVerdict:
        self.calls.append((customer, priority, destination))
        return self._answer()
