"""Reference check providers — the trading desk's built-in policies.

Both draw from a random source standing in for a real bureau score or
screening hit. Pass a seeded ``random.Random`` to make them repeatable.
"""

import random

from fulfillment.order.order import OrderPriority
from fulfillment.validation.providers.port import CheckVerdict, ComplianceCheckProvider, CreditCheckProvider


class ReferenceCreditCheck(CreditCheckProvider):
    """Approve unless the order is large AND the customer's score is poor."""

    def __init__(self, threshold: float, min_score: float, rng: random.Random | None = None):
        self.threshold = threshold
        self.min_score = min_score
        self.rng = rng or random.Random()

    def check(self, customer: str, amount: float) -> CheckVerdict:
        if amount > self.threshold and self.rng.random() < self.min_score:
            return CheckVerdict.reject("Customer failed automated credit check.")
        return CheckVerdict.approve()


class ReferenceComplianceCheck(ComplianceCheckProvider):
    """Flag a fraction of Critical orders for manual export review."""

    def __init__(self, flag_rate: float, rng: random.Random | None = None):
        self.flag_rate = flag_rate
        self.rng = rng or random.Random()

    def check(self, customer: str, priority: str, destination: str | None) -> CheckVerdict:
        if priority == OrderPriority.CRITICAL.value and self.rng.random() > 1.0 - self.flag_rate:
            return CheckVerdict.reject("Compliance screening flagged potential export restriction.")
        return CheckVerdict.approve()
