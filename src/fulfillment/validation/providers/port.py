"""Check provider ports — abstract interfaces for external credit and compliance checks.

The validation pipeline programs against these ports; providers are swapped
via configuration. A provider answers Pass, Fail or Indeterminate; the last
is for a check that could not reach a decision (service down, data missing).
The pipeline also bounds every call with a timeout and treats a timeout or a
raised exception as Indeterminate.

A provider that overruns its timeout is abandoned, not interrupted: its
daemon worker thread runs on until the call returns or the process exits.
Providers that talk to remote services should set their own socket or
client timeouts below the check timeout.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class VerdictState(Enum):
    PASS = "Pass"
    FAIL = "Fail"
    INDETERMINATE = "Indeterminate"


@dataclass(frozen=True)
class CheckVerdict:
    state: VerdictState
    reasons: tuple[str, ...] = ()

    @classmethod
    def approve(cls):
        return cls(state=VerdictState.PASS)

    @classmethod
    def reject(cls, *reasons):
        return cls(state=VerdictState.FAIL, reasons=tuple(reasons))

    @classmethod
    def indeterminate(cls, reason):
        return cls(state=VerdictState.INDETERMINATE, reasons=(reason,))

    @property
    def approved(self) -> bool:
        return self.state == VerdictState.PASS


class CreditCheckProvider(ABC):
    """Abstract interface for credit check providers."""

    @abstractmethod
    def check(self, customer: str, amount: float) -> CheckVerdict:
        """Decide whether ``customer`` may take on an order worth ``amount``."""
        ...


class ComplianceCheckProvider(ABC):
    """Abstract interface for export compliance screening providers."""

    @abstractmethod
    def check(self, customer: str, priority: str, destination: str | None) -> CheckVerdict:
        """Screen an order for export restrictions."""
        ...
