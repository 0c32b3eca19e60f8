"""Typed results returned by every engine operation."""

from dataclasses import dataclass, field
from typing import Any

from protean.exceptions import ValidationError

from fulfillment.errors import ErrorKind, FulfillmentError


@dataclass(frozen=True)
class Outcome:
    ok: bool
    value: Any = None
    error: ErrorKind | None = None
    reasons: list[str] = field(default_factory=list)
    check: str | None = None
    changed: bool = True
    report: Any = None

    @classmethod
    def success(cls, value=None, changed=True, report=None):
        return cls(ok=True, value=value, changed=changed, report=report)

    @classmethod
    def failure(cls, error: ErrorKind, reasons, check=None, report=None):
        return cls(ok=False, error=error, reasons=list(reasons), check=check, changed=False, report=report)

    @classmethod
    def from_error(cls, exc: ValidationError):
        """Map a domain ``ValidationError`` onto an outcome, keeping every message."""
        if isinstance(exc, FulfillmentError):
            return cls.failure(exc.kind, exc.reasons)

        reasons = []
        for field_name, messages in (exc.messages or {}).items():
            for message in messages if isinstance(messages, (list, tuple)) else [messages]:
                reasons.append(f"{field_name}: {message}")
        return cls.failure(ErrorKind.INVALID_INPUT, reasons)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "value": self.value,
            "error": self.error.value if self.error else None,
            "reasons": list(self.reasons),
            "check": self.check,
            "changed": self.changed,
        }
