"""Engine settings, read from the environment.

Protean's own configuration (providers, brokers, event store) is left at its
in-memory defaults and selected by ``PROTEAN_ENV``; these are the business
knobs the engine needs on top of it.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class EngineSettings:
    receiving_dock: str = "Receiving Dock"
    check_timeout: float = 2.0  # seconds, per external check
    credit_threshold: float = 50_000_000.0
    credit_min_score: float = 0.2
    compliance_flag_rate: float = 0.05
    credit_provider: str = "reference"
    compliance_provider: str = "reference"

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            receiving_dock=os.environ.get("FULFILLMENT_RECEIVING_DOCK", cls.receiving_dock),
            check_timeout=float(os.environ.get("FULFILLMENT_CHECK_TIMEOUT", cls.check_timeout)),
            credit_threshold=float(os.environ.get("FULFILLMENT_CREDIT_THRESHOLD", cls.credit_threshold)),
            credit_min_score=float(os.environ.get("FULFILLMENT_CREDIT_MIN_SCORE", cls.credit_min_score)),
            compliance_flag_rate=float(os.environ.get("FULFILLMENT_COMPLIANCE_FLAG_RATE", cls.compliance_flag_rate)),
            credit_provider=os.environ.get("FULFILLMENT_CREDIT_PROVIDER", cls.credit_provider),
            compliance_provider=os.environ.get("FULFILLMENT_COMPLIANCE_PROVIDER", cls.compliance_provider),
        )


_settings = None


def get_settings() -> EngineSettings:
    """Return the process-wide settings (loaded on first use)."""
    global _settings
    if _settings is None:
        _settings = EngineSettings.from_env()
    return _settings


def reset_settings():
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
