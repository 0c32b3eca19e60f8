"""Check provider abstraction — pluggable credit and compliance integrations."""

from fulfillment.settings import get_settings

_credit_instance = None
_compliance_instance = None


def get_credit_provider():
    """Return the configured credit check provider (singleton).

    Uses the reference policy by default. Select with the
    FULFILLMENT_CREDIT_PROVIDER environment variable.
    """
    global _credit_instance
    if _credit_instance is None:
        settings = get_settings()
        if settings.credit_provider == "reference":
            from fulfillment.validation.providers.reference import ReferenceCreditCheck

            _credit_instance = ReferenceCreditCheck(settings.credit_threshold, settings.credit_min_score)
        elif settings.credit_provider == "fake":
            from fulfillment.validation.providers.fake_adapter import FakeCreditCheck

            _credit_instance = FakeCreditCheck()
        else:
            raise ValueError(f"Unknown credit provider: {settings.credit_provider}")
    return _credit_instance


def get_compliance_provider():
    """Return the configured compliance screening provider (singleton)."""
    global _compliance_instance
    if _compliance_instance is None:
        settings = get_settings()
        if settings.compliance_provider == "reference":
            from fulfillment.validation.providers.reference import ReferenceComplianceCheck

            _compliance_instance = ReferenceComplianceCheck(settings.compliance_flag_rate)
        elif settings.compliance_provider == "fake":
            from fulfillment.validation.providers.fake_adapter import FakeComplianceCheck

            _compliance_instance = FakeComplianceCheck()
        else:
            raise ValueError(f"Unknown compliance provider: {settings.compliance_provider}")
    return _compliance_instance


def reset_providers():
    """Reset both provider singletons (useful for testing)."""
    global _credit_instance, _compliance_instance
    _credit_instance = None
    _compliance_instance = None
