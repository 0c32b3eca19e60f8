import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Selects the protean config environment and swaps the reference check
    providers for the deterministic fakes.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ["FULFILLMENT_CREDIT_PROVIDER"] = "fake"
    os.environ["FULFILLMENT_COMPLIANCE_PROVIDER"] = "fake"
    os.environ.setdefault("FULFILLMENT_CHECK_TIMEOUT", "0.5")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Forget cached settings, providers, engine and locks between tests."""
    from fulfillment.concurrency import order_locks, order_number_locks, purchase_order_locks, sku_locks
    from fulfillment.engine import reset_engine
    from fulfillment.settings import reset_settings
    from fulfillment.validation.providers import reset_providers

    reset_settings()
    reset_providers()
    reset_engine()
    yield
    reset_engine()
    reset_providers()
    reset_settings()
    for locks in (sku_locks, order_locks, order_number_locks, purchase_order_locks):
        locks.clear()
