import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def fulfillment_bed():
    from fulfillment.domain import fulfillment

    bed = DomainFixture(fulfillment)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(fulfillment_bed):
    with fulfillment_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def credit():
    from fulfillment.validation.providers import get_credit_provider

    return get_credit_provider()


@pytest.fixture()
def compliance():
    from fulfillment.validation.providers import get_compliance_provider

    return get_compliance_provider()


@pytest.fixture()
def engine(credit, compliance):
    from fulfillment.engine import get_engine

    return get_engine()
