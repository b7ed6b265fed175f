import pytest


@pytest.fixture(scope="session")
def _shipping_domain():
    """Initialize the shipping domain once per session."""
    from shipping.domain import shipping

    shipping.init()
    return shipping


@pytest.fixture(scope="session", autouse=True)
def setup_db(_shipping_domain):
    from shipping.utils.db import drop_db, setup_db

    setup_db(_shipping_domain)

    yield

    drop_db(_shipping_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_shipping_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _shipping_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()
