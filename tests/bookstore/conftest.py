import threading

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def bookstore_bed():
    from bookstore.domain import bookstore

    bed = DomainFixture(bookstore)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(bookstore_bed):
    with bookstore_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------
@pytest.fixture()
def gateway():
    """A fresh fake gateway installed as the active one."""
    from bookstore.payments.gateway import set_gateway
    from bookstore.payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def cache():
    from bookstore.cache import set_cache
    from bookstore.cache.memory_adapter import InMemoryResponseCache

    memory = InMemoryResponseCache()
    set_cache(memory)
    return memory


@pytest.fixture()
def broadcaster():
    from bookstore.notifications import set_broadcaster
    from bookstore.notifications.memory_broadcast import InMemoryBroadcaster

    memory = InMemoryBroadcaster()
    set_broadcaster(memory)
    return memory


# ---------------------------------------------------------------------------
# Data helpers
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_book():
    from bookstore.inventory.management import add_book

    def _make(title="Dune", price=20.0, stock=5, author="Frank Herbert"):
        return add_book(title=title, price=price, stock=stock, author=author)

    return _make


@pytest.fixture()
def cart_store():
    from bookstore.cart.store import CartStore

    return CartStore()


@pytest.fixture()
def checkout(gateway):
    from bookstore.checkout.service import CheckoutService

    return CheckoutService()


@pytest.fixture()
def run_in_threads(bookstore_bed):
    """Run callables concurrently, each inside its own domain context.

    Returns a list of ``("ok", result)`` or ``("error", exception)`` in call order.
    """

    def _run(*calls, timeout=10):
        outcomes = [None] * len(calls)
        start = threading.Barrier(len(calls))

        def worker(index, fn):
            with bookstore_bed.domain.domain_context():
                start.wait()
                try:
                    outcomes[index] = ("ok", fn())
                except Exception as exc:
                    outcomes[index] = ("error", exc)

        threads = [threading.Thread(target=worker, args=(i, fn)) for i, fn in enumerate(calls)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout)
        return outcomes

    return _run
