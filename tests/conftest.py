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
    """Pin the environment before any bookstore module reads its settings."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ["PAYMENT_GATEWAY"] = "fake"
    os.environ["CACHE_BACKEND"] = "memory"
    os.environ.setdefault("JWT_SECRET", "test-secret")
    os.environ.setdefault("GATEWAY_TIMEOUT_SECONDS", "2")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path or "/adapters/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Reset settings and swapped-in adapters around every test."""
    from bookstore.cache import reset_cache
    from bookstore.config import reset_settings
    from bookstore.notifications import reset_broadcaster
    from bookstore.notifications.dispatch import reset_dispatcher
    from bookstore.payments.gateway import reset_gateway

    reset_settings()

    yield

    reset_dispatcher()
    reset_broadcaster()
    reset_gateway()
    reset_cache()
    reset_settings()
