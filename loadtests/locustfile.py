"""Bookstore load testing — Locust entry point.

Usage:
    # Seed a catalogue first
    python src/manage.py seed-books --count 20 --stock 50

    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Stock contention only:
    locust -f loadtests/locustfile.py LastCopyUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ShopperUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest

JWT_SECRET must match the server's so simulated shoppers can sign in.
"""

import logging
import time

import requests
from locust import events

from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.contention import LastCopyUser  # noqa: F401
from loadtests.scenarios.shopping import ShopperUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, extract_error_detail(response))


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}\n")


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print what the catalogue looks like after the run; stock must never be negative."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not environment.host:
        return
    try:
        resp = requests.get(f"{environment.host}/books?page=1&limit=100", timeout=5)
        books = resp.json().get("books", [])
    except (requests.RequestException, ValueError) as exc:
        print(f"[LOADTEST] Could not read the catalogue: {exc}\n")
        return

    oversold = [b for b in books if b["stock"] < 0]
    print(f"[LOADTEST] {len(books)} books, {sum(b['stock'] for b in books)} copies left")
    if oversold:
        print(f"[LOADTEST] OVERSOLD: {[b['title'] for b in oversold]}")
    print()
