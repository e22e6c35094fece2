"""Shopping journeys: browse the catalogue, fill a cart, check out.

Expects a seeded catalogue (``python src/manage.py seed-books``).
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.helpers.auth import guest_headers, shopper_headers
from loadtests.helpers.response import error_type, extract_error_detail
from loadtests.helpers.state import ShopperState

# Losing a race for stock is expected under load, not a failure
EXPECTED_REJECTIONS = {"InsufficientStock", "StockExceeded", "EmptyCart", "PriceChanged"}


class CheckoutJourney(SequentialTaskSet):
    """Browse -> Add 1-3 books -> View cart -> Check out -> Read the order."""

    def on_start(self):
        user_id, self.headers = shopper_headers()
        self.state = ShopperState(user_id=user_id)

    @task
    def browse(self):
        with self.client.get("/books?page=1&limit=24", catch_response=True, name="GET /books") as resp:
            if resp.status_code != 200:
                resp.failure(f"Browse failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
                return
            in_stock = [b["id"] for b in resp.json()["books"] if b["stock"] > 0]
            if not in_stock:
                resp.failure("Catalogue sold out")
                self.interrupt()
                return
            self.state.book_ids = random.sample(in_stock, k=min(len(in_stock), random.randint(1, 3)))

    @task
    def fill_cart(self):
        for book_id in self.state.book_ids:
            with self.client.post(
                "/cart",
                json={"bookId": book_id, "quantity": 1},
                headers=self.headers,
                catch_response=True,
                name="POST /cart",
            ) as resp:
                if resp.status_code == 200:
                    self.state.cart_lines += 1
                elif error_type(resp) in EXPECTED_REJECTIONS:
                    resp.success()
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        self.client.get("/cart", headers=self.headers, name="GET /cart")

    @task
    def check_out(self):
        method = random.choice(["cash", "cash", "paymob"])
        with self.client.post(
            "/orders",
            json={"paymentMethod": method},
            headers=self.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["orderId"])
            elif error_type(resp) in EXPECTED_REJECTIONS:
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def read_order(self):
        for order_id in self.state.order_ids[-1:]:
            self.client.get(f"/orders/{order_id}", headers=self.headers, name="GET /orders/{id}")
        self.interrupt()


class GuestMergeJourney(SequentialTaskSet):
    """A guest fills a cart, signs in and merges it, then checks out."""

    def on_start(self):
        self.guest = guest_headers()
        user_id, self.headers = shopper_headers()
        self.state = ShopperState(user_id=user_id)

    @task
    def guest_adds(self):
        resp = self.client.get("/books?page=1&limit=24", name="GET /books")
        books = [b["id"] for b in resp.json().get("books", []) if b["stock"] > 0]
        if not books:
            self.interrupt()
            return
        self.client.post("/cart", json={"bookId": random.choice(books)}, headers=self.guest, name="POST /cart (guest)")

    @task
    def merge(self):
        with self.client.post(
            "/cart/merge",
            headers={**self.headers, **self.guest},
            catch_response=True,
            name="POST /cart/merge",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Merge failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def check_out(self):
        with self.client.post(
            "/orders", json={}, headers=self.headers, catch_response=True, name="POST /orders"
        ) as resp:
            if resp.status_code != 201 and error_type(resp) not in EXPECTED_REJECTIONS:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")
        self.interrupt()


class ShopperUser(HttpUser):
    tasks = {CheckoutJourney: 4, GuestMergeJourney: 1}
    wait_time = between(0.5, 2)
