"""Contention: many shoppers race for the same few copies.

Every user targets the first book of the catalogue. Seed it with a small
stock (``seed-books --count 1 --stock 10``) and watch that exactly that many
checkouts succeed while the rest get InsufficientStock.
"""

from locust import HttpUser, constant, task

from loadtests.helpers.auth import shopper_headers
from loadtests.helpers.response import error_type, extract_error_detail

EXPECTED_REJECTIONS = {"InsufficientStock", "StockExceeded", "EmptyCart"}


class LastCopyUser(HttpUser):
    wait_time = constant(0)

    def on_start(self):
        _, self.headers = shopper_headers()
        books = self.client.get("/books?page=1&limit=1", name="GET /books").json()["books"]
        self.book_id = books[0]["id"] if books else None

    @task
    def grab_and_check_out(self):
        if self.book_id is None:
            return
        self.client.post("/cart", json={"bookId": self.book_id}, headers=self.headers, name="POST /cart")
        with self.client.post(
            "/orders", json={}, headers=self.headers, catch_response=True, name="POST /orders"
        ) as resp:
            if resp.status_code == 201 or error_type(resp) in EXPECTED_REJECTIONS:
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")
