"""Integration tests for the cart endpoints."""


class TestViewCart:
    def test_empty_cart(self, client, user_headers):
        response = client.get("/cart", headers=user_headers)
        assert response.status_code == 200
        assert response.json() == {"items": [], "total": 0}

    def test_camel_case_items(self, client, user_headers, make_book):
        book_id = make_book(title="Dune", price=10.0, stock=4)
        client.post("/cart", json={"bookId": book_id, "quantity": 2}, headers=user_headers)

        body = client.get("/cart", headers=user_headers).json()
        assert body["total"] == 20.0
        [item] = body["items"]
        assert item["bookId"] == book_id
        assert item["title"] == "Dune"
        assert item["stock"] == 4
        assert item["subtotal"] == 20.0

    def test_requires_identity(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json()["status"] == "fail"


class TestMutations:
    def test_add(self, client, user_headers, make_book):
        book_id = make_book()
        response = client.post("/cart", json={"bookId": book_id, "quantity": 1}, headers=user_headers)
        assert response.status_code == 200
        assert response.json() == {"status": "success", "message": "Book added to cart"}

    def test_add_beyond_stock(self, client, user_headers, make_book):
        book_id = make_book(stock=1)
        response = client.post("/cart", json={"bookId": book_id, "quantity": 2}, headers=user_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "StockExceeded"

    def test_add_unknown_book(self, client, user_headers):
        response = client.post("/cart", json={"bookId": "no-such-book"}, headers=user_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "BookNotFound"

    def test_add_zero_quantity(self, client, user_headers, make_book):
        book_id = make_book()
        response = client.post("/cart", json={"bookId": book_id, "quantity": 0}, headers=user_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "RequestValidationError"

    def test_patch_sets_quantity(self, client, user_headers, make_book):
        book_id = make_book(stock=5)
        client.post("/cart", json={"bookId": book_id, "quantity": 1}, headers=user_headers)
        response = client.patch("/cart", json={"bookId": book_id, "quantity": 3}, headers=user_headers)

        assert response.json()["message"] == "Cart updated"
        assert client.get("/cart", headers=user_headers).json()["items"][0]["quantity"] == 3

    def test_patch_zero_removes(self, client, user_headers, make_book):
        book_id = make_book()
        client.post("/cart", json={"bookId": book_id, "quantity": 1}, headers=user_headers)
        response = client.patch("/cart", json={"bookId": book_id, "quantity": 0}, headers=user_headers)

        assert response.json()["message"] == "Book removed from cart"
        assert client.get("/cart", headers=user_headers).json()["items"] == []

    def test_patch_missing_cart(self, client, user_headers, make_book):
        book_id = make_book()
        response = client.patch("/cart", json={"bookId": book_id, "quantity": 1}, headers=user_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "CartNotFound"

    def test_remove_item(self, client, user_headers, make_book):
        book_id = make_book()
        client.post("/cart", json={"bookId": book_id}, headers=user_headers)
        response = client.request("DELETE", "/cart/item", json={"bookId": book_id}, headers=user_headers)
        assert response.status_code == 200
        assert client.get("/cart", headers=user_headers).json()["items"] == []

    def test_clear(self, client, user_headers, make_book):
        book_id = make_book()
        client.post("/cart", json={"bookId": book_id}, headers=user_headers)
        assert client.delete("/cart", headers=user_headers).json()["message"] == "Cart cleared"
        assert client.delete("/cart", headers=user_headers).status_code == 404


class TestGuestCart:
    def test_guest_can_fill_a_cart(self, client, guest_id, make_book):
        book_id = make_book()
        headers = {"x-guest-id": guest_id}
        assert client.post("/cart", json={"bookId": book_id}, headers=headers).status_code == 200
        assert len(client.get("/cart", headers=headers).json()["items"]) == 1

    def test_malformed_guest_id(self, client):
        response = client.get("/cart", headers={"x-guest-id": "not-a-uuid"})
        assert response.status_code == 401

    def test_merge_on_sign_in(self, client, guest_id, user_headers, make_book):
        book_id = make_book(stock=5)
        client.post("/cart", json={"bookId": book_id, "quantity": 2}, headers={"x-guest-id": guest_id})

        response = client.post("/cart/merge", headers={**user_headers, "x-guest-id": guest_id})

        assert response.json() == {"merged": 1, "dropped": 0}
        assert client.get("/cart", headers=user_headers).json()["items"][0]["quantity"] == 2
        assert client.get("/cart", headers={"x-guest-id": guest_id}).json()["items"] == []

    def test_merge_needs_sign_in(self, client, guest_id):
        response = client.post("/cart/merge", headers={"x-guest-id": guest_id})
        assert response.status_code == 401

    def test_merge_without_guest_header(self, client, user_headers):
        assert client.post("/cart/merge", headers=user_headers).json() == {"merged": 0, "dropped": 0}
