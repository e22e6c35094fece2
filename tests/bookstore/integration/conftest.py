from uuid import uuid4

import pytest
from bookstore.api import admin_order_router, book_router, cart_router, order_router
from bookstore.api.errors import register_error_handlers
from bookstore.api.identity import issue_token
from fastapi import FastAPI
from fastapi.testclient import TestClient


def build_app() -> FastAPI:
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(admin_order_router)
    app.include_router(order_router)
    app.include_router(book_router)
    register_error_handlers(app)
    return app


@pytest.fixture()
def app(gateway, cache, broadcaster):
    return build_app()


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def user_headers():
    return {"Authorization": f"Bearer {issue_token('user-1')}"}


@pytest.fixture()
def other_user_headers():
    return {"Authorization": f"Bearer {issue_token('user-2')}"}


@pytest.fixture()
def admin_headers():
    return {"Authorization": f"Bearer {issue_token('admin-1', role='admin')}"}


@pytest.fixture()
def guest_id():
    return str(uuid4())
