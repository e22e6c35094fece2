"""Bookstore FastAPI application.

Serves the cart, checkout, order and catalogue endpoints. Every request runs
inside the bookstore domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager
from uuid import uuid4

from bookstore.domain import bookstore
from bookstore.utils.logging import bind_request, configure_logging, unbind_request
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it. PROTEAN_ENV selects
# the config overlay and the log level.
configure_logging()
bookstore.init()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    from bookstore.notifications.dispatch import reset_dispatcher

    # Let in-flight order broadcasts finish before the worker exits
    reset_dispatcher()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Bookstore API",
    description="Online bookstore — carts, checkout with inventory reservation, orders",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the bookstore domain context for each request and tag its log lines."""
    request_id = request.headers.get("x-request-id") or uuid4().hex[:16]
    bind_request(request_id=request_id, method=request.method, path=request.url.path)
    try:
        with bookstore.domain_context():
            response = await call_next(request)
    finally:
        unbind_request()
    response.headers["x-request-id"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from bookstore.api import admin_order_router, book_router, cart_router, order_router  # noqa: E402
from bookstore.api.errors import register_error_handlers  # noqa: E402

app.include_router(cart_router)
app.include_router(admin_order_router)
app.include_router(order_router)
app.include_router(book_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    from bookstore.config import get_settings

    settings = get_settings()
    return JSONResponse(
        content={
            "status": "ok",
            "domain": bookstore.name,
            "environment": settings.environment,
            "paymentGateway": settings.payment_gateway,
            "cacheBackend": settings.cache_backend,
        }
    )
