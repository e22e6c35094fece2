from bookstore.api.routes import admin_order_router, book_router, cart_router, order_router

__all__ = ["admin_order_router", "book_router", "cart_router", "order_router"]
