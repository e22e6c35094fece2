"""Cart reads — the live cart view joined against current book data."""

from dataclasses import dataclass, field

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from bookstore.cart.cart import Cart
from bookstore.errors import CartNotFound
from bookstore.inventory.ledger import find_book


@dataclass(frozen=True)
class CartItemView:
    book_id: str
    title: str
    author: str | None
    image: str
    price: float
    stock: int
    quantity: int

    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)


@dataclass(frozen=True)
class CartSummary:
    items: list[CartItemView] = field(default_factory=list)

    @property
    def total(self) -> float:
        return round(sum(item.subtotal for item in self.items), 2)

    @property
    def is_empty(self) -> bool:
        return not self.items


def find_cart(owner_id) -> Cart | None:
    try:
        return current_domain.repository_for(Cart).get(str(owner_id))
    except ObjectNotFoundError:
        return None


def get_cart(owner_id) -> Cart:
    cart = find_cart(owner_id)
    if cart is None:
        raise CartNotFound(str(owner_id))
    return cart


def view_cart(owner_id) -> CartSummary:
    """Price a cart at current book prices.

    Lines whose book has since been removed are left out of the view. A
    missing cart reads as an empty one.
    """
    cart = find_cart(owner_id)
    if cart is None:
        return CartSummary()

    views = []
    for book_id, quantity in cart.lines():
        book = find_book(book_id)
        if book is None:
            continue
        views.append(
            CartItemView(
                book_id=str(book.id),
                title=book.title,
                author=book.author,
                image=book.image or "",
                price=book.price,
                stock=book.stock,
                quantity=quantity,
            )
        )
    return CartSummary(items=views)
