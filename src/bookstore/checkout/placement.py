"""Order placement — the cart-to-order transaction.

One unit of work re-reads the cart and every book it references, checks all
lines before touching anything, then inserts the order, withdraws stock and
empties the cart. Any error on the way rolls the whole unit back.

Callers hold the owner's cart lock and the stock locks of every book in the
cart while this command runs.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from bookstore.cart.cart import Cart
from bookstore.cart.queries import find_cart
from bookstore.domain import bookstore
from bookstore.errors import EmptyCart, PriceChanged
from bookstore.inventory.book import Book
from bookstore.inventory.ledger import check_lines, total_of
from bookstore.order.order import Order


@bookstore.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    payment_method = String(required=True, max_length=50)
    payment_link = String(max_length=2048)
    payment_order_id = String(max_length=255)
    quoted_total = Float()  # Amount already registered with the gateway, if any


@bookstore.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = find_cart(command.user_id)
        if cart is None or cart.is_empty:
            raise EmptyCart()

        # All lines are checked before the first write
        lines = check_lines(cart.lines())
        total = total_of(lines)
        if command.quoted_total is not None and round(command.quoted_total, 2) != total:
            raise PriceChanged(quoted=round(command.quoted_total, 2), current=total)

        order = Order.place(
            user_id=command.user_id,
            items=[
                {
                    "book_id": str(line.book.id),
                    "title": line.book.title,
                    "image": line.book.image or "",
                    "unit_price": line.book.price,
                    "quantity": line.quantity,
                }
                for line in lines
            ],
            payment_method=command.payment_method,
            payment_link=command.payment_link,
            payment_order_id=command.payment_order_id,
        )
        current_domain.repository_for(Order).add(order)

        book_repo = current_domain.repository_for(Book)
        for line in lines:
            line.book.withdraw(line.quantity)
            book_repo.add(line.book)

        cart.empty(reason="checkout")
        current_domain.repository_for(Cart).add(cart)

        return order
