"""Cart management — clearing and guest cart merging."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from bookstore.cart.cart import Cart
from bookstore.cart.queries import find_cart, get_cart
from bookstore.domain import bookstore
from bookstore.inventory.ledger import find_book


@bookstore.command(part_of="Cart")
class ClearCart:
    owner_id = Identifier(required=True)


@bookstore.command(part_of="Cart")
class MergeGuestCart:
    """Fold a guest's cart into a user's cart on sign-in and delete the guest cart."""

    owner_id = Identifier(required=True)
    guest_id = Identifier(required=True)


def _delete(cart):
    repo = current_domain.repository_for(Cart)
    # Persist the emptied cart first so no item rows outlive their parent
    cart.empty(reason="cleared")
    repo.add(cart)
    repo._dao.delete(cart)


@bookstore.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        _delete(get_cart(command.owner_id))

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        if str(command.guest_id) == str(command.owner_id):
            return {"merged": 0, "dropped": 0}

        guest_cart = find_cart(command.guest_id)
        if guest_cart is None:
            return {"merged": 0, "dropped": 0}

        guest_lines = []
        for book_id, quantity in guest_cart.lines():
            book = find_book(book_id)
            guest_lines.append((book_id, quantity, book.stock if book else None))

        cart = find_cart(command.owner_id) or Cart.create(owner_id=command.owner_id)
        merged, dropped = cart.absorb(guest_id=command.guest_id, guest_lines=guest_lines)

        current_domain.repository_for(Cart).add(cart)
        _delete(guest_cart)

        return {"merged": merged, "dropped": dropped}
