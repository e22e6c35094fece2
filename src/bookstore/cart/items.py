"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from bookstore.cart.cart import Cart
from bookstore.cart.queries import find_cart, get_cart
from bookstore.domain import bookstore
from bookstore.inventory.ledger import get_book


@bookstore.command(part_of="Cart")
class AddToCart:
    owner_id = Identifier(required=True)
    book_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@bookstore.command(part_of="Cart")
class SetCartItemQuantity:
    """Set a line's quantity. Zero or less removes the line.

    A positive quantity needs the book to still exist: a line whose book was
    removed from the catalogue raises BookNotFound and can only be removed.
    """

    owner_id = Identifier(required=True)
    book_id = Identifier(required=True)
    quantity = Integer(required=True)


@bookstore.command(part_of="Cart")
class RemoveFromCart:
    owner_id = Identifier(required=True)
    book_id = Identifier(required=True)


@bookstore.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        book = get_book(command.book_id)

        cart = find_cart(command.owner_id) or Cart.create(owner_id=command.owner_id)
        cart.add_item(book_id=str(book.id), quantity=command.quantity, available=book.stock)
        current_domain.repository_for(Cart).add(cart)

    @handle(SetCartItemQuantity)
    def set_cart_item_quantity(self, command):
        cart = get_cart(command.owner_id)

        if command.quantity <= 0:
            cart.remove_item(command.book_id)
        else:
            book = get_book(command.book_id)
            cart.set_quantity(book_id=command.book_id, quantity=command.quantity, available=book.stock)

        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = get_cart(command.owner_id)
        cart.remove_item(command.book_id)
        current_domain.repository_for(Cart).add(cart)
