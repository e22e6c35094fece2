"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from bookstore.domain import bookstore


@bookstore.event(part_of="Cart")
class CartItemAdded:
    """A book was added to a cart, or its line quantity was increased."""

    __version__ = 1

    owner_id = Identifier(required=True)
    book_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@bookstore.event(part_of="Cart")
class CartItemQuantitySet:
    __version__ = 1

    owner_id = Identifier(required=True)
    book_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@bookstore.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    owner_id = Identifier(required=True)
    book_id = Identifier(required=True)


@bookstore.event(part_of="Cart")
class CartEmptied:
    """Every line was taken out of the cart, at checkout or on clear."""

    __version__ = 1

    owner_id = Identifier(required=True)
    reason = String(max_length=50)
    item_count = Integer(required=True)


@bookstore.event(part_of="Cart")
class GuestCartMerged:
    """A guest's cart was folded into a signed-in user's cart."""

    __version__ = 1

    owner_id = Identifier(required=True)
    guest_id = Identifier(required=True)
    merged = Integer(required=True)
    dropped = Integer(required=True)
