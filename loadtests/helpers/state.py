"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; nothing is shared across users.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    user_id: str
    book_ids: list[str] = field(default_factory=list)
    cart_lines: int = 0
    order_ids: list[str] = field(default_factory=list)
