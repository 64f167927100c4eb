"""A single price level of an aggregated order book."""

from __future__ import annotations

from .comparable_price import INVALID_LEVEL_PRICE


class DepthLevel:
    """Orders at one price, aggregated into a count and a total quantity."""

    __slots__ = ("price", "order_count", "aggregate_qty", "is_excess", "last_change")

    def __init__(self) -> None:
        self.price = INVALID_LEVEL_PRICE
        self.order_count = 0
        self.aggregate_qty = 0
        self.is_excess = False
        self.last_change = 0

    def init(self, price: int, is_excess: bool) -> None:
        """Reset the level to an empty level at ``price``."""
        self.price = price
        self.order_count = 0
        self.aggregate_qty = 0
        self.is_excess = is_excess

    def assign(self, other: DepthLevel) -> DepthLevel:
        """Copy another level's values into this one, keeping ``is_excess``.

        The change stamp is copied only when the other level is valid.
        """
        self.price = other.price
        self.order_count = other.order_count
        self.aggregate_qty = other.aggregate_qty
        if other.price != INVALID_LEVEL_PRICE:
            self.last_change = other.last_change
        return self

    def add_order(self, qty: int) -> None:
        """Add an order with open quantity ``qty``."""
        self.order_count += 1
        self.aggregate_qty += qty

    def increase_qty(self, qty: int) -> None:
        """Increase the quantity of existing orders."""
        self.aggregate_qty += qty

    def decrease_qty(self, qty: int) -> None:
        """Decrease the quantity of existing orders."""
        self.aggregate_qty -= qty

    def set(self, price: int, qty: int, order_count: int, last_change: int = 0) -> None:
        """Overwrite all values of the level."""
        self.price = price
        self.aggregate_qty = qty
        self.order_count = order_count
        self.last_change = last_change

    def close_order(self, qty: int) -> bool:
        """Remove a cancelled or filled order; return True if the level is now empty."""
        if self.order_count == 0:
            raise RuntimeError("DepthLevel.close_order: order count too low")
        if self.order_count == 1:
            self.order_count = 0
            self.aggregate_qty = 0
            return True
        self.order_count -= 1
        if self.aggregate_qty < qty:
            raise RuntimeError("DepthLevel.close_order: level quantity too low")
        self.aggregate_qty -= qty
        return False

    def changed_since(self, last_published_change: int) -> bool:
        """Return True if the level changed after the given stamp."""
        return self.last_change > last_published_change

    def __repr__(self) -> str:
        return (
            f"DepthLevel(price={self.price}, order_count={self.order_count}, "
            f"aggregate_qty={self.aggregate_qty}, is_excess={self.is_excess}, "
            f"last_change={self.last_change})"
        )