"""Prices that know which side of the market they are on."""

from __future__ import annotations

from typing import Union

MARKET_ORDER_PRICE = 0
"""Price value that marks a market order."""

INVALID_LEVEL_PRICE = 0
"""Price of a depth level that holds no orders."""

MARKET_ORDER_ASK_SORT_PRICE = 0
"""Price used to sort market orders on the ask side."""


class ComparablePrice:
    """A price bound to one side of the market.

    Ordering follows how easily the price finds a counterpart: market
    prices come first, then the highest bids or the lowest asks.  Sorting
    prices of one side with ``<`` therefore puts the most liquid first.
    Comparisons with plain integers are supported in both directions.
    Use :meth:`matches` to compare against a price on the opposite side.
    """

    __slots__ = ("_price", "_buy_side")

    def __init__(self, buy_side: bool, price: int) -> None:
        self._buy_side = bool(buy_side)
        self._price = price

    @property
    def price(self) -> int:
        """The raw price, or ``MARKET_ORDER_PRICE`` for a market order."""
        return self._price

    @property
    def buy_side(self) -> bool:
        """True when this price belongs to the buy side."""
        return self._buy_side

    def is_market(self) -> bool:
        """Return True if this is a market price."""
        return self._price == MARKET_ORDER_PRICE

    def matches(self, rhs: int) -> bool:
        """Return True if a trade is possible against ``rhs`` on the other side."""
        if self._price == rhs:
            return True
        if self._buy_side:
            return rhs < self._price or self._price == MARKET_ORDER_PRICE
        return self._price < rhs or rhs == MARKET_ORDER_PRICE

    @staticmethod
    def _other_price(other: object) -> Union[int, None]:
        if isinstance(other, ComparablePrice):
            return other._price
        if isinstance(other, int) and not isinstance(other, bool):
            return other
        return None

    def __lt__(self, other: object) -> bool:
        rhs = self._other_price(other)
        if rhs is None:
            return NotImplemented
        if self._price == MARKET_ORDER_PRICE:
            return rhs != MARKET_ORDER_PRICE
        if rhs == MARKET_ORDER_PRICE:
            return False
        if self._buy_side:
            return rhs < self._price
        return self._price < rhs

    def __gt__(self, other: object) -> bool:
        rhs = self._other_price(other)
        if rhs is None:
            return NotImplemented
        if self._price == MARKET_ORDER_PRICE:
            return False
        if rhs == MARKET_ORDER_PRICE:
            return True
        return rhs > self._price if self._buy_side else self._price > rhs

    def __le__(self, other: object) -> bool:
        rhs = self._other_price(other)
        if rhs is None:
            return NotImplemented
        return self.__lt__(rhs) or self._price == rhs

    def __ge__(self, other: object) -> bool:
        rhs = self._other_price(other)
        if rhs is None:
            return NotImplemented
        return self.__gt__(rhs) or self._price == rhs

    def __eq__(self, other: object) -> bool:
        rhs = self._other_price(other)
        if rhs is None:
            return NotImplemented
        return self._price == rhs

    def __ne__(self, other: object) -> bool:
        rhs = self._other_price(other)
        if rhs is None:
            return NotImplemented
        return self._price != rhs

    def __hash__(self) -> int:
        return hash(self._price)

    def __str__(self) -> str:
        side = "Buy at " if self._buy_side else "Sell at "
        return side + ("Market" if self.is_market() else str(self._price))

    def __repr__(self) -> str:
        return f"ComparablePrice(buy_side={self._buy_side!r}, price={self._price!r})"