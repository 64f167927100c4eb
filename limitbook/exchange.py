"""A small exchange made of one order book per traded symbol."""

from __future__ import annotations

from typing import Any, Dict

from .order_book import OrderBook

PRECISION = 1
"""Factor applied to a quoted price to obtain the integer book price."""


class ExampleOrder:
    """A plain limit order quoted with a floating-point price."""

    __slots__ = ("is_buy", "quoted_price", "order_qty", "stop_price")

    def __init__(self, is_buy: bool, price: float, order_qty: int) -> None:
        self.is_buy = bool(is_buy)
        self.quoted_price = float(price)
        self.order_qty = order_qty
        self.stop_price = 0

    @property
    def price(self) -> int:
        """The integer price the book works with."""
        return int(self.quoted_price * PRECISION)

    def __repr__(self) -> str:
        side = "buy" if self.is_buy else "sell"
        return f"ExampleOrder({side} {self.order_qty} @ {self.quoted_price})"


class ExampleOrderBook(OrderBook):
    """An order book for one symbol of the exchange."""

    def __init__(self, symbol: str) -> None:
        super().__init__(symbol)


class Exchange:
    """Routes incoming orders to the order book of their symbol."""

    def __init__(self, trade_listener: Any = None, order_book_listener: Any = None) -> None:
        self.trade_listener = trade_listener
        self.order_book_listener = order_book_listener
        self.order_books: Dict[str, ExampleOrderBook] = {}

    def add_order_book(self, symbol: str) -> ExampleOrderBook:
        """Permanently add an order book for ``symbol``; an existing book is kept."""
        book = self.order_books.setdefault(symbol, ExampleOrderBook(symbol))
        book.trade_listener = self.trade_listener
        book.order_book_listener = self.order_book_listener
        return book

    def add_order(self, symbol: str, order: Any) -> None:
        """Hand an incoming order to the book of ``symbol``; unknown symbols are ignored."""
        book = self.order_books.get(symbol)
        if book is not None:
            book.add(order)