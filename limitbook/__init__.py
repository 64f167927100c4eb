"""Limit order book matching engine with stop, all-or-none and immediate-or-cancel orders, and a simulated exchange."""

__version__ = "0.1.0"

__all__ = [
    "callback",
    "comparable_price",
    "depth_level",
    "exchange",
    "order_book",
    "simulator",
    "tracker",
]