"""Feeds random orders for a fixed list of securities into an exchange."""

from __future__ import annotations

import argparse
import random
import sys
import time
from dataclasses import dataclass
from itertools import count as _counter
from typing import Any, List, Optional, Sequence, Tuple

from .exchange import ExampleOrder, Exchange


@dataclass(frozen=True)
class SecurityInfo:
    """A traded symbol and its reference price."""

    symbol: str
    ref_price: float


_SECURITIES = (
    ("AAPL", 436.36), ("ADBE", 45.06), ("ADI", 43.93), ("ADP", 67.09),
    ("ADSK", 38.34), ("AKAM", 43.65), ("ALTR", 31.90), ("ALXN", 96.28),
    ("AMAT", 14.623), ("AMGN", 104.88), ("AMZN", 247.74), ("ATVI", 14.69),
    ("AVGO", 31.38), ("BBBY", 68.81), ("BIDU", 85.09), ("BIIB", 214.89),
    ("BMC", 45.325), ("BRCM", 35.60), ("CA", 26.97), ("CELG", 116.901),
    ("CERN", 95.24), ("CHKP", 46.43), ("CHRW", 58.89), ("CMCSA", 41.99),
    ("COST", 108.16), ("CSCO", 20.425), ("CTRX", 57.419), ("CTSH", 63.62),
    ("CTXS", 62.38), ("DELL", 13.33), ("DISCA", 78.18), ("DLTR", 47.91),
    ("DTV", 56.56), ("EBAY", 52.215), ("EQIX", 217.015), ("ESRX", 59.26),
    ("EXPD", 35.03), ("EXPE", 55.15), ("FAST", 48.13), ("FB", 27.52),
    ("FFIV", 74.11), ("FISV", 87.58), ("FOSL", 95.09), ("GILD", 50.06),
    ("GOLD", 78.681), ("GOOG", 817.08), ("GRMN", 33.33), ("HSIC", 89.44),
    ("INTC", 23.9673), ("INTU", 60.15), ("ISRG", 492.3358), ("KLAC", 53.83),
    ("KRFT", 50.9001), ("LBTYA", 73.99), ("LIFE", 73.59), ("LINTA", 21.44),
    ("LLTC", 36.25), ("MAT", 44.99), ("MCHP", 36.1877), ("MDLZ", 31.58),
    ("MNST", 55.75), ("MSFT", 32.75), ("MU", 9.19), ("MXIM", 30.59),
    ("MYL", 28.90), ("NTAP", 34.17), ("NUAN", 18.89), ("NVDA", 13.7761),
    ("NWSA", 31.12), ("ORCL", 33.19), ("ORLY", 107.58), ("PAYX", 36.32),
    ("PCAR", 49.52), ("PCLN", 697.62), ("PRGO", 119.00), ("QCOM", 61.925),
    ("REGN", 242.49), ("ROST", 65.20), ("SBAC", 78.76), ("SBUX", 60.07),
    ("SHLD", 49.989), ("SIAL", 77.95), ("SIRI", 3.36), ("SNDK", 51.23),
    ("SPLS", 13.07), ("SRCL", 108.15), ("STX", 36.82), ("SYMC", 24.325),
    ("TXN", 36.28), ("VIAB", 66.295), ("VMED", 49.56), ("VOD", 30.49),
    ("VRSK", 61.1728), ("VRTX", 77.255), ("WDC", 54.76), ("WFM", 89.35),
    ("WYNN", 136.33), ("XLNX", 37.59), ("XRAY", 42.26), ("YHOO", 24.32),
)


def create_securities() -> List[SecurityInfo]:
    """Return the securities traded by the simulator."""
    return [SecurityInfo(symbol, price) for symbol, price in _SECURITIES]


def populate_exchange(exchange: Exchange, securities: Sequence[SecurityInfo]) -> None:
    """Add an order book to ``exchange`` for every security."""
    for security in securities:
        exchange.add_order_book(security.symbol)


def random_order(
    securities: Sequence[SecurityInfo], rng: random.Random
) -> Tuple[str, ExampleOrder]:
    """Pick a security and build a random order priced within 2% of its reference."""
    security = securities[rng.randrange(len(securities))]
    is_buy = rng.randrange(2) != 0
    price_base = int(security.ref_price * 100)
    delta_range = price_base // 50
    delta = rng.randrange(delta_range) - delta_range // 2
    price = (price_base + delta) / 100
    qty = (rng.randrange(10) + 1) * 100
    return security.symbol, ExampleOrder(is_buy, price, qty)


def generate_orders(
    exchange: Exchange,
    securities: Sequence[SecurityInfo],
    rng: Optional[random.Random] = None,
    count: Optional[int] = None,
    delay: float = 1.0,
) -> None:
    """Send ``count`` random orders (forever if None), pausing ``delay`` seconds after each."""
    if rng is None:
        rng = random.Random(int(time.time()))
    steps = _counter() if count is None else range(count)
    for _ in steps:
        symbol, order = random_order(securities, rng)
        exchange.add_order(symbol, order)
        if delay > 0:
            time.sleep(delay)


class _PrintingListener:
    def __init__(self, out: Any) -> None:
        self._out = out

    def on_trade(self, book: Any, qty: int, price: int) -> None:
        print(f"{book.symbol}: traded {qty} @ {price}", file=self._out)

    def on_order_book_change(self, book: Any) -> None:
        print(
            f"{book.symbol}: {len(book.bids)} bids, {len(book.asks)} asks",
            file=self._out,
        )


def _non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return value


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the order generator and print what happens on each book."""
    parser = argparse.ArgumentParser(description="Generate random orders for an exchange.")
    parser.add_argument("--count", type=_non_negative_int, default=None,
                        help="number of orders to send (default: run forever)")
    parser.add_argument("--delay", type=float, default=1.0,
                        help="seconds to wait after each order")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for the random generator (default: current time)")
    args = parser.parse_args(argv)

    try:
        listener = _PrintingListener(sys.stdout)
        exchange = Exchange(listener, listener)
        securities = create_securities()
        populate_exchange(exchange, securities)
        seed = args.seed if args.seed is not None else int(time.time())
        generate_orders(exchange, securities, random.Random(seed), args.count, args.delay)
    except KeyboardInterrupt:
        return 0
    except Exception as exc:  # report anything at the top level
        print(f"Exception caught at main level: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())