# limitbook

A price-time priority limit order book for a single security, with a small
simulated exchange built on top of it. No dependencies beyond the standard
library.

Features:

- Limit and market orders (a price of `0` means "at market").
- Stop orders, held aside until the market price reaches their stop price.
- All-or-none and immediate-or-cancel conditions, and their combination,
  fill-or-kill (`OrderConditions` in `limitbook.tracker`).
- Cancel and replace, with size and price changes that re-run matching.
- Event hooks on `OrderBook` and optional listener objects.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Orders

Orders are any objects that expose `is_buy` (bool), `price` (int, `0` for a
market order), `order_qty` (int) and `stop_price` (int, `0` for a non-stop
order). The book identifies orders by object identity.
`ExampleOrder` from `limitbook.exchange` is a ready-made one; it takes a
floating-point quoted price and exposes it to the book as an integer `price`.

## Using the order book

```python
from limitbook.order_book import OrderBook
from limitbook.tracker import OrderConditions
from limitbook.exchange import ExampleOrder


class PrintingBook(OrderBook):
    def on_fill(self, order, matched_order, fill_qty, fill_price,
                inbound_order_filled, matched_order_filled):
        print(f"filled {fill_qty} @ {fill_price}")


book = PrintingBook("ACME")
book.add(ExampleOrder(False, 1250, 100))
book.add(ExampleOrder(True, 1250, 300), OrderConditions.IMMEDIATE_OR_CANCEL)
# prints "filled 100 @ 1250"; the unfilled 200 is cancelled
```

The main operations of `OrderBook`:

- `add(order, conditions)` adds an order and returns `True` if it traded.
  An order with a zero quantity is rejected.
- `cancel(order)` removes a resting order or a waiting stop order; an order
  that is not found produces a cancel reject.
- `replace(order, size_delta, new_price)` changes the open size and/or the
  price and matches the order again; it returns `True` if it traded.
  `SIZE_UNCHANGED` and `PRICE_UNCHANGED` keep a value as it is.
- `set_market_price(price)` sets the market price and releases any stop
  orders it triggers; released stops are submitted by the next `add` or
  `replace`. `market_price` holds the price of the last trade.
- `log(out)` writes the resting asks (worst to best) and then the bids to a
  text stream, standard output by default.

The resting orders are in `bids`, `asks`, `stop_bids` and `stop_asks`, each a
`TrackerMap` of `(ComparablePrice, Tracker)` entries in matching order.

### Events

After each request the book delivers what happened, in order:

- to its own `on_accept`, `on_accept_stop`, `on_trigger_stop`, `on_reject`,
  `on_fill`, `on_cancel`, `on_cancel_stop`, `on_cancel_reject`, `on_replace`,
  `on_replace_reject`, `on_trade` and `on_order_book_change` methods, which
  trace the event at debug level and are meant to be overridden;
- to `order_listener`, if set, through `on_accept(order)`,
  `on_fill(order, matched_order, qty, price)`, `on_trigger_stop(order)`,
  `on_reject(order, reason)`, `on_cancel(order)`,
  `on_cancel_reject(order, reason)`, `on_replace(order, size_delta, price)`
  and `on_replace_reject(order, reason)`;
- to `trade_listener`, if set, through `on_trade(book, qty, price)`;
- to `order_book_listener`, if set, through `on_order_book_change(book)`.

An exception raised while delivering an event is logged through the book's
`logger` and does not stop the book.

### Prices

Prices are integers. `ComparablePrice` in `limitbook.comparable_price` orders
prices of one side by how easily they match: market prices first, then the
highest bids or the lowest asks. `matches(price)` tells whether a trade is
possible against a price on the other side.

## The exchange simulator

`limitbook.exchange.Exchange` keeps one `ExampleOrderBook` per symbol and
hands its `trade_listener` and `order_book_listener` to every book it
creates. Orders for symbols without a book are ignored.

`limitbook.simulator` builds such an exchange for a fixed list of securities
(`create_securities`, `populate_exchange`) and sends it random orders priced
within 2% of each security's reference price (`random_order`,
`generate_orders`).

Run it from the command line:

```
limitbook-simulate --count 20 --delay 0 --seed 42
```

Options:

- `--count N`: number of orders to send; without it the simulator runs until
  interrupted.
- `--delay SECONDS`: pause after each order (default `1.0`).
- `--seed N`: seed for the random generator (default: the current time).

Each trade and each book change is printed to standard output.

## What it does not do

- `DepthLevel` in `limitbook.depth_level` and `BboListener` in
  `limitbook.callback` are building blocks only: no order book here keeps
  aggregated depth levels or reports best-bid-and-offer changes.
- The simulator prints to the terminal; it does not publish a market data
  feed over the network or store anything.