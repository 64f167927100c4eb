import random

import pytest

from limitbook.exchange import Exchange
from limitbook.simulator import (
    SecurityInfo,
    create_securities,
    generate_orders,
    main,
    populate_exchange,
    random_order,
)


class Recorder:
    def __init__(self):
        self.trades = []
        self.changes = []

    def on_trade(self, book, qty, price):
        self.trades.append((book.symbol, qty, price))

    def on_order_book_change(self, book):
        self.changes.append(book.symbol)


def test_create_securities_contents():
    securities = create_securities()
    assert len(securities) == 100
    assert securities[0] == SecurityInfo("AAPL", 436.36)
    assert securities[-1] == SecurityInfo("YHOO", 24.32)
    assert len({s.symbol for s in securities}) == len(securities)


def test_populate_exchange_adds_every_book():
    securities = create_securities()
    exchange = Exchange()
    populate_exchange(exchange, securities)
    assert set(exchange.order_books) == {s.symbol for s in securities}


def test_random_order_within_bounds():
    securities = create_securities()
    by_symbol = {s.symbol: s.ref_price for s in securities}
    rng = random.Random(7)
    for _ in range(500):
        symbol, order = random_order(securities, rng)
        ref = by_symbol[symbol]
        assert order.order_qty % 100 == 0
        assert 100 <= order.order_qty <= 1000
        assert abs(order.quoted_price - ref) <= ref * 0.02 + 0.01
        assert order.price == int(order.quoted_price)


def test_random_order_is_reproducible():
    securities = create_securities()
    first = random_order(securities, random.Random(42))
    second = random_order(securities, random.Random(42))
    assert first[0] == second[0]
    assert first[1].quoted_price == second[1].quoted_price
    assert first[1].is_buy == second[1].is_buy
    assert first[1].order_qty == second[1].order_qty


def test_random_order_single_security_uses_it():
    securities = [SecurityInfo("SIRI", 3.36)]
    symbol, order = random_order(securities, random.Random(1))
    assert symbol == "SIRI"
    assert 3.29 <= order.quoted_price <= 3.43


def test_generate_orders_sends_count_orders():
    securities = create_securities()[:3]
    recorder = Recorder()
    exchange = Exchange(recorder, recorder)
    populate_exchange(exchange, securities)
    generate_orders(exchange, securities, random.Random(3), count=25, delay=0)
    assert len(recorder.changes) == 25
    resting = sum(len(b.bids) + len(b.asks) for b in exchange.order_books.values())
    assert 0 < resting <= 25


def test_main_runs_and_prints(capsys):
    assert main(["--count", "4", "--delay", "0", "--seed", "5"]) == 0
    out = capsys.readouterr().out
    assert len([line for line in out.splitlines() if "bids" in line]) == 4


def test_main_rejects_bad_count():
    with pytest.raises(SystemExit):
        main(["--count", "-1"])