import itertools

import pytest

from limitbook.comparable_price import MARKET_ORDER_PRICE, ComparablePrice

PRICES = [1249, 1251, 1250, MARKET_ORDER_PRICE]


def test_buy_side_sorts_market_then_highest():
    keys = sorted(ComparablePrice(True, p) for p in PRICES)
    assert [k.price for k in keys] == [MARKET_ORDER_PRICE, 1251, 1250, 1249]


def test_sell_side_sorts_market_then_lowest():
    keys = sorted(ComparablePrice(False, p) for p in PRICES)
    assert [k.price for k in keys] == [MARKET_ORDER_PRICE, 1249, 1250, 1251]


@pytest.mark.parametrize("side", [True, False])
@pytest.mark.parametrize("a,b", list(itertools.product(PRICES, PRICES)))
def test_exactly_one_relation_holds(side, a, b):
    ka, kb = ComparablePrice(side, a), ComparablePrice(side, b)
    relations = [ka < kb, ka == kb, ka > kb]
    assert relations.count(True) == 1
    assert (ka <= kb) == (ka < kb or ka == kb)
    assert (ka >= kb) == (ka > kb or ka == kb)
    assert (ka != kb) == (not ka == kb)


def test_buy_matches():
    bid = ComparablePrice(True, 1250)
    assert bid.matches(1250)
    assert bid.matches(1249)
    assert bid.matches(MARKET_ORDER_PRICE)
    assert not bid.matches(1251)


def test_sell_matches():
    ask = ComparablePrice(False, 1250)
    assert ask.matches(1250)
    assert ask.matches(1251)
    assert ask.matches(MARKET_ORDER_PRICE)
    assert not ask.matches(1249)


def test_market_key_matches_any_price():
    assert ComparablePrice(True, MARKET_ORDER_PRICE).matches(1252)
    assert ComparablePrice(False, MARKET_ORDER_PRICE).matches(1248)


def test_equality_ignores_side():
    assert ComparablePrice(True, 1250) == ComparablePrice(False, 1250)
    assert ComparablePrice(True, 1250) == 1250
    assert 1250 == ComparablePrice(False, 1250)
    assert ComparablePrice(True, 1250) != 1251


def test_reflected_integer_comparisons():
    bid = ComparablePrice(True, 1250)
    assert 1251 < bid
    assert not (1249 < bid)
    assert 1249 > bid
    assert 1250 <= bid
    assert 1250 >= bid


def test_hash_consistent_with_equality():
    assert hash(ComparablePrice(True, 1250)) == hash(ComparablePrice(False, 1250))
    assert 1250 in {ComparablePrice(True, 1250)}


def test_unsupported_comparison_raises():
    with pytest.raises(TypeError):
        ComparablePrice(True, 1250) < "1250"
    assert (ComparablePrice(True, 1250) == "1250") is False


def test_is_market():
    assert ComparablePrice(True, MARKET_ORDER_PRICE).is_market()
    assert not ComparablePrice(False, 1250).is_market()


def test_str():
    assert str(ComparablePrice(True, MARKET_ORDER_PRICE)) == "Buy at Market"
    assert str(ComparablePrice(False, 1250)) == "Sell at 1250"
    assert str(ComparablePrice(True, 1250)).startswith("Buy at ")