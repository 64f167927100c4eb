"""The limit order book of one security: matching, stops and event delivery."""

from __future__ import annotations

import logging
import sys
from typing import IO, Any, List, Optional

from .callback import Callback, CallbackType, FillFlags
from .comparable_price import MARKET_ORDER_PRICE, ComparablePrice
from .tracker import Entry, OrderConditions, Tracker, TrackerMap

PRICE_UNCHANGED = 0
"""Value for ``new_price`` in :meth:`OrderBook.replace` that keeps the price."""

SIZE_UNCHANGED = 0
"""Value for ``size_delta`` in :meth:`OrderBook.replace` that keeps the size."""

_log = logging.getLogger(__name__)


class OrderBook:
    """A limit order book that matches orders and reports what happened.

    Orders are objects with ``is_buy``, ``price``, ``order_qty`` and
    ``stop_price`` attributes; they are identified by object identity.

    Events are delivered in two ways once each request has been processed:
    to the ``on_*`` hook methods, which subclasses may override and which by
    default trace the event at debug level through ``logger``, and to the
    optional listeners held in ``order_listener``, ``trade_listener`` and
    ``order_book_listener``.  An exception raised while delivering an event
    is logged through ``logger`` and does not interrupt the book.
    """

    def __init__(self, symbol: str = "unknown") -> None:
        self.symbol = symbol
        self.bids = TrackerMap()
        self.asks = TrackerMap()
        self.stop_bids = TrackerMap()
        self.stop_asks = TrackerMap()
        self.order_listener: Any = None
        self.trade_listener: Any = None
        self.order_book_listener: Any = None
        self.logger: logging.Logger = _log
        self._pending_orders: List[Tracker] = []
        self._callbacks: List[Callback] = []
        self._handling_callbacks = False
        self._market_price = MARKET_ORDER_PRICE

    # ------------------------------------------------------------------
    # Requests

    def add(
        self, order: Any, conditions: OrderConditions = OrderConditions.NO_CONDITIONS
    ) -> bool:
        """Add an order to the book; return True if it traded."""
        matched = False
        if order.order_qty == 0:
            self._callbacks.append(Callback.reject(order, "size must be positive"))
        else:
            inbound = Tracker(order, conditions)
            if _stop_price(order) != 0 and self._add_stop_order(inbound):
                self._callbacks.append(Callback.accept_stop(order))
            else:
                accept = Callback.accept(order)
                self._callbacks.append(accept)
                matched = self._submit_order(inbound)
                accept.quantity = inbound.filled_qty()
                if inbound.immediate_or_cancel() and not inbound.filled():
                    self._callbacks.append(Callback.cancel(order, 0))
            while self._pending_orders:
                self._submit_pending_orders()
            self._callbacks.append(Callback.book_update(self))
        self._callback_now()
        return matched

    def cancel(self, order: Any) -> None:
        """Cancel an order resting in the book or waiting as a stop."""
        market = self.bids if order.is_buy else self.asks
        stops = self.stop_bids if order.is_buy else self.stop_asks
        entry = self._find_on_market(order)
        if entry is not None:
            open_qty = entry[1].open_qty()
            market.remove(entry)
            self._callbacks.append(Callback.cancel(order, open_qty))
            self._callbacks.append(Callback.book_update(self))
        else:
            stop_entry = self._find_in_stop_orders(order) if _stop_price(order) else None
            if stop_entry is not None:
                stops.remove(stop_entry)
                self._callbacks.append(Callback.cancel_stop(order))
                self._callbacks.append(Callback.book_update(self))
            else:
                self._callbacks.append(Callback.cancel_reject(order, "not found"))
        self._callback_now()

    def replace(
        self,
        order: Any,
        size_delta: int = SIZE_UNCHANGED,
        new_price: int = PRICE_UNCHANGED,
    ) -> bool:
        """Change the size and/or price of a resting order; return True if it traded."""
        matched = False
        price = order.price if new_price == PRICE_UNCHANGED else new_price
        market = self.bids if order.is_buy else self.asks
        entry = self._find_on_market(order)
        if entry is None:
            self._callbacks.append(Callback.replace_reject(order, "not found"))
            self._callback_now()
            return False

        tracker = entry[1]
        if size_delta < 0 and tracker.open_qty() < -size_delta:
            size_delta = -tracker.open_qty()
            if size_delta == 0:
                self._callbacks.append(
                    Callback.replace_reject(tracker.order, "order is already filled")
                )
                self._callback_now()
                return False

        self._callbacks.append(
            Callback.replace(order, tracker.open_qty(), size_delta, price)
        )
        new_open_qty = tracker.open_qty() + size_delta
        tracker.change_qty(size_delta)
        market.remove(entry)
        if not new_open_qty:
            self._callbacks.append(Callback.cancel(order, 0))
        else:
            matched = self._add_order(tracker, price)
        while self._pending_orders:
            self._submit_pending_orders()
        self._callbacks.append(Callback.book_update(self))
        self._callback_now()
        return matched

    @property
    def market_price(self) -> int:
        """Price of the last trade, or ``MARKET_ORDER_PRICE`` if none is known."""
        return self._market_price

    def set_market_price(self, price: int) -> None:
        """Set the current market price and release any stops it triggers.

        Released stops are submitted by the next add or replace request.
        """
        old_price = self._market_price
        self._market_price = price
        if price > old_price or old_price == MARKET_ORDER_PRICE:
            self._check_stop_orders(True, price, self.stop_bids)
        elif price < old_price:
            self._check_stop_orders(False, price, self.stop_asks)

    def log(self, out: Optional[IO[str]] = None) -> IO[str]:
        """Write the resting orders to ``out``, asks from worst to best, then bids."""
        stream = sys.stdout if out is None else out
        for key, tracker in reversed(self.asks):
            stream.write(f"  Ask {tracker.open_qty()} @ {key}\n")
        for key, tracker in self.bids:
            stream.write(f"  Bid {tracker.open_qty()} @ {key}\n")
        return stream

    # ------------------------------------------------------------------
    # Hooks for subclasses; by default each traces the event at debug level.

    def on_accept(self, order: Any, quantity: int) -> None:
        """An order was accepted; ``quantity`` is what filled immediately."""
        self.logger.debug("%s: accepted %r, %d filled at once", self.symbol, order, quantity)

    def on_accept_stop(self, order: Any) -> None:
        """A stop order was accepted and is waiting."""
        self.logger.debug("%s: accepted stop %r", self.symbol, order)

    def on_trigger_stop(self, order: Any) -> None:
        """A stop order was triggered and submitted."""
        self.logger.debug("%s: triggered stop %r", self.symbol, order)

    def on_reject(self, order: Any, reason: str) -> None:
        """An order was rejected."""
        self.logger.debug("%s: rejected %r: %s", self.symbol, order, reason)

    def on_fill(
        self,
        order: Any,
        matched_order: Any,
        fill_qty: int,
        fill_price: int,
        inbound_order_filled: bool,
        matched_order_filled: bool,
    ) -> None:
        """The inbound ``order`` traded with ``matched_order``."""
        self.logger.debug(
            "%s: fill %d @ %d between %r (filled=%s) and %r (filled=%s)",
            self.symbol,
            fill_qty,
            fill_price,
            order,
            inbound_order_filled,
            matched_order,
            matched_order_filled,
        )

    def on_cancel(self, order: Any, quantity: int) -> None:
        """An order was cancelled with ``quantity`` still open."""
        self.logger.debug("%s: cancelled %r with %d open", self.symbol, order, quantity)

    def on_cancel_stop(self, order: Any) -> None:
        """A waiting stop order was cancelled."""
        self.logger.debug("%s: cancelled stop %r", self.symbol, order)

    def on_cancel_reject(self, order: Any, reason: str) -> None:
        """A cancel request was rejected."""
        self.logger.debug("%s: cancel of %r rejected: %s", self.symbol, order, reason)

    def on_replace(self, order: Any, current_qty: int, new_qty: int, new_price: int) -> None:
        """An order was replaced."""
        self.logger.debug(
            "%s: replaced %r, qty %d -> %d, price %d",
            self.symbol,
            order,
            current_qty,
            new_qty,
            new_price,
        )

    def on_replace_reject(self, order: Any, reason: str) -> None:
        """A replace request was rejected."""
        self.logger.debug("%s: replace of %r rejected: %s", self.symbol, order, reason)

    def on_trade(self, book: OrderBook, qty: int, price: int) -> None:
        """A trade happened in ``book``."""
        self.logger.debug("%s: trade %d @ %d", book.symbol, qty, price)

    def on_order_book_change(self) -> None:
        """Something in the book changed."""
        self.logger.debug(
            "%s: book changed, %d bids, %d asks", self.symbol, len(self.bids), len(self.asks)
        )

    # ------------------------------------------------------------------
    # Stops

    def _add_stop_order(self, tracker: Tracker) -> bool:
        is_buy = tracker.order.is_buy
        key = ComparablePrice(is_buy, _stop_price(tracker.order))
        is_stopped = key < self._market_price
        if is_stopped:
            (self.stop_bids if is_buy else self.stop_asks).insert(key, tracker)
        return is_stopped

    def _check_stop_orders(self, buy_side: bool, price: int, stops: TrackerMap) -> None:
        until = ComparablePrice(buy_side, price)
        for entry in stops:
            if until > entry[0]:
                break
            self._pending_orders.append(entry[1])
            stops.remove(entry)

    def _submit_pending_orders(self) -> None:
        pending, self._pending_orders = self._pending_orders, []
        for tracker in pending:
            self._submit_order(tracker)
            self._callbacks.append(Callback.trigger_stop(tracker.order))

    # ------------------------------------------------------------------
    # Lookup

    def _find_on_market(self, order: Any) -> Optional[Entry]:
        key = ComparablePrice(order.is_buy, order.price)
        side = self.bids if order.is_buy else self.asks
        return _find(side, key, order)

    def _find_in_stop_orders(self, order: Any) -> Optional[Entry]:
        key = ComparablePrice(order.is_buy, _stop_price(order))
        side = self.stop_bids if order.is_buy else self.stop_asks
        return _find(side, key, order)

    # ------------------------------------------------------------------
    # Matching

    def _submit_order(self, inbound: Tracker) -> bool:
        return self._add_order(inbound, inbound.order.price)

    def _add_order(self, inbound: Tracker, order_price: int) -> bool:
        is_buy = inbound.order.is_buy
        same_side, other_side = (self.bids, self.asks) if is_buy else (self.asks, self.bids)
        deferred_aons: List[Entry] = []
        matched = self._match_order(inbound, order_price, other_side, deferred_aons)
        if inbound.open_qty() and not inbound.immediate_or_cancel():
            same_side.insert(ComparablePrice(is_buy, order_price), inbound)
            if self._check_deferred_aons(deferred_aons, other_side, same_side):
                matched = True
        return matched

    def _check_deferred_aons(
        self, aons: List[Entry], deferred_trackers: TrackerMap, market_trackers: TrackerMap
    ) -> bool:
        result = False
        ignored: List[Entry] = []
        for entry in aons:
            current_price, tracker = entry
            if self._match_order(tracker, current_price.price, market_trackers, ignored):
                result = True
            if tracker.filled() and entry in deferred_trackers:
                deferred_trackers.remove(entry)
        return result

    def _match_order(
        self,
        inbound: Tracker,
        inbound_price: int,
        current_orders: TrackerMap,
        deferred_aons: List[Entry],
    ) -> bool:
        if inbound.all_or_none():
            return self._match_aon_order(inbound, inbound_price, current_orders, deferred_aons)
        return self._match_regular_order(inbound, inbound_price, current_orders, deferred_aons)

    def _match_regular_order(
        self,
        inbound: Tracker,
        inbound_price: int,
        current_orders: TrackerMap,
        deferred_aons: List[Entry],
    ) -> bool:
        matched = False
        inbound_qty = inbound.open_qty()
        for entry in current_orders:
            if inbound.filled():
                break
            current_price, current = entry
            if not current_price.matches(inbound_price):
                break
            current_qty = current.open_qty()
            if current.all_or_none():
                if current_qty <= inbound_qty:
                    traded = self._create_trade(inbound, current)
                    if traded > 0:
                        matched = True
                        current_orders.remove(entry)
                        inbound_qty -= traded
                else:
                    deferred_aons.append(entry)
            else:
                traded = self._create_trade(inbound, current)
                if traded > 0:
                    matched = True
                    if current.filled():
                        current_orders.remove(entry)
                    inbound_qty -= traded
        return matched

    def _match_aon_order(
        self,
        inbound: Tracker,
        inbound_price: int,
        current_orders: TrackerMap,
        deferred_aons: List[Entry],
    ) -> bool:
        matched = False
        inbound_qty = inbound.open_qty()
        deferred_qty = 0
        deferred_matches: List[Entry] = []
        for entry in current_orders:
            if inbound.filled():
                break
            current_price, current = entry
            if not current_price.matches(inbound_price):
                break
            current_qty = current.open_qty()
            if current.all_or_none():
                if current_qty > inbound_qty:
                    deferred_aons.append(entry)
                elif inbound_qty <= current_qty + deferred_qty:
                    needed = inbound_qty - current_qty
                    if needed == self._try_create_deferred_trades(
                        inbound, deferred_matches, needed, needed, current_orders
                    ):
                        inbound_qty -= needed
                        traded = self._create_trade(inbound, current)
                        if traded > 0:
                            inbound_qty -= traded
                            matched = True
                            current_orders.remove(entry)
                else:
                    deferred_qty += current_qty
                    deferred_matches.append(entry)
            elif inbound_qty <= current_qty + deferred_qty:
                traded = self._try_create_deferred_trades(
                    inbound,
                    deferred_matches,
                    inbound_qty,
                    max(inbound_qty - current_qty, 0),
                    current_orders,
                )
                if inbound_qty <= current_qty + traded:
                    traded += self._create_trade(inbound, current)
                    if traded > 0:
                        inbound_qty -= traded
                        matched = True
                    if current.filled():
                        current_orders.remove(entry)
            else:
                deferred_qty += current_qty
                deferred_matches.append(entry)
        return matched

    def _try_create_deferred_trades(
        self,
        inbound: Tracker,
        deferred_matches: List[Entry],
        max_qty: int,
        min_qty: int,
        current_orders: TrackerMap,
    ) -> int:
        fills: List[int] = []
        found_qty = 0
        for _, tracker in deferred_matches:
            if found_qty >= max_qty:
                break
            qty = tracker.open_qty()
            if found_qty + qty > max_qty:
                qty = 0 if tracker.all_or_none() else max_qty - found_qty
            found_qty += qty
            fills.append(qty)

        traded = 0
        if min_qty <= found_qty <= max_qty:
            for entry, fill_qty in zip(deferred_matches, fills):
                if traded >= found_qty:
                    break
                tracker = entry[1]
                traded += self._create_trade(inbound, tracker, fill_qty)
                if tracker.filled() and entry in current_orders:
                    current_orders.remove(entry)
        return traded

    def _create_trade(
        self, inbound: Tracker, current: Tracker, max_quantity: Optional[int] = None
    ) -> int:
        cross_price = current.order.price
        if cross_price == MARKET_ORDER_PRICE:
            cross_price = inbound.order.price
        if cross_price == MARKET_ORDER_PRICE:
            cross_price = self._market_price
        if cross_price == MARKET_ORDER_PRICE:
            return 0
        fill_qty = min(inbound.open_qty(), current.open_qty())
        if max_quantity is not None:
            fill_qty = min(fill_qty, max_quantity)
        if fill_qty > 0:
            inbound.fill(fill_qty)
            current.fill(fill_qty)
            self.set_market_price(cross_price)
            flags = FillFlags.NEITHER_FILLED
            if not inbound.open_qty():
                flags |= FillFlags.INBOUND_FILLED
            if not current.open_qty():
                flags |= FillFlags.MATCHED_FILLED
            self._callbacks.append(
                Callback.fill(inbound.order, current.order, fill_qty, cross_price, flags)
            )
        return fill_qty

    # ------------------------------------------------------------------
    # Event delivery

    def _callback_now(self) -> None:
        # Events raised by listeners while delivering are delivered before returning.
        if self._handling_callbacks:
            return
        self._handling_callbacks = True
        try:
            while self._callbacks:
                working, self._callbacks = self._callbacks, []
                for callback in working:
                    try:
                        self._perform_callback(callback)
                    except Exception:
                        self.logger.exception("Caught exception during callback")
        finally:
            self._handling_callbacks = False

    def _perform_callback(self, cb: Callback) -> None:
        listener = self.order_listener
        kind = cb.type
        if kind is CallbackType.ORDER_FILL:
            inbound_filled = bool(cb.flags & (FillFlags.INBOUND_FILLED | FillFlags.BOTH_FILLED))
            matched_filled = bool(cb.flags & (FillFlags.MATCHED_FILLED | FillFlags.BOTH_FILLED))
            self.on_fill(
                cb.order, cb.matched_order, cb.quantity, cb.price, inbound_filled, matched_filled
            )
            if listener is not None:
                listener.on_fill(cb.order, cb.matched_order, cb.quantity, cb.price)
            self.on_trade(self, cb.quantity, cb.price)
            if self.trade_listener is not None:
                self.trade_listener.on_trade(self, cb.quantity, cb.price)
        elif kind is CallbackType.ORDER_ACCEPT:
            self.on_accept(cb.order, cb.quantity)
            if listener is not None:
                listener.on_accept(cb.order)
        elif kind is CallbackType.ORDER_ACCEPT_STOP:
            self.on_accept_stop(cb.order)
            if listener is not None:
                listener.on_accept(cb.order)
        elif kind is CallbackType.ORDER_TRIGGER_STOP:
            self.on_trigger_stop(cb.order)
            if listener is not None:
                listener.on_trigger_stop(cb.order)
        elif kind is CallbackType.ORDER_REJECT:
            self.on_reject(cb.order, cb.reject_reason)
            if listener is not None:
                listener.on_reject(cb.order, cb.reject_reason)
        elif kind is CallbackType.ORDER_CANCEL:
            self.on_cancel(cb.order, cb.quantity)
            if listener is not None:
                listener.on_cancel(cb.order)
        elif kind is CallbackType.ORDER_CANCEL_STOP:
            self.on_cancel_stop(cb.order)
            if listener is not None:
                listener.on_cancel(cb.order)
        elif kind is CallbackType.ORDER_CANCEL_REJECT:
            self.on_cancel_reject(cb.order, cb.reject_reason)
            if listener is not None:
                listener.on_cancel_reject(cb.order, cb.reject_reason)
        elif kind is CallbackType.ORDER_REPLACE:
            self.on_replace(
                cb.order, cb.order.order_qty, cb.order.order_qty + cb.delta, cb.price
            )
            if listener is not None:
                listener.on_replace(cb.order, cb.delta, cb.price)
        elif kind is CallbackType.ORDER_REPLACE_REJECT:
            self.on_replace_reject(cb.order, cb.reject_reason)
            if listener is not None:
                listener.on_replace_reject(cb.order, cb.reject_reason)
        elif kind is CallbackType.BOOK_UPDATE:
            self.on_order_book_change()
            if self.order_book_listener is not None:
                self.order_book_listener.on_order_book_change(self)
        else:
            raise ValueError(f"Unexpected callback type {kind!r}")


def _stop_price(order: Any) -> int:
    return getattr(order, "stop_price", 0)


def _find(side: TrackerMap, key: ComparablePrice, order: Any) -> Optional[Entry]:
    for entry in side.find_from(key):
        if entry[1].order is order:
            return entry
        if key < entry[0]:
            return None
    return None