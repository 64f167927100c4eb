"""Order trackers and the price-ordered containers that hold them.

An order handed to the book is any object with these attributes:
``is_buy`` (bool), ``price`` (int, 0 for market), ``order_qty`` (int)
and ``stop_price`` (int, 0 when the order is not a stop order).
"""

from __future__ import annotations

import enum
from bisect import bisect_left, bisect_right
from typing import Any, Dict, Iterator, List, Tuple

from .comparable_price import ComparablePrice


class OrderConditions(enum.IntFlag):
    """Special conditions attached to an order."""

    NO_CONDITIONS = 0
    ALL_OR_NONE = 1
    IMMEDIATE_OR_CANCEL = 2
    FILL_OR_KILL = ALL_OR_NONE | IMMEDIATE_OR_CANCEL


class Tracker:
    """Tracks the open and filled quantity of one order in a book."""

    __slots__ = ("order", "conditions", "_open_qty", "_filled_qty")

    def __init__(
        self, order: Any, conditions: OrderConditions = OrderConditions.NO_CONDITIONS
    ) -> None:
        self.order = order
        self.conditions = OrderConditions(conditions)
        self._open_qty = order.order_qty
        self._filled_qty = 0

    def fill(self, qty: int) -> None:
        """Record a fill of ``qty`` units."""
        if qty > self._open_qty:
            raise ValueError("fill size larger than open quantity")
        self._open_qty -= qty
        self._filled_qty += qty

    def change_qty(self, delta: int) -> None:
        """Change the open quantity by ``delta`` (positive or negative)."""
        if delta < 0 and self._open_qty < -delta:
            raise ValueError("size change larger than open quantity")
        self._open_qty += delta

    def open_qty(self) -> int:
        """Quantity still open."""
        return self._open_qty

    def filled_qty(self) -> int:
        """Quantity filled so far."""
        return self._filled_qty

    def filled(self) -> bool:
        """Return True when nothing remains open."""
        return self._open_qty == 0

    def all_or_none(self) -> bool:
        """Return True if the order must be filled in one go."""
        return bool(self.conditions & OrderConditions.ALL_OR_NONE)

    def immediate_or_cancel(self) -> bool:
        """Return True if any unfilled part is cancelled immediately."""
        return bool(self.conditions & OrderConditions.IMMEDIATE_OR_CANCEL)

    def __repr__(self) -> str:
        return (
            f"Tracker(order={self.order!r}, conditions={self.conditions!r}, "
            f"open_qty={self._open_qty}, filled_qty={self._filled_qty})"
        )


Entry = Tuple[ComparablePrice, Tracker]


def _entry_key(entry: Entry) -> ComparablePrice:
    return entry[0]


class TrackerMap:
    """Trackers ordered by price, most liquid first, first-come first within a price.

    Entries are ``(ComparablePrice, Tracker)`` tuples.  Entries may be removed
    while the map is being iterated; removed entries are then skipped.
    """

    def __init__(self) -> None:
        self._entries: List[Entry] = []
        self._members: Dict[int, Entry] = {}

    def insert(self, key: ComparablePrice, tracker: Tracker) -> Entry:
        """Add ``tracker`` at ``key`` after any trackers with an equal key."""
        entry = (key, tracker)
        position = bisect_right(self._entries, key, key=_entry_key)
        self._entries.insert(position, entry)
        self._members[id(tracker)] = entry
        return entry

    def _index_of(self, entry: Entry) -> int:
        key, tracker = entry
        low = bisect_left(self._entries, key, key=_entry_key)
        high = bisect_right(self._entries, key, key=_entry_key)
        for index in range(low, high):
            if self._entries[index][1] is tracker:
                return index
        for index, (_, candidate) in enumerate(self._entries):
            if candidate is tracker:
                return index
        raise KeyError("entry not in map")

    def remove(self, entry: Entry) -> None:
        """Remove an entry previously returned by this map."""
        if entry not in self:
            raise KeyError("entry not in map")
        del self._entries[self._index_of(entry)]
        del self._members[id(entry[1])]

    def _live(self, snapshot: List[Entry]) -> Iterator[Entry]:
        for entry in snapshot:
            if entry in self:
                yield entry

    def find_from(self, key: ComparablePrice) -> Iterator[Entry]:
        """Yield entries from the first one whose key equals ``key`` to the end.

        Yields nothing when no entry has that key.
        """
        start = bisect_left(self._entries, key, key=_entry_key)
        if start < len(self._entries) and self._entries[start][0] == key:
            yield from self._live(self._entries[start:])

    def __iter__(self) -> Iterator[Entry]:
        return self._live(list(self._entries))

    def __reversed__(self) -> Iterator[Entry]:
        return self._live(list(reversed(self._entries)))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry: object) -> bool:
        if not isinstance(entry, tuple) or len(entry) != 2:
            return False
        member = self._members.get(id(entry[1]))
        return member is not None and member[1] is entry[1]

    def __repr__(self) -> str:
        return f"TrackerMap({self._entries!r})"