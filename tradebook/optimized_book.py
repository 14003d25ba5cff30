"""Aggregated order book that reports level changes for each order operation.

Bid levels are kept in ascending price order and ask levels in descending
price order, so the best level of either side is always the last entry.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, replace
from enum import Enum

from tradebook.pool import LevelPool


@dataclass
class Symbol:
    """Tradable instrument: numeric id and short name."""

    id: int = 0
    name: str = ""


class LevelType(Enum):
    BID = 0
    ASK = 1


@dataclass
class Level:
    """Aggregated state of one price level."""

    type: LevelType = LevelType.BID
    price: int = 0
    volume: int = 0
    orders: int = 0


class UpdateType(Enum):
    ADD = 0
    UPDATE = 1
    DELETE = 2


@dataclass(frozen=True)
class LevelUpdate:
    """Change made to a price level, with a snapshot of the level."""

    type: UpdateType
    update: Level
    top: bool


class OrderSide(Enum):
    BUY = 0
    SELL = 1


@dataclass
class Order:
    """Resting order together with the pool index of its price level."""

    id: int = 0
    symbol: int = 0
    side: OrderSide = OrderSide.BUY
    price: int = 0
    quantity: int = 0
    level: int = 0


@dataclass(frozen=True)
class PriceLevel:
    """Entry of a side of the book: price and the pool index of its level."""

    price: int
    level: int


def _bid_key(entry: PriceLevel) -> int:
    return entry.price


def _ask_key(entry: PriceLevel) -> int:
    return -entry.price


class OrderBook:
    """Bid and ask price levels stored in a shared level pool."""

    def __init__(self, pool: LevelPool[Level]) -> None:
        self._pool = pool
        self._bids: list[PriceLevel] = []
        self._asks: list[PriceLevel] = []

    def __bool__(self) -> bool:
        return not self.empty()

    def __len__(self) -> int:
        return len(self._bids) + len(self._asks)

    def empty(self) -> bool:
        return not self._bids and not self._asks

    def bids(self) -> tuple[PriceLevel, ...]:
        """Bid levels in ascending price order; the best is last."""
        return tuple(self._bids)

    def asks(self) -> tuple[PriceLevel, ...]:
        """Ask levels in descending price order; the best is last."""
        return tuple(self._asks)

    def best_bid(self) -> Level | None:
        return self._pool[self._bids[-1].level] if self._bids else None

    def best_ask(self) -> Level | None:
        return self._pool[self._asks[-1].level] if self._asks else None

    def _side(self, side: OrderSide) -> tuple[list[PriceLevel], int, object]:
        """Levels of a side, the sort sign and the sort key."""
        if side is OrderSide.BUY:
            return self._bids, 1, _bid_key
        return self._asks, -1, _ask_key

    def _locate(self, side: OrderSide, price: int) -> tuple[list[PriceLevel], int, bool]:
        levels, sign, key = self._side(side)
        position = bisect_left(levels, sign * price, key=key)
        found = position < len(levels) and levels[position].price == price
        return levels, position, found

    def _is_top(self, order: Order) -> bool:
        levels = self._bids if order.side is OrderSide.BUY else self._asks
        return bool(levels) and levels[-1].level == order.level

    def _find_level(self, order: Order) -> tuple[int, UpdateType]:
        levels, position, found = self._locate(order.side, order.price)
        if found:
            return levels[position].level, UpdateType.UPDATE

        index = self._pool.allocate()
        level = self._pool[index]
        level.type = LevelType.BID if order.side is OrderSide.BUY else LevelType.ASK
        level.price = order.price
        level.volume = 0
        level.orders = 0
        levels.insert(position, PriceLevel(order.price, index))
        return index, UpdateType.ADD

    def _delete_level(self, order: Order) -> None:
        levels, position, found = self._locate(order.side, order.price)
        if found:
            del levels[position]
        self._pool.free(order.level)

    def add_order(self, order: Order) -> LevelUpdate:
        """Add the order to the level at its price and report the change."""
        index, kind = self._find_level(order)
        level = self._pool[index]
        level.volume += order.quantity
        level.orders += 1
        order.level = index
        return LevelUpdate(kind, replace(level), self._is_top(order))

    def _take(self, order: Order, quantity: int, remove_order: bool) -> LevelUpdate:
        level = self._pool[order.level]
        level.volume -= quantity
        if remove_order:
            level.orders -= 1
        update = LevelUpdate(UpdateType.UPDATE, replace(level), self._is_top(order))
        if level.volume == 0:
            self._delete_level(order)
            update = replace(update, type=UpdateType.DELETE)
        return update

    def reduce_order(self, order: Order, quantity: int) -> LevelUpdate:
        """Take ``quantity`` off the order's level.

        The order's own quantity is expected to be reduced already; the level
        loses one order when that quantity has reached zero.
        """
        return self._take(order, quantity, order.quantity == 0)

    def delete_order(self, order: Order) -> LevelUpdate:
        """Take the order's whole quantity and the order off its level."""
        return self._take(order, order.quantity, True)

    def release(self) -> None:
        """Return every level of this book to the pool and clear it."""
        for entry in (*self._bids, *self._asks):
            self._pool.free(entry.level)
        self._bids.clear()
        self._asks.clear()