"""Minimal aggregated order book keyed by signed prices.

Buy orders carry positive prices and sell orders negative ones, so a single
ascending ordering puts the best level of either side at the end.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass

from tradebook.pool import LevelPool


@dataclass
class Level:
    """Aggregated volume at one signed price."""

    price: int = 0
    volume: int = 0


@dataclass
class Order:
    """Resting order: its symbol, remaining quantity and pool level index."""

    symbol: int = 0
    quantity: int = 0
    level: int = 0


@dataclass(frozen=True)
class PriceLevel:
    """Entry of a side of the book: price and the pool index of its level."""

    price: int
    level: int


def _price_key(entry: PriceLevel) -> int:
    return entry.price


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
        """Ask levels in ascending signed price order; the best is last."""
        return tuple(self._asks)

    def best_bid(self) -> Level | None:
        return self._pool[self._bids[-1].level] if self._bids else None

    def best_ask(self) -> Level | None:
        return self._pool[self._asks[-1].level] if self._asks else None

    def _side(self, price: int) -> list[PriceLevel]:
        return self._bids if price > 0 else self._asks

    def _find_level(self, price: int) -> int:
        levels = self._side(price)
        position = bisect_left(levels, price, key=_price_key)
        if position < len(levels) and levels[position].price == price:
            return levels[position].level

        index = self._pool.allocate()
        level = self._pool[index]
        level.price = price
        level.volume = 0
        levels.insert(position, PriceLevel(price, index))
        return index

    def _delete_level(self, order: Order) -> None:
        price = self._pool[order.level].price
        levels = self._side(price)
        position = bisect_left(levels, price, key=_price_key)
        if position < len(levels) and levels[position].price == price:
            del levels[position]
        self._pool.free(order.level)

    def add_order(self, order: Order, price: int) -> None:
        """Add the order's quantity to the level at ``price``."""
        index = self._find_level(price)
        self._pool[index].volume += order.quantity
        order.level = index

    def reduce_order(self, order: Order, quantity: int) -> None:
        """Take ``quantity`` off the order's level, dropping it when empty."""
        level = self._pool[order.level]
        level.volume -= quantity
        if level.volume == 0:
            self._delete_level(order)

    def delete_order(self, order: Order) -> None:
        """Take the order's whole quantity off its level."""
        level = self._pool[order.level]
        level.volume -= order.quantity
        if level.volume == 0:
            self._delete_level(order)

    def release(self) -> None:
        """Return every level of this book to the pool and clear it."""
        for entry in (*self._bids, *self._asks):
            self._pool.free(entry.level)
        self._bids.clear()
        self._asks.clear()


class MarketManagerAggressive:
    """Order books per symbol that track only aggregated level volume."""

    def __init__(self) -> None:
        self._pool: LevelPool[Level] = LevelPool(Level)
        self._order_books: dict[int, OrderBook] = {}
        self._orders: dict[int, Order] = {}

    def get_order_book(self, symbol_id: int) -> OrderBook:
        return self._order_books[symbol_id]

    def get_order(self, order_id: int) -> Order:
        return self._orders[order_id]

    def add_order_book(self, symbol_id: int) -> None:
        """Create a fresh order book for the symbol, replacing any old one."""
        old = self._order_books.get(symbol_id)
        if old is not None:
            old.release()
        self._order_books[symbol_id] = OrderBook(self._pool)

    def add_order(self, order_id: int, symbol_id: int, price: int, quantity: int) -> None:
        """Add an order; a positive price is a bid, otherwise an ask."""
        book = self._order_books[symbol_id]
        order = Order(symbol=symbol_id, quantity=quantity)
        self._orders[order_id] = order
        book.add_order(order, price)

    def reduce_order(self, order_id: int, quantity: int) -> None:
        order = self._orders[order_id]
        order.quantity -= quantity
        self._order_books[order.symbol].reduce_order(order, quantity)

    def _signed(self, order: Order, price: int) -> int:
        return -price if self._pool[order.level].price < 0 else price

    def modify_order(self, order_id: int, new_price: int, new_quantity: int) -> None:
        """Move the order to a new unsigned price and quantity on its side."""
        order = self._orders[order_id]
        new_price = self._signed(order, new_price)
        book = self._order_books[order.symbol]
        book.delete_order(order)
        order.quantity = new_quantity
        if order.quantity > 0:
            book.add_order(order, new_price)

    def replace_order(self, order_id: int, new_id: int, new_price: int, new_quantity: int) -> None:
        """Replace an order by a new one on the same symbol and side."""
        order = self._orders[order_id]
        self.replace_order_with(order_id, new_id, order.symbol, new_price, new_quantity)

    def replace_order_with(
        self, order_id: int, new_id: int, new_symbol: int, new_price: int, new_quantity: int
    ) -> None:
        """Replace an order by a new one on ``new_symbol``, keeping its side."""
        order = self._orders[order_id]
        new_price = self._signed(order, new_price)
        self._order_books[order.symbol].delete_order(order)
        del self._orders[order_id]
        if new_quantity > 0:
            new_order = Order(symbol=new_symbol, quantity=new_quantity)
            self._orders[new_id] = new_order
            self._order_books[new_symbol].add_order(new_order, new_price)

    def delete_order(self, order_id: int) -> None:
        order = self._orders.pop(order_id)
        self._order_books[order.symbol].delete_order(order)

    def execute_order(self, order_id: int, quantity: int, price: int | None = None) -> None:
        """Execute part of an order; the execution price does not affect the book."""
        self.reduce_order(order_id, quantity)