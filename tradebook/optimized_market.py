"""Market manager over the level-reporting order book, with a statistics handler."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable

from tradebook.optimized_book import (
    Level,
    LevelUpdate,
    Order,
    OrderBook,
    OrderSide,
    Symbol,
    UpdateType,
)
from tradebook.pool import LevelPool


class MarketHandler:
    """Receives market events and keeps running statistics about them.

    Subclasses may override any ``on_*`` method; calling the base method keeps
    the statistics up to date.
    """

    def __init__(self) -> None:
        self.updates = 0
        self.symbols = 0
        self.max_symbols = 0
        self.order_books = 0
        self.max_order_books = 0
        self.max_order_book_levels = 0
        self.orders = 0
        self.max_orders = 0
        self.add_orders = 0
        self.update_orders = 0
        self.delete_orders = 0
        self.execute_orders = 0

    def _count(self, counter: str | None = None, step: int = 1, peak: str | None = None) -> None:
        """Count one update, optionally moving a counter and raising its peak."""
        self.updates += 1
        if counter is None:
            return
        value = getattr(self, counter) + step
        setattr(self, counter, value)
        if peak is not None:
            setattr(self, peak, max(value, getattr(self, peak)))

    def on_add_symbol(self, symbol: Symbol) -> None:
        self._count("symbols", peak="max_symbols")

    def on_delete_symbol(self, symbol: Symbol) -> None:
        self._count("symbols", -1)

    def on_add_order_book(self, order_book: OrderBook) -> None:
        self._count("order_books", peak="max_order_books")

    def on_update_order_book(self, order_book: OrderBook, top: bool) -> None:
        levels = max(len(order_book.bids()), len(order_book.asks()))
        self.max_order_book_levels = max(levels, self.max_order_book_levels)

    def on_delete_order_book(self, order_book: OrderBook) -> None:
        self._count("order_books", -1)

    def on_add_level(self, order_book: OrderBook, level: Level, top: bool) -> None:
        self._count()

    def on_update_level(self, order_book: OrderBook, level: Level, top: bool) -> None:
        self._count()

    def on_delete_level(self, order_book: OrderBook, level: Level, top: bool) -> None:
        self._count()

    def on_add_order(self, order: Order) -> None:
        self._count("orders", peak="max_orders")
        self.add_orders += 1

    def on_update_order(self, order: Order) -> None:
        self._count("update_orders")

    def on_delete_order(self, order: Order) -> None:
        self._count("orders", -1)
        self.delete_orders += 1

    def on_execute_order(self, order: Order, price: int, quantity: int) -> None:
        self._count("execute_orders")


class MarketManagerOptimized:
    """Symbols, order books and resting orders, reporting every change to a handler."""

    def __init__(self, handler: MarketHandler) -> None:
        self._handler = handler
        self._pool: LevelPool[Level] = LevelPool(Level)
        self._symbols: dict[int, Symbol] = {}
        self._order_books: dict[int, OrderBook] = {}
        self._orders: dict[int, Order] = {}

    def get_symbol(self, symbol_id: int) -> Symbol:
        return self._symbols[symbol_id]

    def get_order_book(self, symbol_id: int) -> OrderBook:
        return self._order_books[symbol_id]

    def get_order(self, order_id: int) -> Order:
        return self._orders[order_id]

    def add_symbol(self, symbol: Symbol) -> None:
        self._symbols[symbol.id] = symbol
        self._handler.on_add_symbol(symbol)

    def delete_symbol(self, symbol_id: int) -> None:
        symbol = self._symbols.pop(symbol_id)
        self._handler.on_delete_symbol(symbol)

    def add_order_book(self, symbol: Symbol) -> None:
        """Create a fresh order book for the symbol, replacing any old one."""
        old = self._order_books.get(symbol.id)
        if old is not None:
            old.release()
        book = OrderBook(self._pool)
        self._order_books[symbol.id] = book
        self._handler.on_add_order_book(book)

    def delete_order_book(self, symbol_id: int) -> None:
        book = self._order_books.pop(symbol_id)
        self._handler.on_delete_order_book(book)
        book.release()

    def add_order(
        self, order_id: int, symbol_id: int, side: OrderSide, price: int, quantity: int
    ) -> None:
        if symbol_id not in self._order_books:
            raise KeyError(symbol_id)
        order = Order(id=order_id, symbol=symbol_id, side=side, price=price, quantity=quantity)
        self._orders[order_id] = order
        self._handler.on_add_order(order)
        self._apply(OrderBook.add_order, order)

    def reduce_order(self, order_id: int, quantity: int) -> None:
        """Cancel up to ``quantity`` of an order, deleting it when nothing is left."""
        order = self._orders[order_id]
        quantity = min(quantity, order.quantity)
        order.quantity -= quantity
        self._settle(order)
        self._apply(OrderBook.reduce_order, order, quantity)

    def modify_order(self, order_id: int, new_price: int, new_quantity: int) -> None:
        """Move an order to a new price and quantity on its side."""
        order = self._orders[order_id]
        self._apply(OrderBook.delete_order, order)
        order.price = new_price
        order.quantity = new_quantity
        if self._settle(order):
            self._apply(OrderBook.add_order, order)

    def replace_order(self, order_id: int, new_id: int, new_price: int, new_quantity: int) -> None:
        """Replace an order by a new one on the same symbol and side."""
        order = self._orders[order_id]
        self.replace_order_with(order_id, new_id, order.symbol, order.side, new_price, new_quantity)

    def replace_order_with(
        self,
        order_id: int,
        new_id: int,
        new_symbol: int,
        new_side: OrderSide,
        new_price: int,
        new_quantity: int,
    ) -> None:
        """Replace an order by a new one on any symbol and side."""
        order = self._orders[order_id]
        self._apply(OrderBook.delete_order, order)
        self._handler.on_delete_order(order)
        del self._orders[order_id]
        if new_quantity > 0:
            new_order = replace(
                order,
                id=new_id,
                symbol=new_symbol,
                side=new_side,
                price=new_price,
                quantity=new_quantity,
            )
            self._orders[new_id] = new_order
            self._handler.on_add_order(new_order)
            self._apply(OrderBook.add_order, new_order)

    def delete_order(self, order_id: int) -> None:
        order = self._orders[order_id]
        self._apply(OrderBook.delete_order, order)
        self._handler.on_delete_order(order)
        del self._orders[order_id]

    def execute_order(self, order_id: int, quantity: int, price: int | None = None) -> None:
        """Execute up to ``quantity`` of an order, at its own price unless one is given."""
        order = self._orders[order_id]
        quantity = min(quantity, order.quantity)
        self._handler.on_execute_order(order, order.price if price is None else price, quantity)
        order.quantity -= quantity
        self._apply(OrderBook.reduce_order, order, quantity)
        self._settle(order)

    def _apply(self, operation: Callable[..., LevelUpdate], order: Order, *args: Any) -> None:
        """Run a book operation for the order and report the level change."""
        book = self._order_books[order.symbol]
        self._update_level(book, operation(book, order, *args))

    def _settle(self, order: Order) -> bool:
        """Report the order as updated or deleted; return whether it remains."""
        if order.quantity > 0:
            self._handler.on_update_order(order)
            return True
        self._handler.on_delete_order(order)
        del self._orders[order.id]
        return False

    def _update_level(self, order_book: OrderBook, update: LevelUpdate) -> None:
        callbacks = {
            UpdateType.ADD: self._handler.on_add_level,
            UpdateType.UPDATE: self._handler.on_update_level,
            UpdateType.DELETE: self._handler.on_delete_level,
        }
        callback = callbacks.get(update.type)
        if callback is not None:
            callback(order_book, update.update, update.top)
        self._handler.on_update_order_book(order_book, update.top)