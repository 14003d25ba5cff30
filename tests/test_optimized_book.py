import pytest

from tradebook.optimized_book import (
    Level,
    LevelType,
    Order,
    OrderBook,
    OrderSide,
    Symbol,
    UpdateType,
)
from tradebook.pool import LevelPool

SNAPSHOT = ("type", "price", "volume", "orders")


@pytest.fixture
def pool():
    return LevelPool(Level)


@pytest.fixture
def book(pool):
    return OrderBook(pool)


def make(side, order_id, price, quantity):
    return Order(id=order_id, symbol=0, side=side, price=price, quantity=quantity)


def buy(order_id, price, quantity):
    return make(OrderSide.BUY, order_id, price, quantity)


def sell(order_id, price, quantity):
    return make(OrderSide.SELL, order_id, price, quantity)


def fields(level, *names):
    return tuple(getattr(level, name) for name in names)


def test_new_book_is_empty(book):
    assert book.empty()
    assert not book
    assert len(book) == 0
    assert book.best_bid() is None
    assert book.best_ask() is None


def test_symbol_holds_fields():
    assert fields(Symbol(7, "test"), "id", "name") == (7, "test")


def test_first_order_adds_level_at_top(book):
    update = book.add_order(buy(1, 10, 5))
    assert (update.type, update.top) == (UpdateType.ADD, True)
    assert fields(update.update, *SNAPSHOT) == (LevelType.BID, 10, 5, 1)
    assert book
    assert len(book) == 1


def test_same_price_updates_level(book):
    book.add_order(buy(1, 10, 5))
    update = book.add_order(buy(2, 10, 7))
    assert update.type is UpdateType.UPDATE
    assert fields(update.update, "volume", "orders") == (5 + 7, 2)
    assert len(book) == 1


@pytest.mark.parametrize(
    "side, levels, best, prices, descending, best_price, level_type",
    [
        (OrderSide.BUY, "bids", "best_bid", [20, 10, 30, 25], False, 30, LevelType.BID),
        (OrderSide.SELL, "asks", "best_ask", [40, 60, 50, 45], True, 40, LevelType.ASK),
    ],
)
def test_levels_sorted_best_last(
    book, side, levels, best, prices, descending, best_price, level_type
):
    for order_id, price in enumerate(prices, start=1):
        book.add_order(make(side, order_id, price, 1))
    listed = [entry.price for entry in getattr(book, levels)()]
    assert listed == sorted(listed, reverse=descending)
    assert fields(getattr(book, best)(), "price", "type") == (best_price, level_type)


def test_top_flag_only_for_best_level(book):
    book.add_order(buy(1, 20, 1))
    orders = [buy(2, 10, 1), sell(3, 50, 1), sell(4, 60, 1), sell(5, 45, 1)]
    assert [book.add_order(order).top for order in orders] == [False, True, False, True]


def test_order_remembers_its_level(book, pool):
    order = buy(1, 10, 5)
    book.add_order(order)
    assert pool[order.level].price == 10
    assert book.bids()[0].level == order.level


def test_reduce_order_partially_keeps_order_count(book):
    order = buy(1, 10, 10)
    book.add_order(order)
    order.quantity -= 4
    update = book.reduce_order(order, 4)
    assert update.type is UpdateType.UPDATE
    assert fields(update.update, "volume", "orders") == (10 - 4, 1)
    assert book.best_bid().volume == 10 - 4


def test_reduce_order_fully_deletes_level(book, pool):
    order = sell(1, 50, 10)
    book.add_order(order)
    order.quantity = 0
    update = book.reduce_order(order, 10)
    assert (update.type, update.top, update.update.orders) == (UpdateType.DELETE, True, 0)
    assert book.empty()
    assert len(pool) == 0


def test_delete_order_keeps_level_with_other_orders(book):
    first = buy(1, 10, 3)
    second = buy(2, 10, 4)
    for order in (first, second):
        book.add_order(order)
    update = book.delete_order(first)
    assert update.type is UpdateType.UPDATE
    assert fields(update.update, "volume", "orders") == (second.quantity, 1)
    assert len(book) == 1


def test_delete_last_order_removes_level(book):
    low = buy(1, 10, 3)
    high = buy(2, 20, 4)
    for order in (low, high):
        book.add_order(order)
    update = book.delete_order(high)
    assert (update.type, update.top) == (UpdateType.DELETE, True)
    assert [entry.price for entry in book.bids()] == [10]
    assert book.best_bid().price == 10


def test_update_snapshot_is_independent(book):
    update = book.add_order(buy(1, 10, 5))
    book.add_order(buy(2, 10, 5))
    assert update.update.volume == 5
    assert book.best_bid().volume == 5 + 5


def test_freed_level_is_reused_and_reset(book, pool):
    order = buy(1, 10, 5)
    book.add_order(order)
    old_index = order.level
    book.delete_order(order)
    other = sell(2, 70, 8)
    update = book.add_order(other)
    assert other.level == old_index
    assert fields(update.update, *SNAPSHOT) == (LevelType.ASK, 70, 8, 1)


def test_release_frees_all_levels(book, pool):
    for order in (buy(1, 10, 1), buy(2, 20, 1), sell(3, 50, 1)):
        book.add_order(order)
    assert len(pool) == 3
    book.release()
    assert book.empty()
    assert len(pool) == 0


def test_books_share_pool(pool):
    books = [OrderBook(pool), OrderBook(pool)]
    orders = [buy(1, 10, 1), buy(2, 10, 1)]
    for target, order in zip(books, orders):
        target.add_order(order)
    assert orders[0].level != orders[1].level
    assert len(pool) == 2
    assert [len(target) for target in books] == [1, 1]