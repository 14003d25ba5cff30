# tradebook

Lightweight price-level order books and market managers. Each book keeps
aggregated price levels, not queues of individual orders. The level records
live in a shared `LevelPool` (`tradebook.pool`). That pool hands out integer
indices and reuses freed indices last-in first-out. Each book keeps its price
levels sorted so that the best price is always the last entry of a side.

The package offers two flavours.

- `tradebook.aggressive` is a minimal book.
  - An `Order` carries only its symbol, its remaining quantity and the pool
    index of its level.
  - Buy prices are positive and sell prices are negative, so one signed price
    stands for both the side and the price.
  - `MarketManagerAggressive` adds, reduces, modifies, replaces, deletes and
    executes orders. It sends no notifications.
  - Quantities are subtracted as given. They are not capped at what the order
    has left.
  - `execute_order` accepts a price, but the price has no effect on the book.
- `tradebook.optimized_book` and `tradebook.optimized_market` make up a fuller
  book.
  - It has symbols (`Symbol`), order sides (`OrderSide`) and level types
    (`LevelType`), and it keeps a count of orders on each level.
  - Every book operation returns a `LevelUpdate`. It holds the change
    (`UpdateType.ADD`, `UPDATE` or `DELETE`), a snapshot of the level and
    whether that level is the top of its side.
  - `MarketManagerOptimized` reports every change to a `MarketHandler`.
  - Reduce and execute amounts are capped at the order's remaining quantity.
    An order that reaches zero is reported as deleted and removed.

## Installation

```
pip install .
```

To also install the test dependencies:

```
pip install .[test]
```

## Example: aggressive manager

```python
from tradebook.aggressive import MarketManagerAggressive

market = MarketManagerAggressive()
market.add_order_book(0)
market.add_order(1, 0, 100, 10)    # buy 10 @ 100
market.add_order(2, 0, -105, 5)    # sell 5 @ 105

book = market.get_order_book(0)
print(book.best_bid(), book.best_ask())   # Level(price=100, volume=10) Level(price=-105, volume=5)

market.execute_order(1, 4)
market.delete_order(2)
```

`modify_order` and `replace_order` take an unsigned new price. The order keeps
its side: the price is negated for sell orders. `replace_order_with` can also
move the new order to another symbol's book.

## Example: optimized manager with a handler

```python
from tradebook.optimized_book import OrderSide, Symbol
from tradebook.optimized_market import MarketHandler, MarketManagerOptimized

handler = MarketHandler()
market = MarketManagerOptimized(handler)

symbol = Symbol(0, "TEST")
market.add_symbol(symbol)
market.add_order_book(symbol)

market.add_order(1, 0, OrderSide.BUY, 100, 10)
market.reduce_order(1, 3)
market.execute_order(1, 7)

print(handler.updates, handler.add_orders, handler.execute_orders)
```

### The handler

`MarketHandler` has one callback per event.

- Symbols: `on_add_symbol`, `on_delete_symbol`.
- Order books: `on_add_order_book`, `on_update_order_book`,
  `on_delete_order_book`.
- Levels: `on_add_level`, `on_update_level`, `on_delete_level`.
- Orders: `on_add_order`, `on_update_order`, `on_delete_order`,
  `on_execute_order`.

The base implementations keep these running statistics as attributes:

- `updates`
- `symbols` and `max_symbols`
- `order_books` and `max_order_books`
- `max_order_book_levels`
- `orders` and `max_orders`
- `add_orders`, `update_orders`, `delete_orders` and `execute_orders`

To react to events, subclass `MarketHandler` and override its `on_*` methods.
Call the base method to keep the statistics current.

## What the package does not do

- It does not match orders. Orders rest in the book until they are reduced,
  executed, modified, replaced or deleted explicitly.
- It does not read or decode market data feeds.
- It has no command-line program.
- It does not store anything: all state lives in memory.

## Running the tests

```
pytest
```