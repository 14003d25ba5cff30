"""Price-level order books and market managers backed by a shared level pool."""

__version__ = "0.1.0"
__all__ = ["aggressive", "optimized_book", "optimized_market", "pool"]