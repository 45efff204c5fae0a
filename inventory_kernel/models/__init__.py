"""ORM models for the inventory kernel."""

from inventory_kernel.models.stock_event import StockEventModel

__all__ = ["StockEventModel"]
