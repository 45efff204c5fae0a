"""
Inventory Kernel - Weighted-Average-Cost valuation core

Shared infrastructure for the valuation engine:
- Structured JSON logging with request-scoped context
- Typed, coded exceptions
- Immutable domain values (events, windows, summaries)
- Read-only SQL access to the stock event log
"""

__version__ = "0.1.0"
