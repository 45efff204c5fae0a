"""
inventory_services -- Caller-facing operations over the valuation engine.

Services bind the pure engines to the database-backed Event Source and to
the active configuration.
"""

from inventory_services.financial_summary_service import FinancialSummaryService

__all__ = ["FinancialSummaryService"]
