"""
Summary -- Point-in-time WAC financial summary.

Responsibility:
    The immutable value returned to callers of the valuation service:
    opening, purchases, COGS, returns-in, write-offs and ending, each as a
    (quantity, value) pair.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - ending_qty == opening_qty + purchases_qty + returns_in_qty
                    - cogs_qty - write_off_qty
      (returns to supplier are already netted into purchases).
    - Every value is a Decimal already rounded to the output places; no
      field is ever None.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

WAC_METHOD = "WAC"


@dataclass(frozen=True, slots=True)
class FinancialSummary:
    method: str
    from_date: str
    to_date: str
    opening_qty: int
    opening_value: Decimal
    purchases_qty: int
    purchases_cost: Decimal
    cogs_qty: int
    cogs_cost: Decimal
    returns_in_qty: int
    returns_in_cost: Decimal
    write_off_qty: int
    write_off_cost: Decimal
    ending_qty: int
    ending_value: Decimal
    clamped_qty: int = 0

    @property
    def is_balanced(self) -> bool:
        """Quantity roll-forward from opening to ending holds."""
        return self.ending_qty == (
            self.opening_qty
            + self.purchases_qty
            + self.returns_in_qty
            - self.cogs_qty
            - self.write_off_qty
        )

    def to_dict(self) -> dict[str, Any]:
        """Wire form: camelCase keys, decimals rendered as strings."""
        return {
            "method": self.method,
            "fromDate": self.from_date,
            "toDate": self.to_date,
            "openingQty": self.opening_qty,
            "openingValue": str(self.opening_value),
            "purchasesQty": self.purchases_qty,
            "purchasesCost": str(self.purchases_cost),
            "cogsQty": self.cogs_qty,
            "cogsCost": str(self.cogs_cost),
            "returnsInQty": self.returns_in_qty,
            "returnsInCost": str(self.returns_in_cost),
            "writeOffQty": self.write_off_qty,
            "writeOffCost": str(self.write_off_cost),
            "endingQty": self.ending_qty,
            "endingValue": str(self.ending_value),
            "clampedQty": self.clamped_qty,
        }
