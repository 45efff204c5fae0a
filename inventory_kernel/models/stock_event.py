"""
Module: inventory_kernel.models.stock_event
Responsibility: ORM mapping for the stock history log the valuation engine
    replays.  Each row is one signed quantity change for one item, optionally
    carrying the unit price that established its cost.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from selectors/, domain/, or outer layers.

Invariants enforced:
    - Append-only: the valuation kernel only ever reads this table; rows
      are written by the stock management backend and never mutated.
    - Replay ordering: (created_at, sequence) is the total order of the
      log; sequence breaks ties between rows recorded at the same instant.
    - Cost provenance: price_at_change is set only on cost-establishing
      inbound rows (initial stock, purchases).  A NULL price on an inbound
      row means "value at the running weighted average".

Audit relevance:
    Opening, ending and every bucket of the WAC summary are derived by replay
    from these rows.  There are NO stored balances.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base


class StockEventModel(Base):
    """
    Persistent stock change row.

    Non-goals:
        - Does NOT validate reason tags or prices; the numeric normalizer
          is the single tolerance boundary for what the log contains.
    """

    __tablename__ = "stock_history"

    __table_args__ = (
        # Query: replay of one item in order
        Index("ix_sh_item_ts", "item_id", "created_at"),
        # Query: replay of everything up to a bound
        Index("ix_sh_ts", "created_at", "sequence"),
        # Query: supplier-scoped replay
        Index("ix_sh_supplier_ts", "supplier_id", "created_at"),
    )

    item_id: Mapped[str] = mapped_column(String(100), nullable=False)

    supplier_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    quantity_change: Mapped[int] = mapped_column(Integer, nullable=False)

    reason: Mapped[str] = mapped_column(String(40), nullable=False)

    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Civil time, no zone
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
    )

    # Arrival order; breaks timestamp ties
    sequence: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Present only on cost-establishing inbound rows
    price_at_change: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<StockEvent #{self.sequence}: item={self.item_id} "
            f"{self.quantity_change:+d} {self.reason} @ {self.price_at_change}>"
        )
