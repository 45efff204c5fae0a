"""
Module: inventory_kernel.selectors.base
Responsibility: Common base for read-only query selectors over the stock
    history database.
Architecture position: Kernel > Selectors.  May import from db/ and models/.
    MUST NOT import from engines, services or config.

Invariants enforced:
    - Read-only: selectors execute SELECT statements only and never add,
      delete, flush or commit.
    - The caller owns the session and its transaction scope.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy import Row, Select
from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """Read-only query object bound to a caller-owned Session."""

    def __init__(self, session: Session):
        self.session = session

    def _fetch_rows(self, stmt: Select) -> list[Row]:
        """Execute ``stmt`` and materialize every row."""
        return list(self.session.execute(stmt).all())
