"""
inventory_engines.normalizer -- Coercion of loosely-typed event rows.

Responsibility:
    Turn the heterogeneous values an event source hands back (Decimals,
    ints of any width, floats, numeric strings, datetimes, SQL-style
    timestamp strings, reason tags in any case) into the canonical types
    the rest of the engine works with: int, Decimal, naive datetime and
    StockChangeReason.  Also maps whole rows (mappings, SQLAlchemy rows,
    positional tuples) onto StockEvent.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    This is the ONLY place in the system that tolerates upstream type
    drift; everything downstream assumes canonical types.

Invariants enforced:
    - No float ever reaches the arithmetic: floats are converted through
      their shortest string form, and only when finite.
    - Booleans are rejected as numbers even though bool subclasses int.
    - Quantities fit a signed 64-bit integer and costs stay below 1e19, so
      no normalized value is too large for the valuation arithmetic.
    - Timestamps are civil times: zone-aware inputs keep their wall-clock
      reading and lose the zone, no conversion is performed.

Failure modes:
    - MalformedNumericError for non-numeric, non-finite or (for integers)
      fractional values, carrying the field name and raw value.
    - MalformedTimestampError for unrecognized timestamp values.
    - UnknownReasonError for reason tags outside the catalog.
    - NegativeUnitCostError for a negative cost on an inbound event.
    - ValueOutOfRangeError for finite numbers outside those bounds.
    - DataFormatError for rows of unrecognized shape or missing identifiers.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from inventory_kernel.domain.events import EVENT_ROW_FIELDS, StockEvent
from inventory_kernel.domain.reasons import StockChangeReason
from inventory_kernel.exceptions import (
    DataFormatError,
    MalformedNumericError,
    MalformedTimestampError,
    NegativeUnitCostError,
    UnknownReasonError,
    ValueOutOfRangeError,
)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
# Largest adjusted exponent read from a Decimal: |value| < 1e19
MAX_ADJUSTED_EXPONENT = 18


class NumericNormalizer:
    """
    Stateless converter from raw event-source values to canonical types.

    Contract:
        Every ``to_*`` method either returns a canonical value or raises a
        DataFormatError subclass naming the field and the raw value.
    """

    def to_integer(self, value: Any, field: str = "value") -> int:
        result = self._parse_integer(value, field)
        if not INT64_MIN <= result <= INT64_MAX:
            raise ValueOutOfRangeError(field, value, limit="signed 64-bit integer")
        return result

    def _parse_integer(self, value: Any, field: str) -> int:
        if isinstance(value, bool) or value is None:
            raise MalformedNumericError(field, value, expected="integer")
        if isinstance(value, numbers.Integral):
            return int(value)
        if isinstance(value, Decimal):
            return self._integral_decimal(value, value, field)
        if isinstance(value, float):
            if not math.isfinite(value) or not value.is_integer():
                raise MalformedNumericError(field, value, expected="integer")
            return int(value)
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                parsed = Decimal(text)
            except InvalidOperation:
                raise MalformedNumericError(field, value, expected="integer") from None
            return self._integral_decimal(parsed, value, field)
        raise MalformedNumericError(field, value, expected="integer")

    def to_decimal(self, value: Any, field: str = "value") -> Decimal:
        if isinstance(value, bool) or value is None:
            raise MalformedNumericError(field, value, expected="decimal")
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, numbers.Integral):
            result = Decimal(int(value))
        elif isinstance(value, float):
            result = Decimal(str(value))
        elif isinstance(value, str):
            try:
                result = Decimal(value.strip())
            except InvalidOperation:
                raise MalformedNumericError(field, value, expected="decimal") from None
        else:
            raise MalformedNumericError(field, value, expected="decimal")
        if not result.is_finite():
            raise MalformedNumericError(field, value, expected="decimal")
        if not result.is_zero() and result.adjusted() > MAX_ADJUSTED_EXPONENT:
            raise ValueOutOfRangeError(field, value, limit="magnitude below 1e19")
        return result

    def to_optional_decimal(self, value: Any, field: str = "value") -> Decimal | None:
        """Like to_decimal, but None (an absent cost) passes through."""
        if value is None:
            return None
        return self.to_decimal(value, field)

    def to_timestamp(self, value: Any, field: str = "timestamp") -> datetime:
        """
        Accepts a datetime (naive or zone-aware), a date (read as midnight),
        or an ISO / SQL-style string such as ``2024-02-01T10:00:00`` or
        ``2024-02-01 10:00:00.0``.
        """
        if isinstance(value, datetime):
            return value.replace(tzinfo=None)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.strip()).replace(tzinfo=None)
            except ValueError:
                raise MalformedTimestampError(field, value) from None
        raise MalformedTimestampError(field, value)

    def to_reason(self, value: Any, field: str = "reason") -> StockChangeReason:
        if isinstance(value, StockChangeReason):
            return value
        if isinstance(value, str):
            try:
                return StockChangeReason(value.strip().upper())
            except ValueError:
                raise UnknownReasonError(field, value) from None
        raise UnknownReasonError(field, value)

    def to_identifier(self, value: Any, field: str, *, required: bool = True) -> str | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                raise DataFormatError(field, value, f"Missing identifier for {field}")
            return None
        if isinstance(value, UUID):
            return str(value)
        if isinstance(value, bool) or not isinstance(value, (str, numbers.Integral)):
            raise DataFormatError(field, value, f"Unsupported identifier for {field}: {value!r}")
        return str(value).strip()

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def row_fields(self, row: Any) -> Mapping[str, Any]:
        """View a raw row as a mapping keyed by EVENT_ROW_FIELDS."""
        if isinstance(row, Mapping):
            return row
        mapping = getattr(row, "_mapping", None)
        if mapping is not None:
            return mapping
        if (
            isinstance(row, Sequence)
            and not isinstance(row, (str, bytes))
            and len(row) == len(EVENT_ROW_FIELDS)
        ):
            return dict(zip(EVENT_ROW_FIELDS, row))
        raise DataFormatError("row", row, f"Unrecognized event row shape: {type(row).__name__}")

    def to_stock_event(self, row: Any, sequence: int) -> StockEvent:
        fields = self.row_fields(row)
        quantity = self.to_integer(fields.get("quantity_change"), "quantity_change")
        unit_cost = self.to_optional_decimal(fields.get("price_at_change"), "price_at_change")
        if quantity > 0 and unit_cost is not None and unit_cost < 0:
            raise NegativeUnitCostError("price_at_change", fields.get("price_at_change"))
        return StockEvent(
            entity_id=self.to_identifier(fields.get("item_id"), "item_id"),
            scope_id=self.to_identifier(fields.get("supplier_id"), "supplier_id", required=False),
            timestamp=self.to_timestamp(fields.get("created_at"), "created_at"),
            quantity_delta=quantity,
            unit_cost=unit_cost,
            reason=self.to_reason(fields.get("reason"), "reason"),
            sequence=sequence,
        )

    @staticmethod
    def _integral_decimal(value: Decimal, raw: Any, field: str) -> int:
        if not value.is_finite():
            raise MalformedNumericError(field, raw, expected="integer")
        if not value.is_zero() and value.adjusted() > MAX_ADJUSTED_EXPONENT:
            raise ValueOutOfRangeError(field, raw, limit="signed 64-bit integer")
        if value != value.to_integral_value():
            raise MalformedNumericError(field, raw, expected="integer")
        return int(value)
