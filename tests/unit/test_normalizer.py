"""
Tests for NumericNormalizer.

The normalizer is the only place upstream type drift is tolerated, so
these tests pin down exactly which representations are accepted and
that every rejection names the field and carries the raw value.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from inventory_engines.normalizer import NumericNormalizer
from inventory_kernel.domain.reasons import StockChangeReason
from inventory_kernel.exceptions import (
    DataFormatError,
    MalformedNumericError,
    MalformedTimestampError,
    NegativeUnitCostError,
    UnknownReasonError,
    ValueOutOfRangeError,
)


class _RowLike:
    """Stands in for a SQLAlchemy Row, which exposes its columns via _mapping."""

    def __init__(self, mapping):
        self._mapping = mapping


@pytest.fixture
def normalizer():
    return NumericNormalizer()


class TestToInteger:
    @pytest.mark.parametrize(
        "raw",
        [7, Decimal("7"), Decimal("7.000"), "7", " 7 ", "7.0", 7.0],
    )
    def test_accepts_integral_representations(self, normalizer, raw):
        assert normalizer.to_integer(raw) == 7

    def test_accepts_64_bit_values(self, normalizer):
        assert normalizer.to_integer(2**40) == 2**40
        assert normalizer.to_integer(str(-(2**62))) == -(2**62)

    def test_negative_values(self, normalizer):
        assert normalizer.to_integer("-4") == -4
        assert normalizer.to_integer(Decimal("-4")) == -4

    def test_non_numeric_string_rejected_with_raw_value(self, normalizer):
        with pytest.raises(MalformedNumericError) as exc_info:
            normalizer.to_integer("ten", "quantity_change")
        assert exc_info.value.field == "quantity_change"
        assert exc_info.value.raw_value == "ten"
        assert exc_info.value.code == "MALFORMED_NUMERIC"
        assert "ten" in str(exc_info.value)

    @pytest.mark.parametrize("raw", [Decimal("1.5"), "1.5", 1.5])
    def test_fractional_rejected(self, normalizer, raw):
        with pytest.raises(MalformedNumericError):
            normalizer.to_integer(raw)

    @pytest.mark.parametrize("raw", [None, True, False, float("nan"), float("inf"), "NaN", [], object()])
    def test_unusable_values_rejected(self, normalizer, raw):
        with pytest.raises(MalformedNumericError):
            normalizer.to_integer(raw)


class TestMagnitudeBounds:
    def test_64_bit_limits_accepted(self, normalizer):
        assert normalizer.to_integer(2**63 - 1) == 2**63 - 1
        assert normalizer.to_integer(str(-(2**63))) == -(2**63)

    @pytest.mark.parametrize("raw", [10**40, 2**63, str(-(2**63) - 1), Decimal("1E+19"), 1e300])
    def test_quantity_outside_64_bit_range(self, normalizer, raw):
        with pytest.raises(ValueOutOfRangeError) as exc_info:
            normalizer.to_integer(raw, "quantity_change")
        assert exc_info.value.field == "quantity_change"
        assert exc_info.value.raw_value == raw
        assert exc_info.value.code == "VALUE_OUT_OF_RANGE"

    @pytest.mark.parametrize("raw", ["1e999999999", Decimal("1e999999999")])
    def test_huge_exponent_rejected_without_expansion(self, normalizer, raw):
        with pytest.raises(ValueOutOfRangeError):
            normalizer.to_integer(raw, "quantity_change")

    @pytest.mark.parametrize("raw", ["1E+33", Decimal("1E+19"), "-1E+20", 10**19])
    def test_cost_of_1e19_or_more_rejected(self, normalizer, raw):
        with pytest.raises(ValueOutOfRangeError) as exc_info:
            normalizer.to_decimal(raw, "price_at_change")
        assert exc_info.value.field == "price_at_change"

    def test_cost_just_below_limit_accepted(self, normalizer):
        assert normalizer.to_decimal("9999999999999999999.99") == Decimal("9999999999999999999.99")

    def test_tiny_cost_accepted(self, normalizer):
        assert normalizer.to_decimal("1E-30") == Decimal("1E-30")


class TestToDecimal:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (Decimal("5.00"), Decimal("5.00")),
            (5, Decimal("5")),
            ("5.25", Decimal("5.25")),
            (" 5.25 ", Decimal("5.25")),
            (0.1, Decimal("0.1")),
        ],
    )
    def test_accepts_numeric_representations(self, normalizer, raw, expected):
        result = normalizer.to_decimal(raw)
        assert isinstance(result, Decimal)
        assert result == expected

    def test_float_goes_through_shortest_repr(self, normalizer):
        assert normalizer.to_decimal(1.1) == Decimal("1.1")

    @pytest.mark.parametrize("raw", ["abc", "", None, True, "Infinity", float("nan")])
    def test_rejected(self, normalizer, raw):
        with pytest.raises(MalformedNumericError) as exc_info:
            normalizer.to_decimal(raw, "price_at_change")
        assert exc_info.value.field == "price_at_change"

    def test_optional_decimal_passes_none(self, normalizer):
        assert normalizer.to_optional_decimal(None) is None
        assert normalizer.to_optional_decimal("2.50") == Decimal("2.50")


class TestToTimestamp:
    def test_sql_style_and_local_datetime_agree(self, normalizer):
        sql_style = normalizer.to_timestamp("2024-02-01 10:00:00.0")
        local = normalizer.to_timestamp(datetime(2024, 2, 1, 10, 0))
        iso = normalizer.to_timestamp("2024-02-01T10:00:00")
        assert sql_style == local == iso == datetime(2024, 2, 1, 10, 0)

    def test_zone_dropped_without_conversion(self, normalizer):
        aware = datetime(2024, 2, 1, 10, 0, tzinfo=timezone(timedelta(hours=5)))
        result = normalizer.to_timestamp(aware)
        assert result == datetime(2024, 2, 1, 10, 0)
        assert result.tzinfo is None

    def test_date_is_midnight(self, normalizer):
        assert normalizer.to_timestamp(date(2024, 2, 1)) == datetime(2024, 2, 1)

    @pytest.mark.parametrize("raw", ["yesterday", "2024-13-01", None, 1706781600])
    def test_rejected(self, normalizer, raw):
        with pytest.raises(MalformedTimestampError) as exc_info:
            normalizer.to_timestamp(raw, "created_at")
        assert exc_info.value.field == "created_at"
        assert exc_info.value.code == "MALFORMED_TIMESTAMP"


class TestToReason:
    @pytest.mark.parametrize("raw", ["SOLD", "sold", " Sold ", StockChangeReason.SOLD])
    def test_case_insensitive(self, normalizer, raw):
        assert normalizer.to_reason(raw) is StockChangeReason.SOLD

    @pytest.mark.parametrize("raw", ["GIFTED", "", None, 3])
    def test_unknown_reason(self, normalizer, raw):
        with pytest.raises(UnknownReasonError):
            normalizer.to_reason(raw)


class TestToIdentifier:
    def test_uuid_and_int_become_strings(self, normalizer):
        uid = uuid4()
        assert normalizer.to_identifier(uid, "item_id") == str(uid)
        assert normalizer.to_identifier(42, "item_id") == "42"

    def test_required_identifier_missing(self, normalizer):
        with pytest.raises(DataFormatError):
            normalizer.to_identifier("  ", "item_id")

    def test_optional_identifier_missing(self, normalizer):
        assert normalizer.to_identifier(None, "supplier_id", required=False) is None


class TestToStockEvent:
    def test_mapping_row(self, normalizer):
        event = normalizer.to_stock_event(
            {
                "item_id": "ITEM-1",
                "supplier_id": "SUP-1",
                "created_at": "2024-02-01 09:00:00",
                "quantity_change": Decimal("10"),
                "price_at_change": "5.00",
                "reason": "initial_stock",
            },
            sequence=3,
        )
        assert event.entity_id == "ITEM-1"
        assert event.scope_id == "SUP-1"
        assert event.timestamp == datetime(2024, 2, 1, 9)
        assert event.quantity_delta == 10
        assert event.unit_cost == Decimal("5.00")
        assert event.reason is StockChangeReason.INITIAL_STOCK
        assert event.sequence == 3

    def test_positional_row(self, normalizer):
        event = normalizer.to_stock_event(
            ("ITEM-1", None, datetime(2024, 2, 2), -4, None, "SOLD"), sequence=0
        )
        assert event.quantity_delta == -4
        assert event.unit_cost is None
        assert event.scope_id is None

    def test_row_with_mapping_attribute(self, normalizer):
        raw = _RowLike({
            "item_id": "ITEM-1",
            "supplier_id": "SUP-1",
            "created_at": datetime(2024, 2, 2),
            "quantity_change": 2,
            "price_at_change": None,
            "reason": "RETURNED_BY_CUSTOMER",
        })
        event = normalizer.to_stock_event(raw, sequence=1)
        assert event.reason is StockChangeReason.RETURNED_BY_CUSTOMER

    def test_negative_inbound_cost_rejected(self, normalizer):
        with pytest.raises(NegativeUnitCostError) as exc_info:
            normalizer.to_stock_event(
                ("ITEM-1", "SUP-1", datetime(2024, 2, 1), 5, "-1.00", "INITIAL_STOCK"),
                sequence=0,
            )
        assert exc_info.value.raw_value == "-1.00"

    def test_unrecognized_row_shape(self, normalizer):
        with pytest.raises(DataFormatError):
            normalizer.to_stock_event(("ITEM-1", 5), sequence=0)
