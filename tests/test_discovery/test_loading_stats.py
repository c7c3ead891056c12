"""Tests for loading statistics: coercion, grouping and accumulation."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from loading_insights.discovery.loading_stats import (
    UNKNOWN_KEY,
    OperationRecord,
    StatTuple,
    accumulate_stats,
    dimension_key,
    group_by_dimension,
    record_field,
    to_number,
)


def _rec(commodity="Coal", station="ABC", wagons=10, tonnage=100, freight=1000):
    return OperationRecord(
        date=date(2024, 5, 6),
        commodity=commodity,
        station=station,
        wagons=wagons,
        tonnage=tonnage,
        freight=freight,
    )


class TestToNumber:
    def test_plain_numbers(self):
        assert to_number(5) == 5.0
        assert to_number(2.5) == 2.5

    def test_numeric_string_and_decimal(self):
        assert to_number("12.75") == 12.75
        assert to_number(Decimal("3.5")) == 3.5

    def test_junk_is_zero(self):
        assert to_number(None) == 0.0
        assert to_number("abc") == 0.0
        assert to_number("") == 0.0
        assert to_number([1, 2]) == 0.0

    def test_nan_and_inf_are_zero(self):
        assert to_number(float("nan")) == 0.0
        assert to_number(float("inf")) == 0.0
        assert to_number("-inf") == 0.0

    def test_bool_is_zero(self):
        assert to_number(True) == 0.0


class TestRecordField:
    def test_dataclass_attribute(self):
        assert record_field(_rec(), "commodity") == "Coal"

    def test_dict_aliases_for_date(self):
        assert record_field({"p_date": "2024-01-01"}, "date") == "2024-01-01"
        assert record_field({"pDate": "2024-01-02"}, "date") == "2024-01-02"

    def test_missing_is_none(self):
        assert record_field({}, "tonnage") is None
        assert record_field(SimpleNamespace(), "tonnage") is None

    def test_from_mapping(self):
        rec = OperationRecord.from_mapping(
            {"pDate": "2024-01-01", "commodity": "Coal", "tonnage": "5"}
        )
        assert rec.date == "2024-01-01"
        assert rec.commodity == "Coal"
        assert rec.station is None
        assert rec.tonnage == "5"


class TestDimensionKey:
    def test_regular_key(self):
        assert dimension_key(_rec(commodity="Iron Ore"), "commodity") == "Iron Ore"

    @pytest.mark.parametrize("blank", [None, "", "   "])
    def test_blank_keys_are_unknown(self, blank):
        assert dimension_key(_rec(station=blank), "station") == UNKNOWN_KEY

    def test_invalid_dimension_raises(self):
        with pytest.raises(ValueError):
            dimension_key(_rec(), "siding")


class TestGroupByDimension:
    def test_partition_keeps_every_record(self):
        records = [_rec("Coal"), _rec("Cement"), _rec(None), _rec("Coal"), _rec("  ")]
        groups = group_by_dimension(records, "commodity")
        assert list(groups) == ["Coal", "Cement", UNKNOWN_KEY]
        assert sum(len(v) for v in groups.values()) == len(records)
        assert len(groups[UNKNOWN_KEY]) == 2

    def test_input_order_within_group(self):
        first = _rec("Coal", tonnage=1)
        second = _rec("Coal", tonnage=2)
        groups = group_by_dimension([first, _rec("Cement"), second], "commodity")
        assert groups["Coal"] == [first, second]

    def test_empty_input(self):
        assert group_by_dimension([], "station") == {}

    def test_dict_records(self):
        groups = group_by_dimension([{"station": "XYZ"}, {"station": None}], "station")
        assert list(groups) == ["XYZ", UNKNOWN_KEY]

    def test_invalid_dimension_raises_even_when_empty(self):
        with pytest.raises(ValueError):
            group_by_dimension([], "railway")


class TestAccumulateStats:
    def test_sums_and_counts(self):
        stats = accumulate_stats([_rec(wagons=10, tonnage=100, freight=1000),
                                  _rec(wagons=5, tonnage=50.5, freight=250)])
        assert stats == StatTuple(runs=2, wagons=15, tonnage=150.5, freight=1250)

    def test_empty_is_zero(self):
        assert accumulate_stats([]) == StatTuple.zero()

    def test_junk_fields_count_as_zero(self):
        stats = accumulate_stats([_rec(wagons=None, tonnage="n/a", freight=float("nan"))])
        assert stats.runs == 1
        assert stats.wagons == 0
        assert stats.tonnage == 0
        assert stats.freight == 0

    def test_adding_stat_tuples(self):
        total = StatTuple(1, 2, 3, 4) + StatTuple(10, 20, 30, 40)
        assert total == StatTuple(11, 22, 33, 44)

    def test_to_dict_rounding(self):
        d = StatTuple(runs=3, wagons=1.23456, tonnage=9.87654, freight=100.129).to_dict()
        assert d == {
            "recordCount": 3,
            "totalWagons": 1.235,
            "totalTonnage": 9.877,
            "totalFreight": 100.13,
        }
