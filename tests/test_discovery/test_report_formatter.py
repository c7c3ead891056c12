"""Tests for comparison table, CSV, Excel and markdown rendering."""

import csv
from datetime import datetime
from decimal import Decimal
from io import BytesIO, StringIO
from types import SimpleNamespace

import pandas as pd

from loading_insights.discovery.loading_stats import OperationRecord
from loading_insights.discovery.period_comparator import compute_comparison
from loading_insights.discovery.report_formatter import (
    OPERATION_EXPORT_COLUMNS,
    comparison_table,
    comparison_to_csv,
    comparison_to_excel,
    comparison_to_markdown,
    format_indian_number,
    operations_to_csv,
)


def _result():
    current = [
        OperationRecord(commodity="Coal", station="ABC", wagons=58, tonnage=150, freight=1000),
        OperationRecord(commodity="Cement", station="ABC", wagons=40, tonnage=30, freight=300),
    ]
    previous = [
        OperationRecord(commodity="Coal", station="XYZ", wagons=58, tonnage=100, freight=900),
    ]
    return compute_comparison(current, previous, 7, 7, "commodity")


class TestFormatIndianNumber:
    def test_small(self):
        assert format_indian_number(999) == "999"

    def test_lakh_grouping(self):
        assert format_indian_number(1234567) == "12,34,567"

    def test_float_with_decimals(self):
        assert format_indian_number(12345.5) == "12,345.50"

    def test_whole_float(self):
        assert format_indian_number(100000.0) == "1,00,000"

    def test_negative(self):
        assert format_indian_number(-1234) == "-1,234"

    def test_fixed_tonnage_decimals(self):
        assert format_indian_number(1234567.8912, 3) == "12,34,567.891"
        assert format_indian_number(150, 3) == "150.000"

    def test_decimal_and_negative_zero(self):
        assert format_indian_number(Decimal("100000.5")) == "1,00,000.50"
        assert format_indian_number(-0.0001, 3) == "0.000"


class TestComparisonTable:
    def test_header_rows_and_total(self):
        table = comparison_table(_result(), "Commodity")
        assert table[0][0] == "Commodity"
        assert table[0][1] == "Current Rks"
        assert table[0][6] == "Compare Rks"
        assert table[0][-2:] == ["Var Units", "Var %"]
        assert [r[0] for r in table[1:]] == ["Coal", "Cement", "TOTAL"]
        assert all(len(r) == len(table[0]) for r in table)

    def test_row_values(self):
        coal = comparison_table(_result(), "Commodity")[1]
        assert coal[4] == 150  # current MT
        assert coal[9] == 100  # compare MT
        assert coal[-2:] == [50, 50.0]

    def test_total_row(self):
        total = comparison_table(_result(), "Commodity")[-1]
        assert total[1] == 2
        assert total[4] == 180
        assert total[-1] == 80.0


class TestComparisonToCsv:
    def test_sections_separated(self):
        text = comparison_to_csv([
            ("Commodity wise", "Commodity", _result()),
            ("Again", "Commodity", _result()),
        ])
        rows = list(csv.reader(StringIO(text)))
        assert rows[0] == ["Commodity wise"]
        assert rows[1][0] == "Commodity"
        assert rows[5] == []
        assert rows[6] == ["Again"]


class TestComparisonToExcel:
    def test_one_sheet_per_section(self):
        data = comparison_to_excel([
            ("Commodity wise Comparative Loading", "Commodity", _result()),
            ("Station wise Comparative Loading", "Station", _result()),
        ])
        sheets = pd.read_excel(BytesIO(data), sheet_name=None)
        assert list(sheets) == [
            "Commodity wise Comparative Load",
            "Station wise Comparative Loadin",
        ]
        df = sheets["Commodity wise Comparative Load"]
        assert list(df["Commodity"]) == ["Coal", "Cement", "TOTAL"]


class TestComparisonToMarkdown:
    def test_table_with_arrows(self):
        md = comparison_to_markdown(
            _result(), "Commodity wise", "Commodity", {"current": "a", "previous": "b"}
        )
        assert md.startswith("## Commodity wise")
        assert "Current: a | Compare: b" in md
        assert "| Coal |" in md
        assert "50.00% ↑" in md
        assert "| TOTAL |" in md

    def test_tonnage_columns_show_three_decimals(self):
        md = comparison_to_markdown(_result(), "Commodity wise", "Commodity")
        coal = next(line for line in md.splitlines() if line.startswith("| Coal |"))
        cells = [c.strip() for c in coal.strip("|").split("|")]
        assert cells[4] == "150.000"
        assert cells[9] == "100.000"
        assert cells[11] == "50.000"
        assert cells[5] == "1,000.00"

    def test_flat_change_arrow(self):
        same = [OperationRecord(commodity="Coal", tonnage=10)]
        md = comparison_to_markdown(compute_comparison(same, same, 1, 1, "commodity"), "T", "C")
        assert "0.00% →" in md


class TestOperationsToCsv:
    def test_orm_like_rows_and_dicts(self):
        row = SimpleNamespace(
            p_date=datetime(2024, 5, 6), station="ABC", siding=None, commodity="Coal",
            comm_type=None, comm_cg=None, demand=None, state="MH", rly="CR", wagons=58,
            type="BOXNHL", units=None, loading_type=None, rr_no_from=None, rr_no_to=None,
            rr_date=None, tonnage=Decimal("3770.5"), freight=None,
        )
        text = operations_to_csv([row, {"station": "XYZ"}])
        rows = list(csv.reader(StringIO(text)))
        assert rows[0] == [h for h, _ in OPERATION_EXPORT_COLUMNS]
        assert rows[1][0] == "06-05-2024"
        assert rows[1][1] == "ABC"
        assert rows[1][16] == "3770.5"
        assert rows[1][17] == "0"
        assert rows[2][1] == "XYZ"
        assert rows[2][0] == ""
