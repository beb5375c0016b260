"""
Unit tests for JSON / CSV / TSV export of result rows.

Run with: pytest tests/test_query/test_exporter.py -v
"""

import csv
import io
import json
from datetime import datetime

import pytest

from codegraph.query.exporter import Exporter, ExportOptions
from codegraph.shared.exceptions import ExportError

ROWS = [
    {"name": "Serve", "package": "mcp", "lines": 42, "exported": True},
    {"name": "helper", "package": "util", "lines": 7, "exported": False},
    {"name": "Run", "package": "cli", "ratio": 0.25},
]


class TestJSONExport:

    def test_round_trip_preserves_values(self):
        text = Exporter(ExportOptions(format="json")).export(ROWS)
        assert json.loads(text) == ROWS

    def test_compact_output_has_no_spaces(self):
        text = Exporter(ExportOptions(format="json")).export([{"a": 1, "b": "x"}])
        assert text == '[{"a":1,"b":"x"}]'

    def test_pretty_output_is_indented(self):
        text = Exporter(ExportOptions.default("json")).export([{"a": 1}])
        assert text == '[\n  {\n    "a": 1\n  }\n]'

    def test_empty_rows(self):
        assert Exporter(ExportOptions(format="json")).export([]) == "[]"

    def test_nulls_dropped_unless_requested(self):
        rows = [{"a": 1, "b": None}]

        dropped = Exporter(ExportOptions(format="json")).export(rows)
        kept = Exporter(ExportOptions(format="json", include_null=True)).export(rows)

        assert json.loads(dropped) == [{"a": 1}]
        assert json.loads(kept) == [{"a": 1, "b": None}]

    def test_bool_digits(self):
        text = Exporter(ExportOptions(format="json", bool_format="1/0")).export(
            [{"ok": True, "bad": False}]
        )
        assert json.loads(text) == [{"ok": 1, "bad": 0}]

    def test_nested_values_are_processed(self):
        rows = [{"node": {"name": "F", "meta": None, "tags": [True, None]}}]
        text = Exporter(ExportOptions(format="json", bool_format="1/0")).export(rows)
        assert json.loads(text) == [{"node": {"name": "F", "tags": [1, None]}}]

    def test_dates_use_date_format(self):
        rows = [{"at": datetime(2024, 3, 1, 12, 30, 0)}]
        text = Exporter(ExportOptions(format="json", date_format="%Y-%m-%d")).export(rows)
        assert json.loads(text) == [{"at": "2024-03-01"}]

    def test_non_ascii_is_kept(self):
        text = Exporter(ExportOptions(format="json")).export([{"name": "café"}])
        assert "café" in text


class TestDelimitedExport:

    def test_csv_has_header_plus_one_line_per_row(self):
        text = Exporter(ExportOptions.default("csv")).export(ROWS)
        lines = text.splitlines()

        assert len(lines) == len(ROWS) + 1
        assert lines[0] == "exported,lines,name,package,ratio"
        assert lines[1] == "true,42,Serve,mcp,"
        assert lines[3] == ",,Run,cli,0.25"

    def test_csv_without_headers(self):
        options = ExportOptions.default("csv")
        options.headers = False
        text = Exporter(options).export(ROWS)
        assert len(text.splitlines()) == len(ROWS)

    def test_tsv_uses_tabs(self):
        text = Exporter(ExportOptions.default("tsv")).export([{"a": 1, "b": 2}])
        assert text == "a\tb\n1\t2\n"

    def test_cells_with_delimiters_are_quoted(self):
        rows = [{"signature": "func(a, b int) error"}]
        text = Exporter(ExportOptions.default("csv")).export(rows)

        parsed = list(csv.reader(io.StringIO(text)))
        assert parsed == [["signature"], ["func(a, b int) error"]]

    def test_null_value_substitution(self):
        options = ExportOptions(format="csv", delimiter=",", null_value="NULL")
        text = Exporter(options).export([{"a": None, "b": ""}])
        assert text.splitlines()[1] == "NULL,NULL"

    @pytest.mark.parametrize(
        "value, expected",
        [(1.0, "1"), (0.1, "0.1"), (1e20, "100000000000000000000"), (2.5e-7, "0.00000025")],
    )
    def test_floats_never_use_exponents(self, value, expected):
        text = Exporter(ExportOptions.default("csv")).export([{"x": value}])
        assert text.splitlines()[1] == expected

    def test_empty_rows(self):
        assert Exporter(ExportOptions.default("csv")).export([]) == ""

    def test_multi_character_delimiter_rejected(self):
        options = ExportOptions(format="csv", delimiter="||")

        with pytest.raises(ExportError, match="single character"):
            Exporter(options).export([{"a": 1}])


class TestExportMetadata:

    def test_counts_and_size(self):
        exporter = Exporter(ExportOptions.default("csv"))
        text, result = exporter.export_with_metadata(ROWS)

        assert result.format == "csv"
        assert result.row_count == 3
        assert result.column_count == 5
        assert result.size == len(text.encode("utf-8"))
        assert result.error is None

    def test_size_counts_bytes_not_characters(self):
        _, result = Exporter(ExportOptions(format="json")).export_with_metadata([{"n": "é"}])
        assert result.size == len('[{"n":"é"}]'.encode("utf-8"))

    def test_bad_delimiter_recorded_as_error(self):
        options = ExportOptions(format="tsv", delimiter="::")
        text, result = Exporter(options).export_with_metadata([{"a": 1}])

        assert text == ""
        assert "single character" in result.error
        assert result.row_count == 1
