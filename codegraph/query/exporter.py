"""
Result export — rows to JSON, CSV or TSV text.

Rows are plain ``dict`` records as returned by the graph executor.
CSV/TSV columns are the sorted union of keys across all rows; JSON
values are normalised per ``ExportOptions`` before serialisation.
"""

import csv
import io
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel

from codegraph.shared.exceptions import ExportError

ExportFormat = Literal["json", "csv", "tsv"]

BOOL_WORDS = "true/false"
BOOL_DIGITS = "1/0"

_DEFAULT_DELIMITERS = {"csv": ",", "tsv": "\t"}


class ExportOptions(BaseModel):
    format: ExportFormat = "json"
    pretty: bool = False
    headers: bool = True
    delimiter: str = ""
    null_value: str = ""
    bool_format: Literal["true/false", "1/0"] = BOOL_WORDS
    date_format: str = "%Y-%m-%dT%H:%M:%S%z"
    include_null: bool = False

    @classmethod
    def default(cls, format: ExportFormat = "json") -> "ExportOptions":
        """Defaults per format: pretty JSON, comma CSV, tab TSV."""
        return cls(
            format=format,
            pretty=format == "json",
            delimiter=_DEFAULT_DELIMITERS.get(format, ""),
        )


class ExportResult(BaseModel):
    format: ExportFormat
    row_count: int
    column_count: int
    size: int
    error: Optional[str] = None


def _column_names(rows: list[dict[str, Any]]) -> list[str]:
    columns: set[str] = set()
    for row in rows:
        columns.update(row.keys())
    return sorted(columns)


def _format_float(value: float) -> str:
    # shortest round-trip text, never scientific notation
    if value != value or value in (float("inf"), float("-inf")):
        return str(value)
    return format(Decimal(repr(value)).normalize(), "f")


class Exporter:
    """Serialises result rows according to an ``ExportOptions``."""

    def __init__(self, options: Optional[ExportOptions] = None):
        self.options = options or ExportOptions.default("json")

    def export(self, rows: list[dict[str, Any]]) -> str:
        fmt = self.options.format
        if fmt not in ("json", "csv", "tsv"):
            raise ExportError(f"unsupported export format: {fmt}")
        if not rows:
            return "[]" if fmt == "json" else ""
        if fmt == "json":
            return self._export_json(rows)
        return self._export_delimited(rows)

    def export_with_metadata(self, rows: list[dict[str, Any]]) -> tuple[str, ExportResult]:
        text = ""
        error = None
        try:
            text = self.export(rows)
        except (ExportError, TypeError, ValueError) as e:
            error = str(e)
        result = ExportResult(
            format=self.options.format,
            row_count=len(rows),
            column_count=len(_column_names(rows)),
            size=len(text.encode("utf-8")),
            error=error,
        )
        return text, result

    # ─── JSON ─────────────────────────────────────────────

    def _export_json(self, rows: list[dict[str, Any]]) -> str:
        processed = [self._process_mapping(row) for row in rows]
        if self.options.pretty:
            return json.dumps(processed, indent=2, ensure_ascii=False)
        return json.dumps(processed, separators=(",", ":"), ensure_ascii=False)

    def _process_mapping(self, mapping: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, value in mapping.items():
            processed = self._process_value(value)
            if processed is not None or self.options.include_null:
                out[str(key)] = processed
        return out

    def _process_value(self, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, bool):
            if self.options.bool_format == BOOL_DIGITS:
                return 1 if value else 0
            return value
        if isinstance(value, str):
            if value == "" and self.options.null_value != "":
                return None
            return value
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, dict):
            return self._process_mapping(value)
        if isinstance(value, (list, tuple)):
            return [self._process_value(v) for v in value]
        if isinstance(value, (datetime, date)):
            return value.strftime(self.options.date_format)
        return str(value)

    # ─── CSV / TSV ────────────────────────────────────────

    def _export_delimited(self, rows: list[dict[str, Any]]) -> str:
        delimiter = self.options.delimiter or _DEFAULT_DELIMITERS[self.options.format]
        if len(delimiter) != 1:
            raise ExportError(f"delimiter must be a single character, got {delimiter!r}")
        columns = _column_names(rows)

        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
        if self.options.headers:
            writer.writerow(columns)
        for row in rows:
            writer.writerow([self._format_cell(row.get(column)) for column in columns])
        return buffer.getvalue()

    def _format_cell(self, value: Any) -> str:
        if value is None:
            return self.options.null_value
        if isinstance(value, bool):
            if self.options.bool_format == BOOL_DIGITS:
                return "1" if value else "0"
            return "true" if value else "false"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return _format_float(value)
        if isinstance(value, str):
            return value if value != "" else self.options.null_value
        if isinstance(value, (datetime, date)):
            return value.strftime(self.options.date_format)
        return str(value)
