"""
Export module for reconstructed tables.

Provides:
- CSV export with quoting of every data value
- JSON export of the table structure
"""

import csv
import io
import logging
from pathlib import Path
from typing import List, Union

from .errors import EmptyTableError
from .io import save_json, save_text
from .tables import TextTable

logger = logging.getLogger(__name__)

CSV_FILENAME = "spreadsheet_data.csv"
CSV_MIME_TYPE = "text/csv;charset=utf-8"


def _write_quoted(
    rows: List[List[str]],
    delimiter: str = ",",
    quote_char: str = '"',
    line_terminator: str = "\n"
) -> str:
    output = io.StringIO()
    writer = csv.writer(
        output,
        delimiter=delimiter,
        quotechar=quote_char,
        quoting=csv.QUOTE_ALL,
        lineterminator=line_terminator
    )
    writer.writerows(rows)
    payload = output.getvalue()
    return payload[:-len(line_terminator)] if rows else payload


def quote_value(value: str, quote_char: str = '"') -> str:
    """
    Quote a single value for CSV output.

    Embedded quote characters are doubled, and delimiters or line breaks
    inside the value stay inside the field.
    """
    return _write_quoted([[value]], quote_char=quote_char)


# ============================================================================
# CSV Exporter
# ============================================================================

class CSVExporter:
    """Export a table to CSV text."""

    def __init__(
        self,
        delimiter: str = ",",
        quote_char: str = '"',
        line_terminator: str = "\n"
    ):
        self.delimiter = delimiter
        self.quote_char = quote_char
        self.line_terminator = line_terminator

    def render(self, table: TextTable) -> str:
        """
        Serialize a table to a CSV payload.

        Header keys are written verbatim, data values are always quoted.
        No trailing line terminator is added. Missing values are written
        as empty quoted fields.

        Raises:
            EmptyTableError: If the table has no data rows
        """
        if table.is_empty:
            raise EmptyTableError()

        # Positional, so columns sharing a key are all written
        grid = [
            [row[col] if col < len(row) else "" for col in range(table.num_cols)]
            for row in table.rows
        ]
        body = _write_quoted(
            grid,
            delimiter=self.delimiter,
            quote_char=self.quote_char,
            line_terminator=self.line_terminator
        )

        return self.delimiter.join(table.headers) + self.line_terminator + body

    def export(
        self,
        table: TextTable,
        output_path: Union[str, Path]
    ) -> Path:
        """
        Write a table to a CSV file (UTF-8).

        Args:
            table: Table to export
            output_path: Output file path

        Returns:
            Path to the written file
        """
        payload = self.render(table)
        output_path = save_text(payload, output_path)
        logger.info(f"Exported CSV ({table.num_rows} rows) to: {output_path}")
        return output_path


def export_csv(table: TextTable) -> str:
    """Serialize a table to a CSV payload with default settings."""
    return CSVExporter().render(table)


# ============================================================================
# JSON Exporter
# ============================================================================

class JSONExporter:
    """Export a table structure to JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def export(
        self,
        table: TextTable,
        output_path: Union[str, Path]
    ) -> Path:
        if table.is_empty:
            raise EmptyTableError()

        output_path = save_json(table.to_dict(), output_path, indent=self.indent)
        logger.info(f"Exported JSON to: {output_path}")
        return output_path
