"""
Tests for table export module.
"""

import json
import pytest
import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sheet_ocr.utils.errors import EmptyTableError
from sheet_ocr.utils.export import (
    CSVExporter,
    JSONExporter,
    export_csv,
    quote_value,
    CSV_FILENAME,
    CSV_MIME_TYPE,
)
from sheet_ocr.utils.tables import TextTable, parse_table


@pytest.fixture
def temp_output_dir():
    """Create a temporary output directory."""
    with tempfile.TemporaryDirectory(prefix="sheet_ocr_test_") as tmp_dir:
        yield Path(tmp_dir)


class TestQuoting:
    """Tests for CSV value quoting."""

    def test_plain_value(self):
        assert quote_value("John") == '"John"'

    def test_comma(self):
        assert quote_value("A,B") == '"A,B"'

    def test_double_quote(self):
        assert quote_value('3"') == '"3"""'

    def test_newline_stays_inside_quotes(self):
        assert quote_value("a\nb") == '"a\nb"'

    def test_empty(self):
        assert quote_value("") == '""'

    def test_custom_quote_char(self):
        assert quote_value("it's", quote_char="'") == "'it''s'"


class TestCSVExporter:
    """Tests for CSV rendering and writing."""

    def test_example_payload(self):
        """Test the payload for a simple three-column table."""
        table = parse_table("NAME AGE CITY\nJohn 30 Austin\nJane 25 Denver\n   \n")
        assert export_csv(table) == (
            'name,age,city\n"John","30","Austin"\n"Jane","25","Denver"'
        )

    def test_padded_values_exported_empty(self):
        table = parse_table("COL1 COL2\nonly_one_value\n")
        assert export_csv(table) == 'col1,col2\n"only_one_value",""'

    def test_quoting_in_rows(self):
        """Test that commas and quotes inside OCR tokens survive."""
        table = parse_table('ITEM SIZE\nA,B 3"\n')
        assert export_csv(table).splitlines()[1] == '"A,B","3"""'

    def test_duplicate_headers_keep_every_column(self):
        table = TextTable(headers=["total", "total"], rows=[["1", "2"]])
        assert export_csv(table) == 'total,total\n"1","2"'

    def test_ragged_row_defaults_to_empty(self):
        """Test that a short stored row still yields one field per column."""
        table = TextTable(headers=["a", "b"], rows=[["1"]])
        assert export_csv(table) == 'a,b\n"1",""'

    def test_naive_retokenize_round_trip(self):
        """Test that plain values come back from a comma split."""
        table = parse_table("SKU QTY PRICE\nA100 2 450\nB200 1 1200\n")
        lines = export_csv(table).split("\n")

        assert lines[0].split(",") == table.headers
        for line, row in zip(lines[1:], table.rows):
            assert [v.strip('"') for v in line.split(",")] == row

    def test_render_is_repeatable(self):
        table = parse_table("A B\n1 2\n")
        exporter = CSVExporter()
        assert exporter.render(table) == exporter.render(table)

    def test_empty_table_raises(self):
        """Test that exporting zero rows fails."""
        with pytest.raises(EmptyTableError):
            export_csv(parse_table("NAME AGE\n"))
        with pytest.raises(EmptyTableError):
            export_csv(TextTable())

    def test_custom_delimiter(self):
        table = parse_table("A B\n1 2\n")
        assert CSVExporter(delimiter=";").render(table) == 'a;b\n"1";"2"'

    def test_custom_line_terminator(self):
        """Test that rows use the terminator and none trails the payload."""
        table = parse_table("A B\n1 2\n3 4\n")
        payload = CSVExporter(line_terminator="\r\n").render(table)
        assert payload == 'a,b\r\n"1","2"\r\n"3","4"'

    def test_quote_char_doubled_in_rows(self):
        table = TextTable(headers=["size"], rows=[['3"'], ["12"]])
        assert export_csv(table) == 'size\n"3"""\n"12"'

    def test_export_file(self, temp_output_dir):
        """Test writing the payload to disk."""
        table = parse_table("A B\n1 2\n")
        path = CSVExporter().export(table, temp_output_dir / "out" / CSV_FILENAME)

        assert path.exists()
        assert path.read_bytes() == b'a,b\n"1","2"'

    def test_export_file_empty_table(self, temp_output_dir):
        path = temp_output_dir / CSV_FILENAME
        with pytest.raises(EmptyTableError):
            CSVExporter().export(TextTable(headers=["a"]), path)
        assert not path.exists()

    def test_constants(self):
        assert CSV_FILENAME.endswith(".csv")
        assert CSV_MIME_TYPE == "text/csv;charset=utf-8"


class TestJSONExporter:
    """Tests for JSON export."""

    def test_export(self, temp_output_dir):
        table = parse_table("NAME AGE\nJohn 30\n")
        path = JSONExporter().export(table, temp_output_dir / "table.json")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["headers"] == ["name", "age"]
        assert data["records"] == [{"name": "John", "age": "30"}]

    def test_empty_table_raises(self, temp_output_dir):
        with pytest.raises(EmptyTableError):
            JSONExporter().export(TextTable(), temp_output_dir / "table.json")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
