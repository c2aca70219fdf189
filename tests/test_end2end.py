"""
End-to-end integration tests for the Spreadsheet OCR pipeline.
"""

import pytest
import numpy as np
import json
import sys
import tempfile
from pathlib import Path

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sheet_ocr.cli import main, resolve_formats


def run_cli(*argv) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(list(argv))
    return exc_info.value.code


@pytest.fixture
def temp_dir():
    """Create a temporary working directory."""
    with tempfile.TemporaryDirectory(prefix="sheet_ocr_test_") as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def ocr_text_file(temp_dir):
    path = temp_dir / "screenshot.txt"
    path.write_text("NAME AGE CITY\nJohn 30 Austin\nJane 25 Denver\n   \n", encoding="utf-8")
    return path


@pytest.fixture
def sheet_image():
    """Create a spreadsheet-like screenshot."""
    import cv2

    img = np.ones((200, 520, 3), dtype=np.uint8) * 255
    rows = [["NAME", "AGE", "CITY"], ["John", "30", "Austin"], ["Jane", "25", "Denver"]]
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            cv2.putText(img, value, (30 + c * 160, 50 + r * 50),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.9, (0, 0, 0), 2)
    return img


class TestTextInput:
    """CLI runs that start from saved OCR text."""

    def test_csv_export(self, ocr_text_file, temp_dir):
        out = temp_dir / "out"
        assert run_cli("--text-input", str(ocr_text_file), "--output", str(out), "-q") == 0

        csv_path = out / "spreadsheet_data.csv"
        assert csv_path.read_text(encoding="utf-8") == (
            'name,age,city\n"John","30","Austin"\n"Jane","25","Denver"'
        )

    def test_txt_given_as_input(self, ocr_text_file, temp_dir):
        """Test that a .txt passed to --input is treated as OCR text."""
        out = temp_dir / "out"
        assert run_cli("--input", str(ocr_text_file), "--output", str(out), "-q") == 0
        assert (out / "spreadsheet_data.csv").exists()

    def test_all_formats(self, ocr_text_file, temp_dir):
        out = temp_dir / "out"
        assert run_cli(
            "--text-input", str(ocr_text_file), "--output", str(out),
            "--format", "all", "--save-text", "-q"
        ) == 0

        data = json.loads((out / "spreadsheet_data.json").read_text(encoding="utf-8"))
        assert data["headers"] == ["name", "age", "city"]
        assert data["num_rows"] == 2

        markdown = (out / "spreadsheet_data.md").read_text(encoding="utf-8")
        assert "| NAME | AGE | CITY |" in markdown

        assert (out / "screenshot_ocr.txt").exists()

    def test_header_only_text_fails(self, temp_dir):
        """Test that nothing is exported when no rows were recognized."""
        path = temp_dir / "header.txt"
        path.write_text("NAME AGE\n", encoding="utf-8")
        out = temp_dir / "out"

        assert run_cli("--text-input", str(path), "--output", str(out), "-q") == 1
        assert not (out / "spreadsheet_data.csv").exists()

    def test_missing_text_file(self, temp_dir):
        assert run_cli("--text-input", str(temp_dir / "missing.txt"), "--output", str(temp_dir), "-q") == 1


class TestImageInput:
    """CLI runs that go through OCR."""

    def test_unsupported_input(self, temp_dir):
        pdf = temp_dir / "report.pdf"
        pdf.write_bytes(b"%PDF-1.4")

        assert run_cli("--input", str(pdf), "--output", str(temp_dir / "out"), "-q") == 1

    def test_image_with_patched_tesseract(self, sheet_image, temp_dir, monkeypatch):
        """Test the image path with Tesseract output patched in."""
        import cv2
        import pytesseract

        monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
        monkeypatch.setattr(
            pytesseract, "image_to_string",
            lambda image, lang=None, config="", timeout=0: "NAME AGE CITY\nJohn 30 Austin\n"
        )

        img_path = temp_dir / "sheet.png"
        cv2.imwrite(str(img_path), sheet_image)
        out = temp_dir / "out"

        assert run_cli("--input", str(img_path), "--output", str(out), "-q") == 0
        assert (out / "spreadsheet_data.csv").read_text(encoding="utf-8") == (
            'name,age,city\n"John","30","Austin"'
        )

    def test_real_tesseract(self, sheet_image):
        """Test real OCR on a synthetic screenshot."""
        from sheet_ocr.utils.converter import SpreadsheetConverter, Success

        try:
            import pytesseract
            pytesseract.get_tesseract_version()
        except Exception:
            pytest.skip("Tesseract not available")

        state = SpreadsheetConverter(ocr_engine="tesseract").process(sheet_image)

        assert isinstance(state, Success)
        # Exact text depends on the Tesseract build; structure should hold
        for row in state.table.rows:
            assert len(row) == state.table.num_cols


class TestFormats:
    def test_resolve_all(self):
        assert resolve_formats(["all"]) == ["csv", "json", "markdown"]

    def test_resolve_keeps_canonical_order(self):
        assert resolve_formats(["markdown", "csv"]) == ["csv", "markdown"]


class TestPackageSources:
    def test_every_module_compiles(self):
        """Test that each source file parses, including ones no test imports."""
        package_dir = Path(__file__).parent.parent / "sheet_ocr"
        sources = sorted(package_dir.rglob("*.py"))
        assert sources

        for path in sources:
            compile(path.read_text(encoding="utf-8"), str(path), "exec")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
