"""
Utility modules for the spreadsheet OCR pipeline.
"""

from .errors import SheetOCRError, UnsupportedInputError, RecognitionFailure, EmptyTableError
from .io import load_image, decode_image, ensure_image_upload, save_json, save_text, ensure_dir
from .ocr_text import OCREngine, OCRResult, TesseractEngine, EasyOCREngine, create_engine
from .tables import TableBuilder, TextTable, parse_table, split_lines, tokenize, normalize_headers
from .export import CSVExporter, JSONExporter, export_csv, quote_value, CSV_FILENAME, CSV_MIME_TYPE
from .converter import SpreadsheetConverter, Idle, Processing, Success, Failed

__all__ = [
    # Errors
    "SheetOCRError", "UnsupportedInputError", "RecognitionFailure", "EmptyTableError",
    # IO
    "load_image", "decode_image", "ensure_image_upload", "save_json", "save_text", "ensure_dir",
    # OCR
    "OCREngine", "OCRResult", "TesseractEngine", "EasyOCREngine", "create_engine",
    # Tables
    "TableBuilder", "TextTable", "parse_table", "split_lines", "tokenize", "normalize_headers",
    # Export
    "CSVExporter", "JSONExporter", "export_csv", "quote_value", "CSV_FILENAME", "CSV_MIME_TYPE",
    # Session
    "SpreadsheetConverter", "Idle", "Processing", "Success", "Failed",
]
