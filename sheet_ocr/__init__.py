"""
Spreadsheet OCR
===============

Turns screenshots of spreadsheets and other plain tables into CSV.

Main components:
- OCR engines (Tesseract, EasyOCR) behind one interface
- Text-to-table reconstruction (tokenizing, header keys, positional rows)
- CSV and JSON export
- Conversion session with explicit processing states
"""

__version__ = "1.0.0"
__author__ = "Spreadsheet OCR Team"
