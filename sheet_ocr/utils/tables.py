"""
Table reconstruction from OCR text.

Provides:
- Line splitting and whitespace tokenization of raw OCR output
- Header normalization (column keys from the first line)
- Positional row building with padding, truncation and blank-row filtering
- The TextTable model consumed by display and export
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Dict, Any, Union

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r'\r\n|\r|\n')
_WHITESPACE = re.compile(r'\s+')


# ============================================================================
# Tokenizer
# ============================================================================

def split_lines(raw_text: Optional[str]) -> List[str]:
    """
    Split raw OCR text into trimmed, non-empty lines.

    Args:
        raw_text: Verbatim OCR output (None is treated as empty)

    Returns:
        Lines in their original order, blank lines removed
    """
    if not raw_text:
        return []

    lines = []
    for segment in _LINE_BREAK.split(raw_text):
        segment = segment.strip()
        if segment:
            lines.append(segment)
    return lines


def tokenize(line: str) -> List[str]:
    """Split a line on runs of whitespace, dropping empty segments."""
    return [token for token in _WHITESPACE.split(line) if token]


# ============================================================================
# Header Normalization
# ============================================================================

def normalize_header(token: str) -> str:
    """
    Turn a header token into a column key.

    Example: " Unit  Price " -> "unit_price"
    """
    return _WHITESPACE.sub('_', token.strip().lower())


def normalize_headers(tokens: List[str]) -> List[str]:
    """
    Normalize first-line tokens into ordered column keys.

    Keys that normalize to an empty string are dropped. Duplicates are kept,
    each one still owns its own column position.
    """
    headers = []
    for token in tokens:
        key = normalize_header(token)
        if key:
            headers.append(key)
    return headers


def display_header(key: str) -> str:
    """Render a column key as a display title ("unit_price" -> "UNIT PRICE")."""
    return key.replace('_', ' ').upper()


# ============================================================================
# Row Building
# ============================================================================

def build_row(num_cols: int, tokens: List[str]) -> List[str]:
    """Align tokens to column positions, padding short lines with ""."""
    return [tokens[i] if i < len(tokens) else "" for i in range(num_cols)]


def is_blank_row(values: List[str]) -> bool:
    return not any(value.strip() for value in values)


def build_rows(headers: List[str], lines: List[str]) -> List[List[str]]:
    """
    Map data lines onto header columns by position.

    Args:
        headers: Column keys from the header line
        lines: Data lines (everything after the header line)

    Returns:
        One value list per kept line, each exactly len(headers) long
    """
    num_cols = len(headers)
    rows = []
    padded = truncated = dropped = 0

    for line in lines:
        tokens = tokenize(line)
        if len(tokens) < num_cols:
            padded += 1
        elif len(tokens) > num_cols:
            truncated += 1

        values = build_row(num_cols, tokens)
        if is_blank_row(values):
            dropped += 1
            continue
        rows.append(values)

    if padded or truncated or dropped:
        logger.debug(
            f"Row building: {padded} padded, {truncated} truncated, "
            f"{dropped} dropped as blank"
        )
    return rows


# ============================================================================
# Table Model
# ============================================================================

@dataclass
class TextTable:
    """A table reconstructed from OCR text."""
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)
    raw_text: str = ""

    @property
    def num_cols(self) -> int:
        return len(self.headers)

    @property
    def num_rows(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def display_headers(self) -> List[str]:
        return [display_header(key) for key in self.headers]

    def value_at(self, row: int, column: Union[int, str]) -> str:
        """
        Get a cell value.

        Args:
            row: Row index (0-based, data rows only)
            column: Column index, or a column key (first matching column)

        Raises:
            IndexError: If the row or column index is out of range
            KeyError: If the column key is not a header
        """
        if isinstance(column, str):
            if column not in self.headers:
                raise KeyError(column)
            column = self.headers.index(column)

        if not 0 <= row < self.num_rows:
            raise IndexError(f"Row {row} out of range (0..{self.num_rows - 1})")
        if not 0 <= column < self.num_cols:
            raise IndexError(f"Column {column} out of range (0..{self.num_cols - 1})")

        return self.rows[row][column]

    def records(self) -> List[List[Tuple[str, str]]]:
        """Rows as ordered (key, value) pairs; duplicate keys keep every column."""
        return [list(zip(self.headers, row)) for row in self.rows]

    def to_records(self) -> List[Dict[str, str]]:
        """
        Rows as key-to-value mappings.

        When two columns share a key the later column wins.
        """
        return [dict(zip(self.headers, row)) for row in self.rows]

    def to_markdown(self) -> str:
        """Build a Markdown preview with display titles in the header."""
        if self.num_cols == 0:
            return ""

        lines = []
        lines.append("| " + " | ".join(self.display_headers) + " |")
        lines.append("| " + " | ".join("---" for _ in self.headers) + " |")
        for row in self.rows:
            lines.append("| " + " | ".join(v.replace('|', '\\|') for v in row) + " |")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headers": list(self.headers),
            "rows": [list(row) for row in self.rows],
            "records": self.to_records(),
            "num_rows": self.num_rows,
            "num_cols": self.num_cols,
        }


# ============================================================================
# Table Builder
# ============================================================================

class TableBuilder:
    """
    Reconstructs a TextTable from flat OCR text.

    The first non-blank line is the header; every following line is a data
    row aligned to the header purely by token position.
    """

    def build(self, raw_text: Optional[str]) -> TextTable:
        """
        Build a table from OCR text.

        Args:
            raw_text: Verbatim OCR output

        Returns:
            TextTable (empty when the text has no non-blank lines)
        """
        raw_text = raw_text or ""
        lines = split_lines(raw_text)

        if not lines:
            logger.info("No text lines found, returning empty table")
            return TextTable(raw_text=raw_text)

        headers = normalize_headers(tokenize(lines[0]))
        rows = build_rows(headers, lines[1:])

        logger.info(
            f"Reconstructed table: {len(headers)} columns, {len(rows)} rows "
            f"from {len(lines)} lines"
        )
        return TextTable(headers=headers, rows=rows, raw_text=raw_text)


def parse_table(raw_text: Optional[str]) -> TextTable:
    """Reconstruct a table from OCR text."""
    return TableBuilder().build(raw_text)
