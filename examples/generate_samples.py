#!/usr/bin/env python
"""
Generate synthetic spreadsheet screenshots for trying out the pipeline.

This script creates sample images with:
- A plain grid-less table
- A bordered spreadsheet-style table
- A ragged table with missing trailing cells

Next to every image it writes the expected table as CSV.

Usage:
    python examples/generate_samples.py
"""

import numpy as np
from pathlib import Path

from sheet_ocr.utils.export import export_csv
from sheet_ocr.utils.tables import parse_table

SAMPLES = {
    "sample_plain": [
        ["NAME", "AGE", "CITY"],
        ["John", "30", "Austin"],
        ["Jane", "25", "Denver"],
        ["Carlos", "41", "Boston"],
    ],
    "sample_grid": [
        ["SKU", "QTY", "PRICE", "TOTAL"],
        ["A-100", "2", "4.50", "9.00"],
        ["B-200", "1", "12.00", "12.00"],
        ["C-300", "10", "0.75", "7.50"],
    ],
    "sample_ragged": [
        ["ID", "STATUS", "OWNER"],
        ["1", "open", "kim"],
        ["2", "closed"],
        ["3"],
    ],
}


def create_table_image(rows, cell_w=160, cell_h=50, grid=False):
    """Draw rows of cell strings onto a white image."""
    import cv2

    num_cols = max(len(r) for r in rows)
    margin = 30
    width = margin * 2 + num_cols * cell_w
    height = margin * 2 + len(rows) * cell_h
    img = np.ones((height, width, 3), dtype=np.uint8) * 255

    for r, row in enumerate(rows):
        y = margin + r * cell_h
        for c in range(num_cols):
            x = margin + c * cell_w
            if grid:
                cv2.rectangle(img, (x, y), (x + cell_w, y + cell_h), (160, 160, 160), 1)
            if c < len(row):
                thickness = 2 if r == 0 else 1
                cv2.putText(img, row[c], (x + 10, y + 33),
                            cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 0, 0), thickness)

    return img


def main():
    import cv2

    samples_dir = Path(__file__).parent / "sample_pages"
    samples_dir.mkdir(exist_ok=True)

    for name, rows in SAMPLES.items():
        img = create_table_image(rows, grid=(name == "sample_grid"))
        img_path = samples_dir / f"{name}.png"
        cv2.imwrite(str(img_path), img)
        print(f"Created: {img_path}")

        # Expected output is what a perfect OCR pass would give
        text = "\n".join(" ".join(row) for row in rows)
        csv_path = samples_dir / f"{name}.csv"
        csv_path.write_text(export_csv(parse_table(text)), encoding="utf-8")
        print(f"Created: {csv_path}")

    print("\nSample generation complete!")


if __name__ == "__main__":
    main()
