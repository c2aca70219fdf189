#!/usr/bin/env python
"""
Command-line interface for the Spreadsheet OCR pipeline.

Usage:
    sheet-ocr --input <image> --output <output_dir> [options]

Examples:
    # Convert a screenshot to CSV
    sheet-ocr --input table.png --output ./output

    # Write CSV, JSON and a Markdown preview
    sheet-ocr --input table.png --output ./output --format all

    # Rebuild the table from saved OCR text, skipping OCR
    sheet-ocr --text-input table.txt --output ./output
"""

import sys
import argparse
import logging
import time
from pathlib import Path
from typing import List

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("sheet_ocr")

FORMATS = ["csv", "json", "markdown"]


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Spreadsheet OCR - Convert table screenshots to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Convert a screenshot to CSV:
    sheet-ocr --input table.png --output ./output

  Export every format:
    sheet-ocr --input table.png --output ./output --format all

  Use EasyOCR instead of Tesseract:
    sheet-ocr --input table.png --output ./output --ocr-engine easyocr

  Rebuild from saved OCR text:
    sheet-ocr --text-input table.txt --output ./output
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input", "-i",
        help="Input image (PNG, JPG, TIFF, BMP, WEBP) or .txt with OCR text"
    )
    source.add_argument(
        "--text-input", "-t",
        help="Text file with previously recognized OCR output"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated files"
    )

    # Optional arguments
    parser.add_argument(
        "--format", "-f",
        nargs="+",
        default=["csv"],
        choices=FORMATS + ["all"],
        help="Output format(s) (default: csv)"
    )

    parser.add_argument(
        "--ocr-engine",
        choices=["tesseract", "easyocr"],
        default=None,
        help="OCR engine (default: tesseract, or SHEET_OCR_ENGINE)"
    )

    parser.add_argument(
        "--lang",
        default=None,
        help="OCR language code (default: eng, or SHEET_OCR_LANG)"
    )

    parser.add_argument(
        "--use-gpu",
        action="store_true",
        help="Use GPU for EasyOCR if available"
    )

    parser.add_argument(
        "--save-text",
        action="store_true",
        help="Also save the raw OCR text next to the exports"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Re-raise unexpected errors with a traceback"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0"
    )

    return parser


def check_dependencies(engine: str) -> bool:
    """Check if the libraries for an OCR run are available."""
    missing = []

    try:
        import cv2
    except ImportError:
        missing.append("opencv-python")

    try:
        import numpy
    except ImportError:
        missing.append("numpy")

    if engine == "tesseract":
        try:
            import pytesseract
            # Test if tesseract is actually installed
            try:
                pytesseract.get_tesseract_version()
            except Exception:
                missing.append("tesseract-ocr (system package)")
        except ImportError:
            missing.append("pytesseract")
    elif engine == "easyocr":
        try:
            import easyocr
        except ImportError:
            missing.append("easyocr")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    return True


def resolve_formats(formats: List[str]) -> List[str]:
    if "all" in formats:
        return list(FORMATS)
    return [f for f in FORMATS if f in formats]


def run_pipeline(args) -> int:
    """Run OCR (unless given text), rebuild the table and export it."""
    from sheet_ocr.config import get_config, check_gpu_available
    from sheet_ocr.utils.converter import SpreadsheetConverter, Processing, Success, Failed
    from sheet_ocr.utils.errors import UnsupportedInputError
    from sheet_ocr.utils.export import CSVExporter, JSONExporter
    from sheet_ocr.utils.io import detect_input_type, ensure_dir, load_image, load_text, save_text

    start_time = time.time()
    config = get_config()
    args.debug = args.debug or config.debug_mode

    engine_name = args.ocr_engine or config.ocr.engine
    language = args.lang or config.ocr.language
    use_gpu = args.use_gpu or config.ocr.use_gpu

    if use_gpu and not check_gpu_available():
        logger.warning("GPU requested but not available, using CPU")
        use_gpu = False

    output_dir = ensure_dir(args.output)

    def on_state_change(state):
        if isinstance(state, Processing):
            logger.debug(f"Recognizing text... {state.progress}%")

    converter = SpreadsheetConverter(
        ocr_engine=engine_name,
        language=language,
        use_gpu=use_gpu,
        engine_options={
            "tesseract_config": config.ocr.tesseract_config,
            "char_whitelist": config.ocr.char_whitelist,
        },
        on_state_change=on_state_change
    )

    # Detect input type
    source = Path(args.text_input or args.input)
    input_type = "text" if args.text_input else detect_input_type(source)

    logger.info(f"Input type detected: {input_type}")

    if input_type == "text":
        state = converter.process_text(load_text(source))
    elif input_type == "image":
        if not check_dependencies(engine_name):
            return 1
        try:
            image = load_image(source)
        except UnsupportedInputError as e:
            logger.error(str(e))
            return 1
        state = converter.process(image)
    else:
        logger.error(f"Unsupported input: {source}")
        return 1

    if isinstance(state, Failed):
        logger.error(state.message)
        return 1
    if not isinstance(state, Success):
        logger.error(f"Unexpected conversion state: {state}")
        return 1

    table = state.table
    if args.save_text:
        text_path = save_text(table.raw_text, output_dir / f"{source.stem}_ocr.txt")
        logger.info(f"Saved OCR text: {text_path}")

    if table.is_empty:
        logger.error("No table rows were recognized; nothing to export")
        return 1

    written = {}
    for fmt in resolve_formats(args.format):
        if fmt == "csv":
            exporter = CSVExporter(
                delimiter=config.export.delimiter,
                quote_char=config.export.quote_char
            )
            written[fmt] = exporter.export(table, output_dir / config.export.csv_filename)
        elif fmt == "json":
            written[fmt] = JSONExporter().export(table, output_dir / config.export.json_filename)
        elif fmt == "markdown":
            written[fmt] = save_text(table.to_markdown() + "\n", output_dir / config.export.markdown_filename)

    for fmt, path in written.items():
        logger.info(f"Exported {fmt}: {path}")

    # Print summary
    elapsed = time.time() - start_time

    if not args.quiet:
        print("\n" + "="*60)
        print("SPREADSHEET CONVERSION COMPLETE")
        print("="*60)
        print(f"Source: {source}")
        print(f"Output: {output_dir}")
        print(f"Columns: {table.num_cols}")
        print(f"Rows: {table.num_rows}")
        print(f"Processing time: {elapsed:.2f}s")
        print()
        print(table.to_markdown())
        print("="*60)

    return 0


def main(argv=None):
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    try:
        exit_code = run_pipeline(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
