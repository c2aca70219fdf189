"""
Configuration and constants for the spreadsheet OCR pipeline.

This module provides:
- Global logging configuration
- OCR engine settings
- Export settings
- Environment overrides
"""

import os
from dataclasses import dataclass, field
from typing import Optional
import logging

from sheet_ocr.utils.export import CSV_FILENAME, CSV_MIME_TYPE
from sheet_ocr.utils.ocr_text import DEFAULT_CHAR_WHITELIST

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("sheet_ocr")


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class OCRConfig:
    """OCR configuration."""
    engine: str = "tesseract"  # tesseract, easyocr
    language: str = "eng"
    # Tesseract configuration
    tesseract_config: str = "--oem 3 --psm 6"
    char_whitelist: Optional[str] = DEFAULT_CHAR_WHITELIST
    use_gpu: bool = False


@dataclass
class ExportConfig:
    """Export configuration."""
    csv_filename: str = CSV_FILENAME
    csv_mime_type: str = CSV_MIME_TYPE
    json_filename: str = "spreadsheet_data.json"
    markdown_filename: str = "spreadsheet_data.md"
    delimiter: str = ","
    quote_char: str = '"'


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    ocr: OCRConfig = field(default_factory=OCRConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    debug_mode: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    if os.environ.get("SHEET_OCR_ENGINE"):
        config.ocr.engine = os.environ["SHEET_OCR_ENGINE"].lower()

    if os.environ.get("SHEET_OCR_LANG"):
        config.ocr.language = os.environ["SHEET_OCR_LANG"]

    if os.environ.get("SHEET_OCR_USE_GPU", "").lower() == "true":
        config.ocr.use_gpu = True

    if os.environ.get("SHEET_OCR_DEBUG", "").lower() == "true":
        config.debug_mode = True

    return config


# ============================================================================
# Utility Functions
# ============================================================================

def check_gpu_available() -> bool:
    """Check if GPU is available for EasyOCR inference."""
    try:
        import torch
        return torch.cuda.is_available()
    except ImportError:
        return False
