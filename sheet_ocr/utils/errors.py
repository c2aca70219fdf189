"""
Exception types for the spreadsheet OCR pipeline.

Only the edges of the pipeline fail: image input, the OCR engine call and
export. Text-to-table reconstruction never raises.
"""


class SheetOCRError(Exception):
    """Base class for all pipeline errors."""


class UnsupportedInputError(SheetOCRError):
    """The submitted file is not an image."""

    def __init__(self, message: str = "Please upload an image file"):
        super().__init__(message)


class RecognitionFailure(SheetOCRError):
    """The OCR engine could not produce text for an image."""

    def __init__(self, message: str, engine: str = ""):
        super().__init__(message)
        self.engine = engine


class EmptyTableError(SheetOCRError):
    """Export was attempted on a table without data rows."""

    def __init__(self, message: str = "Cannot export a table with no rows"):
        super().__init__(message)
