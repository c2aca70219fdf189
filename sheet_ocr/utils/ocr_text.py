"""
Text OCR engines for spreadsheet screenshots.

Provides:
- A single engine interface: image in, text out, with progress callbacks
- Tesseract engine (default, via pytesseract)
- EasyOCR engine (optional)

Engines are opaque to the table reconstruction code, which only sees the
recognized text.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Dict, Any, Callable
import numpy as np

from .errors import RecognitionFailure

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

DEFAULT_CHAR_WHITELIST = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789.,#-_"
)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class OCRResult:
    """Recognized text for one image."""
    text: str
    engine_used: str = ""
    language: str = ""
    processing_time: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def line_count(self) -> int:
        return len([line for line in self.text.splitlines() if line.strip()])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "engine": self.engine_used,
            "language": self.language,
            "processing_time": self.processing_time,
            "metadata": self.metadata
        }


# ============================================================================
# Engine Base Class
# ============================================================================

class OCREngine:
    """
    Base class for OCR engines.

    Subclasses implement `_recognize_text`. Any error raised there is
    reported as a RecognitionFailure.
    """

    name = "base"

    def __init__(self, language: str = "eng"):
        self.language = language

    def recognize(
        self,
        image: np.ndarray,
        progress_callback: Optional[ProgressCallback] = None
    ) -> OCRResult:
        """
        Recognize all text in an image.

        Args:
            image: Input image (BGR or grayscale)
            progress_callback: Called with integer percentages in [0, 100]

        Returns:
            OCRResult with the recognized text

        Raises:
            RecognitionFailure: If the engine could not produce text
        """
        if image is None or getattr(image, "size", 0) == 0:
            raise RecognitionFailure("Empty image", engine=self.name)

        start_time = time.time()
        self._report(progress_callback, 0)

        try:
            text = self._recognize_text(image, progress_callback)
        except RecognitionFailure:
            raise
        except Exception as e:
            logger.error(f"{self.name} error: {e}")
            raise RecognitionFailure(f"{self.name} failed: {e}", engine=self.name) from e

        self._report(progress_callback, 100)
        elapsed = time.time() - start_time
        logger.info(f"{self.name} recognized {len(text)} characters in {elapsed:.2f}s")

        return OCRResult(
            text=text,
            engine_used=self.name,
            language=self.language,
            processing_time=elapsed
        )

    def _recognize_text(
        self,
        image: np.ndarray,
        progress_callback: Optional[ProgressCallback]
    ) -> str:
        raise NotImplementedError

    @staticmethod
    def _report(progress_callback: Optional[ProgressCallback], percent: float):
        if progress_callback is not None:
            progress_callback(int(min(max(round(percent), 0), 100)))


# ============================================================================
# Tesseract Engine
# ============================================================================

class TesseractEngine(OCREngine):
    """OCR using Tesseract."""

    name = "tesseract"

    def __init__(
        self,
        language: str = "eng",
        config: str = "--oem 3 --psm 6",
        char_whitelist: Optional[str] = DEFAULT_CHAR_WHITELIST,
        timeout: int = 0
    ):
        super().__init__(language=language)
        try:
            import pytesseract
            self.pytesseract = pytesseract

            # Test that tesseract is installed
            pytesseract.get_tesseract_version()

        except Exception as e:
            raise ImportError(
                f"Tesseract not available: {e}\n"
                "Install with: pip install pytesseract\n"
                "Also install Tesseract: https://github.com/tesseract-ocr/tesseract"
            )

        self.config = config
        self.char_whitelist = char_whitelist
        self.timeout = timeout

    @property
    def full_config(self) -> str:
        if self.char_whitelist:
            return f"{self.config} -c tessedit_char_whitelist={self.char_whitelist}"
        return self.config

    def _recognize_text(
        self,
        image: np.ndarray,
        progress_callback: Optional[ProgressCallback]
    ) -> str:
        import cv2

        # pytesseract expects RGB ordering for color arrays
        if len(image.shape) == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

        self._report(progress_callback, 10)

        return self.pytesseract.image_to_string(
            image,
            lang=self.language,
            config=self.full_config,
            timeout=self.timeout
        )


# ============================================================================
# EasyOCR Engine
# ============================================================================

def group_detections_into_lines(
    detections: List[Tuple[Any, str, float]]
) -> List[str]:
    """
    Group word detections into text lines.

    A detection joins the current line when its vertical center lies within
    half the median box height of the line's center. Words in a line are
    ordered left to right.

    Args:
        detections: EasyOCR results as (polygon, text, confidence)

    Returns:
        Text lines, top to bottom
    """
    boxes = []
    for polygon, text, _conf in detections:
        if not text or not text.strip():
            continue
        xs = [p[0] for p in polygon]
        ys = [p[1] for p in polygon]
        boxes.append((min(xs), (min(ys) + max(ys)) / 2.0, max(ys) - min(ys), text.strip()))

    if not boxes:
        return []

    tolerance = float(np.median([b[2] for b in boxes])) / 2.0
    boxes.sort(key=lambda b: b[1])

    lines = []
    current = [boxes[0]]
    for box in boxes[1:]:
        center = np.mean([b[1] for b in current])
        if abs(box[1] - center) <= tolerance:
            current.append(box)
        else:
            lines.append(current)
            current = [box]
    lines.append(current)

    return [' '.join(b[3] for b in sorted(line, key=lambda b: b[0])) for line in lines]


class EasyOCREngine(OCREngine):
    """OCR using EasyOCR."""

    name = "easyocr"

    def __init__(
        self,
        language: str = "eng",
        use_gpu: bool = False
    ):
        super().__init__(language=language)
        try:
            import easyocr

            # Map language codes
            lang_map = {"eng": "en", "chi_sim": "ch_sim", "chi_tra": "ch_tra"}
            easy_lang = lang_map.get(language, language)

            self.reader = easyocr.Reader(
                [easy_lang],
                gpu=use_gpu,
                verbose=False
            )
        except ImportError:
            raise ImportError(
                "EasyOCR not available. Install with: pip install easyocr"
            )

    def _recognize_text(
        self,
        image: np.ndarray,
        progress_callback: Optional[ProgressCallback]
    ) -> str:
        self._report(progress_callback, 10)
        detections = self.reader.readtext(image)
        self._report(progress_callback, 90)

        return '\n'.join(group_detections_into_lines(detections))


# ============================================================================
# Engine Factory
# ============================================================================

ENGINE_NAMES = ("tesseract", "easyocr")


def create_engine(
    engine_name: str = "tesseract",
    language: str = "eng",
    use_gpu: bool = False,
    tesseract_config: str = "--oem 3 --psm 6",
    char_whitelist: Optional[str] = DEFAULT_CHAR_WHITELIST
) -> OCREngine:
    """
    Create an OCR engine instance.

    Raises:
        ValueError: If the engine name is unknown
        ImportError: If the engine's library or binary is missing
    """
    if engine_name == "tesseract":
        engine = TesseractEngine(
            language=language,
            config=tesseract_config,
            char_whitelist=char_whitelist
        )
    elif engine_name == "easyocr":
        engine = EasyOCREngine(language=language, use_gpu=use_gpu)
    else:
        raise ValueError(f"Unknown OCR engine: {engine_name}")

    logger.info(f"Initialized OCR engine: {engine_name}")
    return engine


# ============================================================================
# Example Usage
# ============================================================================

if __name__ == "__main__":
    import sys
    import cv2

    if len(sys.argv) > 1:
        image = cv2.imread(sys.argv[1])
        if image is None:
            print(f"Failed to load image: {sys.argv[1]}")
            sys.exit(1)

        engine = create_engine("tesseract")
        result = engine.recognize(image, progress_callback=lambda p: print(f"{p}%"))

        print(f"Engine used: {result.engine_used}")
        print(f"Lines found: {result.line_count}")
        print("\n--- Text ---")
        print(result.text)
    else:
        print("Usage: python ocr_text.py <image_path>")
