"""
Conversion session for the spreadsheet OCR pipeline.

Provides:
- Explicit conversion states (Idle, Processing, Success, Failed)
- Orchestration of image input, OCR and table reconstruction
- Supersession of in-flight runs by newer submissions
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union, Callable, Dict, Any
import numpy as np

from .errors import EmptyTableError, RecognitionFailure, UnsupportedInputError
from .export import CSVExporter
from .io import decode_image, ensure_image_upload
from .ocr_text import OCREngine, OCRResult
from .tables import TableBuilder, TextTable

logger = logging.getLogger(__name__)

RECOGNITION_ERROR_MESSAGE = "Error processing image. Please try again."


# ============================================================================
# Conversion States
# ============================================================================

@dataclass(frozen=True)
class Idle:
    """Nothing submitted yet, or the session was reset."""


@dataclass(frozen=True)
class Processing:
    """OCR is running; progress is an integer percentage."""
    progress: int = 0


@dataclass(frozen=True)
class Success:
    """A table was reconstructed."""
    table: TextTable
    ocr_result: Optional[OCRResult] = None


@dataclass(frozen=True)
class Failed:
    """The current attempt failed; message is shown to the user."""
    message: str


ConversionState = Union[Idle, Processing, Success, Failed]
StateListener = Callable[[ConversionState], None]


# ============================================================================
# Spreadsheet Converter
# ============================================================================

class SpreadsheetConverter:
    """
    Drives one image at a time through OCR and table reconstruction.

    Every submission starts a new run. Progress and results that arrive for
    a run which has since been superseded are discarded.
    """

    def __init__(
        self,
        ocr_engine: str = "tesseract",
        language: str = "eng",
        use_gpu: bool = False,
        engine: Optional[OCREngine] = None,
        engine_options: Optional[Dict[str, Any]] = None,
        exporter: Optional[CSVExporter] = None,
        on_state_change: Optional[StateListener] = None
    ):
        self.ocr_engine = ocr_engine
        self.language = language
        self.use_gpu = use_gpu
        self.engine_options = engine_options or {}
        self.on_state_change = on_state_change

        self.table_builder = TableBuilder()
        self.exporter = exporter or CSVExporter()

        # Engine is created lazily unless injected
        self._engine = engine
        self._state: ConversionState = Idle()
        self._run_id = 0

    @property
    def engine(self) -> OCREngine:
        if self._engine is None:
            from .ocr_text import create_engine
            self._engine = create_engine(
                self.ocr_engine,
                language=self.language,
                use_gpu=self.use_gpu,
                **self.engine_options
            )
        return self._engine

    @property
    def state(self) -> ConversionState:
        return self._state

    @property
    def progress(self) -> int:
        if isinstance(self._state, Processing):
            return self._state.progress
        return 0

    @property
    def table(self) -> Optional[TextTable]:
        if isinstance(self._state, Success):
            return self._state.table
        return None

    def _set_state(self, state: ConversionState):
        self._state = state
        if self.on_state_change is not None:
            self.on_state_change(state)

    def _start_run(self) -> int:
        self._run_id += 1
        self._set_state(Processing(0))
        return self._run_id

    def _is_current(self, run_id: int) -> bool:
        return run_id == self._run_id

    def reset(self) -> ConversionState:
        """Drop any result or in-flight run and return to Idle."""
        self._run_id += 1
        self._set_state(Idle())
        return self._state

    def submit_upload(
        self,
        data: bytes,
        filename: Optional[str] = None,
        mime_type: Optional[str] = None
    ) -> ConversionState:
        """
        Process an uploaded file.

        Non-image or undecodable uploads end in Failed without running OCR.
        """
        try:
            ensure_image_upload(filename, mime_type)
            image = decode_image(data)
        except UnsupportedInputError as e:
            self._set_state(Failed(str(e)))
            return self._state

        return self.process(image)

    def process(self, image: np.ndarray) -> ConversionState:
        """
        Run OCR on an image and reconstruct its table.

        Returns:
            The session state after the run (Success or Failed), or the
            newer run's state if this run was superseded meanwhile
        """
        run_id = self._start_run()

        def on_progress(percent: int):
            if self._is_current(run_id):
                self._set_state(Processing(percent))

        try:
            result = self.engine.recognize(image, progress_callback=on_progress)
        except (RecognitionFailure, ImportError, ValueError) as e:
            logger.error(f"OCR error: {e}")
            if self._is_current(run_id):
                self._set_state(Failed(RECOGNITION_ERROR_MESSAGE))
            return self._state

        if not self._is_current(run_id):
            logger.info(f"Discarding result of superseded run {run_id}")
            return self._state

        table = self.table_builder.build(result.text)
        self._set_state(Success(table=table, ocr_result=result))
        return self._state

    def process_text(self, raw_text: str) -> ConversionState:
        """Reconstruct a table from previously recognized text."""
        self._start_run()
        table = self.table_builder.build(raw_text)
        self._set_state(Success(table=table))
        return self._state

    def export_csv(self) -> str:
        """
        Export the current table as a CSV payload.

        Raises:
            EmptyTableError: If there is no table or it has no rows
        """
        table = self.table
        if table is None:
            raise EmptyTableError("No table to export")
        return self.exporter.render(table)
