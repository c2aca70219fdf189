#!/usr/bin/env python
"""
Streamlit Web UI for the Spreadsheet OCR pipeline.

Run with:
    streamlit run sheet_ocr/app.py

Features:
- Upload a spreadsheet screenshot (PNG, JPG, TIFF, BMP, WEBP)
- Progress bar while OCR runs
- Preview of the reconstructed table
- CSV download
"""

import streamlit as st

from sheet_ocr.config import get_config
from sheet_ocr.utils.converter import (
    SpreadsheetConverter,
    Idle,
    Processing,
    Success,
    Failed,
)
from sheet_ocr.utils.errors import EmptyTableError
from sheet_ocr.utils.export import CSVExporter

# Page config must be first Streamlit command
st.set_page_config(
    page_title="Spreadsheet OCR",
    page_icon="📊",
    layout="centered"
)


def init_session_state():
    """Initialize session state variables."""
    if "conversion" not in st.session_state:
        st.session_state.conversion = Idle()
    if "upload_id" not in st.session_state:
        st.session_state.upload_id = None


@st.cache_data(ttl=300)  # Cache for 5 minutes
def check_engine_availability():
    """Check which OCR engines are available."""
    engines = {}

    try:
        import pytesseract
        pytesseract.get_tesseract_version()
        engines["tesseract"] = {"available": True, "error": None}
    except Exception as e:
        engines["tesseract"] = {"available": False, "error": str(e)[:50]}

    try:
        import easyocr
        engines["easyocr"] = {"available": True, "error": None}
    except ImportError:
        engines["easyocr"] = {"available": False, "error": "pip install easyocr"}

    return engines


def render_sidebar() -> dict:
    """Render sidebar with settings."""
    config = get_config()
    engines = check_engine_availability()

    st.sidebar.header("⚙️ Settings")

    ocr_options = {
        "Tesseract OCR": "tesseract",
        "EasyOCR": "easyocr",
    }
    ocr_display = st.sidebar.selectbox(
        "OCR Engine",
        list(ocr_options.keys()),
        index=list(ocr_options.values()).index(config.ocr.engine)
        if config.ocr.engine in ocr_options.values() else 0,
    )
    ocr_engine = ocr_options[ocr_display]

    if not engines.get(ocr_engine, {}).get("available"):
        st.sidebar.warning(f"{ocr_display} unavailable: {engines[ocr_engine]['error']}")

    language = st.sidebar.text_input("Language", value=config.ocr.language)

    return {
        "ocr_engine": ocr_engine,
        "language": language,
        "use_gpu": config.ocr.use_gpu,
        "engine_options": {
            "tesseract_config": config.ocr.tesseract_config,
            "char_whitelist": config.ocr.char_whitelist,
        },
    }


def run_conversion(uploaded_file, settings: dict):
    """Run OCR on an upload, driving a progress bar from the session states."""
    progress_bar = st.progress(0, text="Processing image... 0%")

    def on_state_change(state):
        if isinstance(state, Processing):
            progress_bar.progress(state.progress, text=f"Processing image... {state.progress}%")

    converter = SpreadsheetConverter(
        ocr_engine=settings["ocr_engine"],
        language=settings["language"],
        use_gpu=settings["use_gpu"],
        engine_options=settings["engine_options"],
        on_state_change=on_state_change
    )

    state = converter.submit_upload(
        uploaded_file.getvalue(),
        filename=uploaded_file.name,
        mime_type=uploaded_file.type
    )
    progress_bar.empty()
    return state


def render_table(state: Success):
    """Render the reconstructed table with a CSV download."""
    table = state.table
    config = get_config()

    if table.is_empty:
        st.info("No table rows were recognized in this image.")
        return

    try:
        exporter = CSVExporter(
            delimiter=config.export.delimiter,
            quote_char=config.export.quote_char
        )
        payload = exporter.render(table)
    except EmptyTableError as e:
        st.error(str(e))
        return

    st.download_button(
        "📥 Export CSV",
        payload,
        file_name=config.export.csv_filename,
        mime=config.export.csv_mime_type,
    )

    st.caption(f"{table.num_rows} rows × {table.num_cols} columns")
    st.markdown(table.to_markdown())

    if state.ocr_result is not None:
        with st.expander("Recognized text"):
            st.code(state.ocr_result.text)


def main():
    """Main application."""
    init_session_state()

    st.title("📊 Spreadsheet OCR Converter")

    settings = render_sidebar()

    uploaded_file = st.file_uploader(
        "Upload spreadsheet screenshot",
        help="Any image file; the first text line is used as the header row"
    )

    if uploaded_file is not None and uploaded_file.file_id != st.session_state.upload_id:
        # A new upload supersedes the previous result
        st.session_state.upload_id = uploaded_file.file_id
        st.session_state.conversion = run_conversion(uploaded_file, settings)

    state = st.session_state.conversion

    if isinstance(state, Failed):
        st.error(state.message)
    elif isinstance(state, Success):
        render_table(state)


if __name__ == "__main__":
    main()
