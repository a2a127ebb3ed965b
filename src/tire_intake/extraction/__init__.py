"""Image-to-row extraction engines."""

from tire_intake.extraction.processor import extract_table_from_image
from tire_intake.extraction.ocr import extract_table_from_image_tesseract
from tire_intake.extraction.table_parser import parse_table_text

__all__ = [
    "extract_table_from_image",
    "extract_table_from_image_tesseract",
    "parse_table_text",
]
