"""
tire_intake - Tire price-list photo extraction

Turns photographed supplier price / stock tables into normalized inventory
rows, using either a cloud multimodal model or local Tesseract OCR.
"""

__version__ = "1.0.0"

from tire_intake.core.config import validate_config, get_config_summary
from tire_intake.core.errors import TireIntakeError
from tire_intake.core.schema import ExtractedRow, StockEntry
from tire_intake.core.normalizer import normalize_row
from tire_intake.extraction import extract_table_from_image, extract_table_from_image_tesseract
from tire_intake.pipelines import extract_rows, import_image

__all__ = [
    "validate_config",
    "get_config_summary",
    "TireIntakeError",
    "ExtractedRow",
    "StockEntry",
    "normalize_row",
    "extract_table_from_image",
    "extract_table_from_image_tesseract",
    "extract_rows",
    "import_image",
]
