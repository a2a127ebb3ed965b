"""
Stock import from price-list photos.

Picks an extraction engine, then turns the extracted rows into incoming-stock
entries in the form the shop's stock table stores them. Persisting the
entries is left to the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from anthropic import Anthropic

from tire_intake.core.normalizer import SELLING_MARKUP, round_half_up, to_db_size, to_number
from tire_intake.core.schema import ExtractedRow, StockEntry
from tire_intake.extraction.ocr import extract_table_from_image_tesseract
from tire_intake.extraction.processor import extract_table_from_image

logger = logging.getLogger(__name__)

ENGINE_CLOUD = "cloud"
ENGINE_LOCAL = "local"

# Stored when a row has no readable brand ("unknown")
UNKNOWN_BRAND = "Noma'lum"


@dataclass
class StockImportResult:
    """Outcome of importing one photo."""
    rows: List[ExtractedRow]
    entries: List[StockEntry]
    skipped: int = 0
    engine: str = ENGINE_CLOUD
    summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engine": self.engine,
            "rows": [row.to_dict() for row in self.rows],
            "entries": [entry.to_dict() for entry in self.entries],
            "skipped": self.skipped,
            "summary": self.summary,
        }


def extract_rows(
    image_input,
    engine: str = ENGINE_CLOUD,
    api_key: Optional[str] = None,
    client: Optional[Anthropic] = None,
) -> List[ExtractedRow]:
    """
    Run the chosen extraction engine over an image.

    Args:
        image_input: Raw image bytes or a base64 / data-URL string
        engine: "cloud" (multimodal model) or "local" (Tesseract)
        api_key: Credential for the cloud engine
        client: Pre-built Anthropic client for the cloud engine

    Raises:
        ValueError: For an unknown engine name
    """
    if engine == ENGINE_CLOUD:
        return extract_table_from_image(image_input, api_key=api_key, client=client)
    if engine == ENGINE_LOCAL:
        return extract_table_from_image_tesseract(image_input)
    raise ValueError(f"Unknown engine: {engine!r} (expected '{ENGINE_CLOUD}' or '{ENGINE_LOCAL}')")


def row_to_stock_entry(row: ExtractedRow, shop_id: Optional[int] = None) -> Optional[StockEntry]:
    """Stock entry for one row, or None when the row has no pieces."""
    quantity = max(0, round_half_up(to_number(row.quantity)))
    if quantity < 1:
        return None

    purchase_price = round_half_up(to_number(row.price))
    selling_price = round_half_up(to_number(row.selling_price)) or purchase_price + SELLING_MARKUP
    brand = (row.brand or "").strip() or UNKNOWN_BRAND

    return StockEntry(
        size=to_db_size(row.size) or row.size,
        brand=brand,
        quantity=quantity,
        purchase_price=purchase_price,
        selling_price=selling_price,
        total_value=quantity * selling_price,
        shop_id=shop_id,
    )


def rows_to_stock_entries(rows: List[ExtractedRow], shop_id: Optional[int] = None) -> List[StockEntry]:
    entries = []
    for row in rows:
        entry = row_to_stock_entry(row, shop_id)
        if entry is None:
            logger.debug(f"Skipping row without pieces: {row.brand!r} {row.size!r}")
            continue
        entries.append(entry)
    return entries


def summarize_entries(entries: List[StockEntry]) -> Dict[str, int]:
    """Line count, piece count, and purchase / sale value of a batch."""
    return {
        "lines": len(entries),
        "pieces": sum(entry.quantity for entry in entries),
        "purchase_value": sum(entry.quantity * entry.purchase_price for entry in entries),
        "sale_value": sum(entry.total_value for entry in entries),
    }


def import_image(
    image_input,
    engine: str = ENGINE_CLOUD,
    shop_id: Optional[int] = None,
    api_key: Optional[str] = None,
    client: Optional[Anthropic] = None,
) -> StockImportResult:
    """
    Extract rows from a photo and convert them to stock entries.

    Engine failures propagate unchanged; rows without pieces are counted
    in `skipped`.
    """
    rows = extract_rows(image_input, engine=engine, api_key=api_key, client=client)
    entries = rows_to_stock_entries(rows, shop_id=shop_id)
    skipped = len(rows) - len(entries)

    logger.info(f"Prepared {len(entries)} stock entries from {len(rows)} rows ({skipped} skipped)")

    return StockImportResult(
        rows=rows,
        entries=entries,
        skipped=skipped,
        engine=engine,
        summary=summarize_entries(entries),
    )
