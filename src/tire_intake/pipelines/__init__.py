"""Stock import from price-list photos."""

from tire_intake.pipelines.stock_import import (
    StockImportResult,
    extract_rows,
    import_image,
    rows_to_stock_entries,
    summarize_entries,
)

__all__ = [
    "StockImportResult",
    "extract_rows",
    "import_image",
    "rows_to_stock_entries",
    "summarize_entries",
]
