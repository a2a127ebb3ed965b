"""
Row Schemas for Stock-List Extraction

Both extraction engines (cloud model and local OCR) emit `ExtractedRow`
records with the same shape. The stock import step turns accepted rows into
`StockEntry` records in the form the shop's stock table stores them.

Key rules:
1. `size` is always canonical: width/aspect/rim, e.g. "165/70/13"
2. `selling_price` is derived (price + fixed markup), never read from a source
3. Rows carry no identity; they are handed straight to the import step
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Union

Number = Union[int, float]


# ============================================================================
# EXTRACTION OUTPUT
# ============================================================================

@dataclass
class ExtractedRow:
    """One line of a photographed price / stock table."""
    brand: str
    size: str
    quantity: int
    price: Number
    total: Number
    selling_price: Number

    def to_dict(self) -> Dict[str, Any]:
        """Row in wire form for the inventory import step."""
        return asdict(self)


# ============================================================================
# STOCK IMPORT
# ============================================================================

@dataclass
class StockEntry:
    """
    An incoming-stock line ready to be stored.

    `size` uses the storage form "165/70 R13" rather than the canonical
    slash form used during extraction.
    """
    size: str
    brand: str
    quantity: int
    purchase_price: int
    selling_price: int
    total_value: int
    shop_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
