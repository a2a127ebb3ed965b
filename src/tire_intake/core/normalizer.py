"""
Row normalization shared by both extraction engines.

Raw values (model JSON or OCR-recovered numbers) pass through here so that
every emitted row has a canonical size, a non-negative integer quantity and
a selling price recomputed from the unit cost.
"""

import logging
import math
import re
from typing import Any, Dict, Optional

from tire_intake.core.schema import ExtractedRow, Number

logger = logging.getLogger(__name__)

# Fixed additive markup over unit cost, in source currency units
SELLING_MARKUP = 100000

CANONICAL_SIZE_RE = re.compile(r"^\d{3}/\d{2}/\d{2}$")
_SIZE_GROUPS_RE = re.compile(r"(\d{3})[/\s]*(\d{2})[/\s]*(\d{2})")
_RIM_SEPARATOR_RE = re.compile(r"\s*[Rr]\s*")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def to_number(value: Any) -> Number:
    """
    Coerce a raw value to a number, 0 when it cannot be parsed.

    Integral results come back as `int` so JSON output stays "320000"
    rather than "320000.0".
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        result = value
    else:
        text = re.sub(r"\s+", "", str(value))
        if not text:
            return 0
        try:
            result = float(text)
        except ValueError:
            return 0
    if math.isnan(result) or math.isinf(result):
        return 0
    if result.is_integer():
        return int(result)
    return result


def selling_price_for(price: Number) -> Number:
    """Selling price derived from unit cost."""
    return price + SELLING_MARKUP


def normalize_size(raw: Any) -> str:
    """
    Bring a tire size to "width/aspect/rim" form.

    "175 70 R13" and "175/70R13" both become "175/70/13". When no
    3+2+2 digit run can be found, the cleaned partial string is returned
    unchanged; callers decide whether to keep such a row.
    """
    size = "" if raw is None else str(raw).strip()
    size = _RIM_SEPARATOR_RE.sub("/", size)
    size = re.sub(r"\s+", "/", size)
    size = re.sub(r"/+", "/", size)
    if CANONICAL_SIZE_RE.match(size):
        return size
    match = _SIZE_GROUPS_RE.search(size)
    if match:
        return f"{match.group(1)}/{match.group(2)}/{match.group(3)}"
    return size


def is_canonical_size(size: str) -> bool:
    return bool(CANONICAL_SIZE_RE.match(size or ""))


def to_db_size(size: Optional[str]) -> Optional[str]:
    """Canonical "165/70/13" to the stock table's "165/70 R13" form."""
    if not size or not isinstance(size, str):
        return size
    match = _SIZE_GROUPS_RE.search(size.strip())
    if not match:
        return size
    return f"{match.group(1)}/{match.group(2)} R{match.group(3)}"


def normalize_row(raw: Dict[str, Any]) -> ExtractedRow:
    """
    Normalize one raw row dict into an ExtractedRow.

    Any `selling_price` present in `raw` is ignored and recomputed.
    """
    price = to_number(raw.get("price"))
    quantity = max(0, round_half_up(to_number(raw.get("quantity"))))
    brand = raw.get("brand")

    return ExtractedRow(
        brand="" if brand is None else str(brand).strip(),
        size=normalize_size(raw.get("size")),
        quantity=quantity,
        price=price,
        total=to_number(raw.get("total")),
        selling_price=selling_price_for(price),
    )


def accept_cloud_row(row: ExtractedRow) -> Optional[ExtractedRow]:
    """
    Apply the row invariants to a model-produced row.

    The model is trusted for field mapping, but a row only survives with a
    positive quantity and a canonical size. Negative money values are
    floored at zero.
    """
    if row.quantity < 1:
        logger.warning(f"Dropping row without quantity: {row.brand!r} {row.size!r}")
        return None
    if not is_canonical_size(row.size):
        logger.warning(f"Dropping row with unreadable size: {row.brand!r} {row.size!r}")
        return None
    if row.price < 0 or row.total < 0:
        price = max(0, row.price)
        row.price = price
        row.total = max(0, row.total)
        row.selling_price = selling_price_for(price)
    return row
