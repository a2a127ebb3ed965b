"""
Line-by-line table reconstruction from raw OCR text.

Expected layout of a source row (columns may be missing or merged by OCR):

    product name (brand + size) | unit | quantity | unit price | line total

Each line goes through the same stages:

    tokenize -> price/total pair -> tire size -> brand -> row

A stage that cannot recover its field drops the line. Nothing in this module
raises for bad input; an unreadable table simply yields fewer rows.
"""

import logging
import re
from typing import List, Optional, Tuple

from tire_intake.core.normalizer import SELLING_MARKUP, round_half_up
from tire_intake.core.schema import ExtractedRow, Number

logger = logging.getLogger(__name__)

# Total / summary / header markers in Uzbek (Latin and Cyrillic), Russian and English
SUMMARY_LINE_RE = re.compile(r"жами|jami|total|умумий|итого|таблица|товар", re.IGNORECASE)

MIN_TOKENS = 3

MAX_QUANTITY = 999

# Allowed relative gap between quantity * price and the printed total
TOTAL_TOLERANCE = 0.08

# Price and total are the right-most columns; only the tail of the line is searched
PAIR_WINDOW = 4

WIDTH_RANGE = (145, 355)
ASPECT_RANGE = (45, 95)
RIM_RANGE = (10, 24)

# (pattern on the upper-cased line, canonical key, carries a batch suffix), checked in order
KNOWN_BRANDS = [
    (re.compile(r"COTECHO"), "COTECHOO", True),
    (re.compile(r"IMPERATI"), "IMPERATI", False),
    (re.compile(r"VAGNER"), "VAGNER", False),
    (re.compile(r"\bTR\b"), "TR", False),
]

# OCR spellings of the same brand mapped to the name used in stock
BRAND_CANONICAL = {
    "COTECHO": "Cotechoo",
    "COTECHOO": "Cotechoo",
    "IMPERATI": "Imperati",
    "VAGNER": "Vagner",
    "TR": "TR",
}

_CHO1_RE = re.compile(r"\bcho\s*1\b|cho1|ch01|ch0\s*1\b", re.IGNORECASE)
_CHO2_RE = re.compile(r"\bcho\s*2\b|cho2|ch02|ch0\s*2\b", re.IGNORECASE)
_NUMBER_PREFIX_RE = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")
_LETTER_RE = re.compile(r"[A-Za-z]")
_WORD_RE = re.compile(r"[A-Za-z]{2,}")


# =============================================================================
# Tokenizing
# =============================================================================

def split_lines(text: str) -> List[str]:
    """Non-empty lines of OCR output, each with runs of whitespace collapsed."""
    lines = []
    for line in (text or "").splitlines():
        clean = re.sub(r"\s+", " ", line).strip()
        if clean:
            lines.append(clean)
    return lines


def tokenize(line: str) -> List[str]:
    return [token for token in line.split(" ") if token]


def is_summary_line(line: str) -> bool:
    return bool(SUMMARY_LINE_RE.search(line))


def parse_decimal_token(token: str) -> Optional[float]:
    """
    Read a number from an OCR token, or None.

    Everything but digits, sign, comma and dot is stripped first; the first
    comma counts as a decimal point ("3200,00" -> 3200.0). Like a
    prefix parse, trailing garbage after the number is ignored.
    """
    if not token:
        return None
    text = re.sub(r"[^\d,.\-]", "", str(token))
    if not text:
        return None
    text = text.replace(",", ".", 1)
    match = _NUMBER_PREFIX_RE.match(text)
    if not match:
        return None
    return float(match.group(0))


def numeric_candidates(tokens: List[str]) -> List[float]:
    """Positive numeric values in token order."""
    values = []
    for token in tokens:
        value = parse_decimal_token(token)
        if value is not None and value > 0:
            values.append(value)
    return values


# =============================================================================
# Price / total recovery
# =============================================================================

def check_pair(price: float, total: float) -> Optional[Tuple[float, float]]:
    """Accept (price, total) when total is a whole multiple of price within tolerance."""
    if price <= 0 or total <= 0 or total < price:
        return None
    quantity = round_half_up(total / price)
    if quantity < 1 or quantity > MAX_QUANTITY:
        return None
    if abs(quantity * price - total) > max(1, total * TOTAL_TOLERANCE):
        return None
    return price, total


def try_pair(a: float, b: float) -> Optional[Tuple[float, float]]:
    """
    Try both orders of two candidates, then with a dropped decimal comma undone.

    OCR often reads "35,00" as "3500", so a candidate of 100 or more is also
    tried divided by 100: first a, then b, then both.
    """
    found = check_pair(a, b) or check_pair(b, a)
    if found:
        return found
    if a >= 100:
        found = check_pair(a / 100, b) or check_pair(b, a / 100)
        if found:
            return found
    if b >= 100:
        found = check_pair(a, b / 100) or check_pair(b / 100, a)
        if found:
            return found
    if a >= 100 and b >= 100:
        found = check_pair(a / 100, b / 100) or check_pair(b / 100, a / 100)
    return found


def find_price_and_total(tokens: List[str]) -> Optional[Tuple[float, float]]:
    """
    Find the unit price and line total among the last numbers of a line.

    Pairs are tried right to left: each of the last four candidates against
    the candidates before it, down to the fifth from the end.
    """
    values = numeric_candidates(tokens)
    n = len(values)
    if n < 2:
        return None

    for i in range(n - 1, max(0, n - PAIR_WINDOW) - 1, -1):
        for j in range(i - 1, max(0, n - PAIR_WINDOW - 1) - 1, -1):
            found = try_pair(values[i], values[j])
            if found:
                return found
    return None


# =============================================================================
# Size recovery
# =============================================================================

def is_valid_tire_size(width: str, aspect: str, rim: str) -> bool:
    w, h, r = int(width), int(aspect), int(rim)
    return (
        WIDTH_RANGE[0] <= w <= WIDTH_RANGE[1]
        and ASPECT_RANGE[0] <= h <= ASPECT_RANGE[1]
        and RIM_RANGE[0] <= r <= RIM_RANGE[1]
    )


def size_from_digits(digits: str) -> Optional[str]:
    """Read the leading 3+2+2 digits as a size, if they form a valid one."""
    width, aspect, rim = digits[0:3], digits[3:5], digits[5:7]
    if len(width) != 3 or len(aspect) != 2 or len(rim) != 2:
        return None
    if not is_valid_tire_size(width, aspect, rim):
        return None
    return f"{width}/{aspect}/{rim}"


def find_size_in_line(line: str) -> Optional[str]:
    """
    First valid 7-digit size signature in the line's digits, left to right.

    "Largo 1657013 4 ..." and "Largo 165/70 R13 4 ..." both give "165/70/13".
    """
    digits = re.sub(r"\D", "", line)
    for start in range(len(digits) - 6):
        size = size_from_digits(digits[start:start + 7])
        if size:
            return size
    return None


def fallback_size(tokens: List[str]) -> Optional[str]:
    """
    Rebuild the size from the numeric tokens left of quantity, price and total.

    When the line has no such tokens, the digits of the brand token are used
    (sizes glued to the name, e.g. "Largo165").
    """
    numeric_tokens = [token for token in tokens if re.search(r"\d", token)]
    source = numeric_tokens[:max(0, len(numeric_tokens) - 3)]
    digits = "".join(re.sub(r"\D", "", token) for token in source)
    if not digits:
        digits = re.sub(r"\D", "", first_word_token(tokens))
    if len(digits) < 5:
        return None
    return size_from_digits(digits)


def recover_size(line: str, tokens: List[str]) -> Optional[str]:
    return find_size_in_line(line) or fallback_size(tokens)


# =============================================================================
# Brand recovery
# =============================================================================

def first_word_token(tokens: List[str]) -> str:
    for token in tokens:
        if _WORD_RE.search(token):
            return token
    return tokens[0] if tokens else ""


def full_brand_from_tokens(tokens: List[str], size: Optional[str]) -> Optional[str]:
    """
    Join every alphabetic token that is not part of the size.

    Keeps multi-word names such as "Zitto Ravon" or "Cotecho, Cho1" intact.
    """
    size_parts = size.split("/") if size else []
    rim = f"R{size_parts[2]}" if len(size_parts) > 2 else ""
    exclude = set(size_parts)
    exclude.add(rim)

    brand_tokens = []
    for token in tokens:
        if not _LETTER_RE.search(token):
            continue
        if token.isdigit():
            continue
        if re.match(r"^\d{3}/\d{2}", token):
            continue
        if re.match(r"^R\d{2}$", token, re.IGNORECASE):
            continue
        if token in exclude:
            continue
        brand_tokens.append(token)

    full = re.sub(r"\s+", " ", " ".join(brand_tokens)).strip()
    return full or None


def batch_suffix(line: str) -> str:
    """", Cho2" / ", Cho1" when the line carries a batch qualifier."""
    if _CHO2_RE.search(line):
        return ", Cho2"
    if _CHO1_RE.search(line):
        return ", Cho1"
    return ""


def known_brand(line: str) -> Optional[str]:
    """Match the line against the known-brand table."""
    upper = line.upper()
    for pattern, key, with_suffix in KNOWN_BRANDS:
        if pattern.search(upper):
            return BRAND_CANONICAL[key] + (batch_suffix(line) if with_suffix else "")
    return None


def extract_brand(tokens: List[str], size: Optional[str]) -> Optional[str]:
    """
    Brand for a line: free-text tokens first, then the known-brand table,
    then the longest letter run of the first word-bearing token.
    """
    full = full_brand_from_tokens(tokens, size)
    if full:
        return full

    known = known_brand(" ".join(tokens))
    if known:
        return known

    words = _WORD_RE.findall(first_word_token(tokens))
    if not words:
        return None
    longest = max(words, key=len)
    return BRAND_CANONICAL.get(longest.upper(), longest)


# =============================================================================
# Table
# =============================================================================

def parse_line(line: str) -> Optional[ExtractedRow]:
    """Turn one cleaned OCR line into a row, or None when any field is missing."""
    if is_summary_line(line):
        logger.debug(f"Skipping summary line: {line!r}")
        return None

    tokens = tokenize(line)
    if len(tokens) < MIN_TOKENS:
        logger.debug(f"Skipping short line: {line!r}")
        return None

    pair = find_price_and_total(tokens)
    if not pair:
        logger.debug(f"No price/total pair: {line!r}")
        return None
    price, total = pair
    quantity = round_half_up(total / price)

    size = recover_size(line, tokens)
    if not size:
        logger.debug(f"No tire size: {line!r}")
        return None

    brand = extract_brand(tokens, size)
    if not brand or not brand.strip():
        logger.debug(f"No brand: {line!r}")
        return None

    price_value = _tidy(price)
    return ExtractedRow(
        brand=brand.strip(),
        size=size,
        quantity=quantity,
        price=price_value,
        total=_tidy(total),
        selling_price=price_value + SELLING_MARKUP,
    )


def parse_table_text(text: str) -> List[ExtractedRow]:
    """Rebuild table rows from raw OCR text; unreadable lines are dropped."""
    rows = []
    for line in split_lines(text):
        row = parse_line(line)
        if row is not None:
            rows.append(row)
    return rows


def _tidy(value: float) -> Number:
    return int(value) if float(value).is_integer() else value
