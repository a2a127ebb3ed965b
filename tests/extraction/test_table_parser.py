"""Tests for OCR table reconstruction."""

import re

import pytest

from tire_intake.core.normalizer import SELLING_MARKUP
from tire_intake.extraction.table_parser import (
    BRAND_CANONICAL,
    check_pair,
    extract_brand,
    fallback_size,
    find_price_and_total,
    find_size_in_line,
    is_summary_line,
    parse_decimal_token,
    parse_line,
    parse_table_text,
    split_lines,
    try_pair,
)


# =============================================================================
# Tokenizing
# =============================================================================

def test_split_lines_drops_blanks_and_collapses_spaces():
    assert split_lines("  a   b \n\n\r\nc\t d ") == ["a b", "c d"]
    assert split_lines("") == []


@pytest.mark.parametrize("line", [
    "Jami: 1280000",
    "JAMI 4 1280000",
    "Жами 1980000",
    "Total 12 3000",
    "Итого: 500",
    "Умумий сумма 100 200",
    "Товар номи Сони Нархи",
])
def test_summary_lines(line):
    assert is_summary_line(line)


def test_regular_line_is_not_summary():
    assert not is_summary_line("Largo 165/70 R13 4 320000 1280000")


@pytest.mark.parametrize("token, expected", [
    ("320000", 320000.0),
    ("3200,00", 3200.0),
    ("35.50", 35.5),
    ("12.800.00", 12.8),
    ("1,280,000", 1.28),
    ("$450", 450.0),
    ("165/70/13", 1657013.0),
    ("abc", None),
    ("-", None),
    ("", None),
])
def test_parse_decimal_token(token, expected):
    assert parse_decimal_token(token) == expected


# =============================================================================
# Price / total
# =============================================================================

def test_price_total_pair_from_tail():
    tokens = ["Largo", "165/70/13", "4", "320000", "1280000"]
    assert find_price_and_total(tokens) == (320000, 1280000)


def test_price_total_with_decimal_commas():
    tokens = ["Largo", "165/70/13", "4", "3200,00", "12800,00"]
    price, total = find_price_and_total(tokens)
    assert price == 3200.00
    assert total == 12800.00
    assert round(total / price) == 4


def test_dropped_comma_on_price_is_undone():
    """'2,00' read as '200' is retried as 2."""
    tokens = ["Vagner", "185/65/15", "40", "200", "80"]
    assert find_price_and_total(tokens) == (2, 80)


def test_try_pair_precedence():
    assert try_pair(100, 400) == (100, 400)
    assert try_pair(400, 100) == (100, 400)
    assert try_pair(80, 200) == (2, 80)
    assert try_pair(200, 80) == (2, 80)
    assert try_pair(7, 5) is None


def test_check_pair_tolerance():
    assert check_pair(100, 400) == (100, 400)
    assert check_pair(100, 430) == (100, 430)
    assert check_pair(20, 50) is None


def test_check_pair_rejects_bad_values():
    assert check_pair(1, 5000) is None
    assert check_pair(0, 10) is None
    assert check_pair(10, 5) is None


def test_no_pair():
    assert find_price_and_total(["Largo", "tires", "12"]) is None
    assert find_price_and_total(["Largo", "x", "7", "5"]) is None


# =============================================================================
# Size
# =============================================================================

@pytest.mark.parametrize("line, expected", [
    ("Largo 165/70 R13 4 320000 1280000", "165/70/13"),
    ("Largo 1757013 2 1 2", "175/70/13"),
    ("X 12 205/55R16 4", "205/55/16"),
    ("Largo 4 320000 1280000", None),
])
def test_find_size_in_line(line, expected):
    assert find_size_in_line(line) == expected


def test_size_ranges_are_enforced():
    assert find_size_in_line("Item 400/70/13") is None
    assert find_size_in_line("Item 165/30/13") is None
    assert find_size_in_line("Item 165/70/30") is None


def test_fallback_size_uses_tokens_before_quantity_price_total():
    tokens = ["Largo", "165", "70", "13", "4", "100", "400"]
    assert fallback_size(tokens) == "165/70/13"


def test_fallback_size_requires_seven_digits():
    assert fallback_size(["Largo", "165", "70", "4", "100", "400"]) is None


# =============================================================================
# Brand
# =============================================================================

def test_brand_joins_free_text_tokens():
    tokens = ["Zitto", "Ravon", "165/70", "R13", "4", "320000", "1280000"]
    assert extract_brand(tokens, "165/70/13") == "Zitto Ravon"


def test_brand_keeps_batch_qualifier_text():
    tokens = ["Cotecho,", "Cho1", "175/70R13", "2", "350000", "700000"]
    assert extract_brand(tokens, "175/70/13") == "Cotecho, Cho1"


def test_brand_excludes_rim_tokens():
    tokens = ["r14", "Imperati", "185/70", "4", "10", "40"]
    assert extract_brand(tokens, "185/70/14") == "Imperati"


def test_brand_none_without_letters():
    assert extract_brand(["1657013", "4", "100", "400"], "165/70/13") is None


def test_known_brand_fallback_with_batch_suffix():
    """Rim-only letter tokens leave the known-brand table to decide."""
    from tire_intake.extraction.table_parser import known_brand

    assert known_brand("COTECHO 175/70 R13 CHO2") == "Cotechoo, Cho2"
    assert known_brand("cotechoo ch01 175/70") == "Cotechoo, Cho1"
    assert known_brand("IMPERATI 185/65") == "Imperati"
    assert known_brand("vagner 185/65") == "Vagner"
    assert known_brand("TR 185/65") == "TR"
    assert known_brand("185/65 4 100") is None


def test_every_known_brand_is_reachable():
    from tire_intake.extraction.table_parser import KNOWN_BRANDS, known_brand

    for _, key, _ in KNOWN_BRANDS:
        assert known_brand(f"{key.lower()} 185/65") == BRAND_CANONICAL[key]


def test_known_brand_order_and_word_boundary():
    from tire_intake.extraction.table_parser import known_brand

    assert known_brand("VAGNER TR 185/65") == "Vagner"
    assert known_brand("TRACTOR 185/65") is None
    assert known_brand("vagner cho2 185/65") == "Vagner"


# =============================================================================
# Lines and tables
# =============================================================================

def test_parse_line_full_row():
    row = parse_line("Largo 165/70 R13 4 320000 1280000")
    assert row.brand == "Largo"
    assert row.size == "165/70/13"
    assert row.quantity == 4
    assert row.price == 320000
    assert row.total == 1280000
    assert row.selling_price == 420000


def test_parse_line_decimal_comma_row():
    row = parse_line("Largo 165/70/13 4 3200,00 12800,00")
    assert (row.price, row.total, row.quantity) == (3200.00, 12800.00, 4)


def test_total_within_eight_percent_is_kept():
    """A 7% gap between quantity * price and total passes; only one tolerance applies."""
    row = parse_line("Largo 165/70/13 4 100 430")
    assert (row.quantity, row.price, row.total) == (4, 100, 430)


def test_pair_beyond_eight_percent_is_rejected():
    assert check_pair(100, 445) is None


def test_total_marker_line_is_excluded():
    assert parse_line("Jami: 1280000") is None
    assert parse_table_text("Jami: 1280000") == []


def test_short_line_is_excluded():
    assert parse_line("Largo 1657013") is None


def test_line_without_brand_is_excluded():
    assert parse_line("1657013 4 100 400") is None


def test_line_without_size_is_excluded():
    assert parse_line("Largo tires 4 100 400") is None


def test_parse_table_text(sample_ocr_text):
    rows = parse_table_text(sample_ocr_text)

    assert [(r.brand, r.size, r.quantity) for r in rows] == [
        ("Largo", "165/70/13", 4),
        ("Cotecho, Cho1", "175/70/13", 2),
    ]


def test_garbage_text_yields_no_rows():
    assert parse_table_text("lorem ipsum\n~~ |||| ~~\n12 ab") == []


def test_emitted_rows_satisfy_invariants(sample_ocr_text):
    text = sample_ocr_text + "\n" + "\n".join([
        "Largo 165/70/13 4 3200,00 12800,00",
        "Vagner 185/65/15 40 200 80",
        "Imperati 205/55 R16 10 515000 5150000",
    ])
    rows = parse_table_text(text)
    assert len(rows) == 5

    for row in rows:
        assert re.match(r"^\d{3}/\d{2}/\d{2}$", row.size)
        assert row.selling_price == row.price + SELLING_MARKUP
        assert row.quantity >= 1
        assert round(row.total / row.price) == row.quantity
        assert abs(row.quantity * row.price - row.total) <= max(1, row.total * 0.08)
