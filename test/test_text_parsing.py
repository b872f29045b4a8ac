"""Tests for the text-side building blocks of reconciliation.

Covers identity normalisation, quantity parsing, unit conversion, block
segmentation, SKU extraction and outlet-name extraction.
"""

import pytest

from sales_reconciler.config import ConfigError, ReportingConfig
from sales_reconciler.extractor import extract_skus
from sales_reconciler.matcher import extract_outlet_name
from sales_reconciler.model import SkuDefinition
from sales_reconciler.normalize import normalize
from sales_reconciler.quantity import parse_quantity, round_half_up, to_cases
from sales_reconciler.segmenter import segment

MC2 = SkuDefinition("sku_mc2", "MC2", 420, 30)
MIX_2L = SkuDefinition("sku_2l_mix", "2L Mix", 370, 6)
JUICE = SkuDefinition("sku_160ml", "160 ML Juice", 165)


# --------------------------------------------------------------------
# NORMALISER
# --------------------------------------------------------------------
def test_normalize_ignores_case_and_separators():
    assert normalize("Om Sai Ram Shop") == normalize("om  sai-ram_shop.")
    assert normalize("98765-43210") == "9876543210"


@pytest.mark.parametrize("value", [None, "", "  ", "-_."])
def test_normalize_empty_inputs(value):
    assert normalize(value) == ""


# --------------------------------------------------------------------
# QUANTITY PARSER / UNIT CONVERTER
# --------------------------------------------------------------------
@pytest.mark.parametrize(
    "fragment, expected",
    [
        ("30 + 3", 33),
        ("30+3", 33),
        ("10", 10),
        ("abc", 0),
        ("", 0),
        (None, 0),
        ("12 Btl", 12),
        ("5 + x", 5),
        ("+", 0),
    ],
)
def test_parse_quantity(fragment, expected):
    assert parse_quantity(fragment) == expected


def test_to_cases_divides_bottles_only():
    assert to_cases(12, "Btl", MIX_2L) == 2.0
    assert to_cases(45, "pcs", MC2) == 1.5
    assert to_cases(2, "Box", MIX_2L) == 2.0
    assert to_cases(2, None, MC2) == 2.0
    assert to_cases(7, "Btl", JUICE) == 7.0  # 1:1 products never convert


def test_round_half_up():
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(2.5, 0) == 3.0
    assert round_half_up(5 / 6, 2) == 0.83


# --------------------------------------------------------------------
# SEGMENTER
# --------------------------------------------------------------------
def test_segment_splits_on_all_markers():
    blocks = segment("Invoice FY25-101\nA\nBill No 2\nB", ReportingConfig())

    assert len(blocks) == 2
    for block in blocks:
        assert block.strip()
        assert "invoice" not in block.lower()
        assert "bill no" not in block.lower()
        assert "FY25-" not in block
    assert "A" in blocks[0]
    assert "B" in blocks[1]


def test_segment_is_case_insensitive_and_keeps_order():
    text = "INVOICE\nFirst Shop MC2 1 Box\nbill no 7\nSecond Shop MC2 2 Box"
    blocks = segment(text, ReportingConfig())
    assert [b.strip().split()[0] for b in blocks] == ["First", "7"]


def test_segment_drops_noise_and_empty_text():
    config = ReportingConfig()
    assert segment("x", config) == []
    assert segment("", config) == []
    assert segment(None, config) == []
    assert segment("Invoice x Invoice", config) == []


def test_segment_respects_configured_threshold():
    config = ReportingConfig(min_block_length=10)
    assert segment("Invoice FY25-101\nA\nBill No 2\nB", config) == []


def test_segment_without_markers_is_one_block():
    assert segment("Bisht Sweet Shop MC2 30 Btl", ReportingConfig()) == [
        "Bisht Sweet Shop MC2 30 Btl"
    ]


def test_segment_rejects_empty_matching_prefix():
    config = ReportingConfig(invoice_prefix_pattern="")
    with pytest.raises(ConfigError):
        segment("Invoice\nBisht Sweet Shop MC2 1 Box", config)


# --------------------------------------------------------------------
# SKU EXTRACTOR
# --------------------------------------------------------------------
def test_extract_converts_bottles_for_six_pack_family():
    assert extract_skus("2L mix 12 Btl", [MIX_2L]) == {"sku_2l_mix": 2.0}
    assert extract_skus("2L mix 2 Box", [MIX_2L]) == {"sku_2l_mix": 2.0}


def test_extract_sums_every_occurrence():
    block = "MC2 YELLOW 30 Btl\nMC2 ORANGE 15 Btl\nMC2 2 Box"
    assert extract_skus(block, [MC2]) == {"sku_mc2": 3.5}


def test_extract_handles_split_shipments_and_missing_unit():
    assert extract_skus("160 ML Juice 30 + 3", [JUICE]) == {"sku_160ml": 33.0}


def test_extract_rounds_to_two_decimals():
    assert extract_skus("2L Mix 5 Btl", [MIX_2L]) == {"sku_2l_mix": 0.83}


def test_extract_omits_absent_and_zero_products():
    delta = extract_skus("MC2 0 Box\nnothing else", [MC2, MIX_2L, JUICE])
    assert delta == {}


def test_extract_skips_broken_sku_and_keeps_others():
    broken = SkuDefinition("sku_blank", "   ", 0)
    delta = extract_skus("MC2 1 Box", [broken, MC2])
    assert delta == {"sku_mc2": 1.0}


def test_extract_escapes_label_metacharacters():
    sku = SkuDefinition("sku_juice_misc", "JUICE 300/500/600 ML", 300)
    other = SkuDefinition("sku_zeera", "Mr. Fresh Zeera", 155)
    block = "JUICE 300/500/600 ML 4 Box\nMr. Fresh Zeera 3 Cs\nMrX Fresh Zeera 9 Cs"
    assert extract_skus(block, [sku, other]) == {
        "sku_juice_misc": 4.0,
        "sku_zeera": 3.0,
    }


# --------------------------------------------------------------------
# OUTLET NAME EXTRACTION
# --------------------------------------------------------------------
def test_extract_outlet_name_skips_headers_dates_and_products():
    block = (
        "101\n"
        "12/05/2025\n"
        "Tax Invoice copy\n"
        "MC2 YELLOW 30 Btl\n"
        "Bisht Sweet Shop\n"
        "2L Mix 6 Btl\n"
    )
    assert extract_outlet_name(block, [MC2, MIX_2L]) == "Bisht Sweet Shop"


def test_extract_outlet_name_skips_page_markers():
    block = "\n--- [PDF Page 2] ---\nDate: 3 Mar 2025\nNew Era Kirana"
    assert extract_outlet_name(block, [MC2]) == "New Era Kirana"


def test_extract_outlet_name_none_when_nothing_qualifies():
    assert extract_outlet_name("101\nABC\nMC2 3 Box", [MC2]) is None
