from decimal import Decimal

import pytest
from tallyscan.receipt.ocr_result_parser import parse_receipt_lines

KROGER_MULTILINE_TEXT = """FRESH
FOR
Kroger Vienove.
6001 Cumning Highway NE
678-546-2148
Your Cashier was CHEC 650
BLIM JUICE
PC
1.89 B
SC
KROGER SAVINGS
1.90
KROGER PLUS CUSTOMER
TAX
*******5051
0.04
****
BALANCE
1.93
Buford GA 30518
VISA CREDIT Purchase
************3440 -
REF#: 019155
TOTAL: 1.93
TOTAL NUMBER OF ITEMS SOLD =
STR CPN & KROGER SAVINGS
(50 pct.)
01/19/26 06:26pm 687 650 208 999999650
**************************************
Card Savings $1.90
**************************************
With Our Low Prices, You Saved
$1.90
*** Check Cart ***"""


def test_standard_receipt_with_store_items_tax_and_total() -> None:
    text = "\n".join(["Kroger", "01/19/26", "Item 1 1.99", "Item 2 3.50", "Tax 0.45", "Total 5.94"])

    result = parse_receipt_lines(text)

    assert result.store_name == "KROGER"
    assert [(item.name, item.price) for item in result.items] == [
        ("ITEM 1", Decimal("1.99")),
        ("ITEM 2", Decimal("3.50")),
    ]
    assert result.tax == Decimal("0.45")
    assert result.total == Decimal("5.94")
    assert result.date == "2026-01-19"
    assert result.confidence > 0.8
    assert result.source == "rules"
    assert result.raw_text == text


def test_standard_receipt_without_date_line_scores_without_date_weight() -> None:
    result = parse_receipt_lines("Kroger\nItem 1 1.99\nItem 2 3.50\nTax 0.45\nTotal 5.94")

    assert result.store_name == "KROGER"
    assert len(result.items) == 2
    assert result.total == Decimal("5.94")
    assert result.date is None
    assert result.confidence == pytest.approx(0.7)


def test_indented_receipt_with_quantity_prefix_item() -> None:
    text = """
        H-E-B
        GROCERY
        2 @ 1.50 APPLES
        BANANAS 2.00 B
        SUBTOTAL 5.00
        TAX 0.41
        TOTAL 5.41
        01/20/2026
        """

    result = parse_receipt_lines(text)

    assert result.store_name == "H-E-B"
    assert result.total == Decimal("5.41")
    assert result.subtotal == Decimal("5.00")
    assert result.date == "2026-01-20"
    apples = next(item for item in result.items if item.name == "APPLES")
    assert apples.quantity == 2
    assert apples.price == Decimal("1.50")
    assert any(item.name == "BANANAS" and item.price == Decimal("2.00") for item in result.items)
    assert result.confidence > 0.7


def test_generic_receipt_reads_subtotal_from_label_only() -> None:
    text = """
        Walmart
        123 Main St

        MILK 1GAL      3.50
        BREAD WHEAT    2.00

        SUBTOTAL       5.50
        TAX            0.45
        TOTAL          5.95
        """

    result = parse_receipt_lines(text)

    assert [item.name for item in result.items] == ["MILK 1GAL", "BREAD WHEAT"]
    assert result.subtotal == Decimal("5.50")
    assert result.tax == Decimal("0.45")
    assert result.total == Decimal("5.95")


def test_subtotal_is_not_backfilled_from_items() -> None:
    result = parse_receipt_lines("Store\nMILK 3.50\nBREAD 2.00\nTOTAL 5.50")

    assert result.subtotal is None


def test_total_label_followed_by_bare_price_line() -> None:
    text = "\n".join(
        [
            "H-E-B",
            "DYMATIZE PROT COOKIES CRM F 36.97 Q",
            "**********",
            "Total Sale***",
            "36.97",
            "*** DEBIT",
            "36.97",
            "US DEBIT",
            "USD$ 36.97",
        ]
    )

    result = parse_receipt_lines(text)

    assert result.total == Decimal("36.97")
    assert [item.name for item in result.items] == ["DYMATIZE PROT COOKIES CRM F"]
    assert result.items[0].price == Decimal("36.97")
    assert not any("USD" in item.name or "DEBIT" in item.name for item in result.items)


def test_tax_lookahead_passes_over_masked_card_line() -> None:
    result = parse_receipt_lines("Store\nTAX\n*******5051\n0.04\nTOTAL 1.93")

    assert result.tax == Decimal("0.04")
    # The tax value line is claimed and never becomes an orphaned-price item.
    assert result.items == []


def test_tax_label_variants() -> None:
    assert parse_receipt_lines("Store\nSALES TAX 0.80").tax == Decimal("0.80")
    assert parse_receipt_lines("Store\nHST\n1.30").tax == Decimal("1.30")
    assert parse_receipt_lines("Store\nTAXABLE 9.99").tax is None


def test_tax_line_with_total_keyword_is_tax_not_total() -> None:
    result = parse_receipt_lines("Store\nSTEAK 12.00\nTAX TOTAL 0.80\nTOTAL 12.80")

    assert result.tax == Decimal("0.80")
    assert result.total == Decimal("12.80")


def test_multiple_totals_keep_the_maximum() -> None:
    text = """
         Item 1 10.00
         Subtotal 10.00
         Tax 1.00
         Total 11.00
         Balance Due 11.00
         """

    assert parse_receipt_lines(text).total == Decimal("11.00")


def test_total_is_maximum_regardless_of_position() -> None:
    first_larger = parse_receipt_lines("Store\nTOTAL 20.00\nBALANCE 5.00")
    last_larger = parse_receipt_lines("Store\nBALANCE 5.00\nTOTAL 20.00")
    looked_ahead = parse_receipt_lines("Store\nTOTAL 5.00\n**** BALANCE\n20.00")

    assert first_larger.total == Decimal("20.00")
    assert last_larger.total == Decimal("20.00")
    assert looked_ahead.total == Decimal("20.00")


def test_real_kroger_receipt_with_split_item_lines() -> None:
    result = parse_receipt_lines(KROGER_MULTILINE_TEXT)

    assert result.store_name is not None
    assert "KROGER" in result.store_name
    assert result.total == Decimal("1.93")
    assert result.tax == Decimal("0.04")
    assert result.date == "2026-01-19"
    assert [(item.name, item.price) for item in result.items] == [("BLIM JUICE", Decimal("1.89"))]
    assert not any("SAVINGS" in item.name for item in result.items)


def test_savings_amounts_are_discarded_with_warning() -> None:
    result = parse_receipt_lines(KROGER_MULTILINE_TEXT)

    assert all(item.price != Decimal("1.90") for item in result.items)
    assert any("1.90" in warning.message for warning in result.warnings)


def test_short_code_name_is_repaired_from_previous_line() -> None:
    text = "\n".join(
        [
            "Kroger",
            "BLIM JUICE",
            "PC 1.89 B",
            "SC KROGER SAVINGS",
            "1.90",
            "KROGER PLUS CUSTOMER",
            "TAX",
            "*******5051",
            "0.04",
            "**** BALANCE",
            "1.93",
            "TOTAL: 1.93",
        ]
    )

    result = parse_receipt_lines(text)

    assert result.store_name == "KROGER"
    assert [(item.name, item.price) for item in result.items] == [("BLIM JUICE", Decimal("1.89"))]
    assert result.tax == Decimal("0.04")
    assert result.total == Decimal("1.93")


def test_orphaned_price_prefers_product_name_over_code_line() -> None:
    result = parse_receipt_lines("Store\nSBUX CREAMER\n*******5865\nPC\n4.00 B")

    assert [(item.name, item.price) for item in result.items] == [("SBUX CREAMER", Decimal("4.00"))]


def test_transaction_hash_is_never_an_item_name() -> None:
    text = "\n".join(
        [
            "Kroger",
            "122254 TOTAL:",
            "64.43",
            "AID:",
            "A0000000041010",
            "TC:",
            "4AC8A26D631B1AE5",
            "64.43",
            "TOTAL NUMBER OF ITEMS SOLD =",
        ]
    )

    result = parse_receipt_lines(text)

    assert result.total == Decimal("64.43")
    assert not any("4AC8" in item.name for item in result.items)
    assert result.items == []


def test_quantity_modifier_line_updates_item_above() -> None:
    result = parse_receipt_lines("Store\nYOGURT CUP 5.97\n3 @ 1.99\nTOTAL 5.97")

    assert len(result.items) == 1
    assert result.items[0].quantity == 3
    assert result.items[0].price == Decimal("1.99")


def test_quantity_modifier_that_does_not_add_up_is_ignored() -> None:
    result = parse_receipt_lines("Store\nYOGURT CUP 5.97\n2 @ 1.99\nTOTAL 5.97")

    assert result.items[0].quantity == 1
    assert result.items[0].price == Decimal("5.97")
    assert [warning.line_index for warning in result.warnings if "does not add up" in warning.message] == [2]


def test_no_prices_gives_low_confidence() -> None:
    text = """
        Welcome to Store
        No prices here
        Just text
        """

    result = parse_receipt_lines(text)

    assert result.total is None
    assert result.items == []
    assert result.confidence < 0.6


@pytest.mark.parametrize("text", ["", "   ", "\n\n  \n"])
def test_empty_input_returns_empty_result(text: str) -> None:
    result = parse_receipt_lines(text)

    assert result.items == []
    assert result.total is None
    assert result.confidence == 0
    assert result.raw_text == text


def test_non_string_input_raises_type_error() -> None:
    with pytest.raises(TypeError):
        parse_receipt_lines(["Kroger"])  # type: ignore[arg-type]


def test_price_next_to_tc_code_is_discarded_with_warning() -> None:
    result = parse_receipt_lines("SHOP\nTC 5521 AB\n5.00")

    assert result.items == []
    assert any("transaction code TC 5521 AB" in warning.message for warning in result.warnings)


def test_price_next_to_spaced_number_is_discarded_with_warning() -> None:
    result = parse_receipt_lines("SHOP\n12 34\n6.00")

    assert result.items == []
    assert any("transaction code 12 34" in warning.message for warning in result.warnings)


def test_quantity_modifier_without_item_above_records_warning() -> None:
    result = parse_receipt_lines("Store\n3 @ 1.99\nTOTAL 5.97")

    assert result.items == []
    assert any("no item above" in warning.message for warning in result.warnings)


def test_quantity_prefix_with_noise_name_keeps_quantity() -> None:
    result = parse_receipt_lines("Store\nGALA APPLES\n2 @ 1.50 A\nTOTAL 3.00")

    assert [(item.name, item.price, item.quantity) for item in result.items] == [
        ("GALA APPLES", Decimal("1.50"), 2)
    ]
