from datetime import date
from decimal import Decimal

from pantryscan.receipt.ocr_parser import ParserVocabulary, extract_store_name, extract_total_amount
from pantryscan.receipt.ocr_result_parser import join_ocr_texts, parse_receipt_text, split_raw_lines

RECEIPT = """PUBLIX SUPER MARKETS
STORE 0612
WHOLE MILK 3.50
BREAD S 79
PROMO* BREAD -1.00
BANANAS 1.29
WHOLE MILK 3.60
COFFEE BEANS 7.99
SUBTOTAL 16.17
TAX 0.50
TOTAL 16.67
VISA 16.67
"""


def test_parse_receipt_text_end_to_end(vocabulary: ParserVocabulary) -> None:
    result = parse_receipt_text(RECEIPT, receipt_id="ocr-test", purchase_date=date(2025, 8, 20), vocabulary=vocabulary)

    assert result.receipt_id == "ocr-test"
    assert result.purchase_date == date(2025, 8, 20)
    assert result.processing_method == "ocr"
    assert result.confidence == 65
    assert result.raw_text == RECEIPT
    assert [(item.name, item.quantity, item.price) for item in result.items] == [
        ("Whole Milk", 2, Decimal("3.55")),
        ("Bread", 1, Decimal("5.79")),
        ("Bananas", 1, Decimal("1.29")),
    ]
    assert [item.id for item in result.items] == ["ocr-0", "ocr-1", "ocr-2"]
    assert result.items[2].category == "produce"
    assert result.items[2].estimated_shelf_life == 3


def test_promotional_line_does_not_affect_following_product() -> None:
    result = parse_receipt_text("PROMO* SAVE 0.50\nEGGS 4.29\n", receipt_id="r")

    assert [(item.name, item.price) for item in result.items] == [("Eggs", Decimal("4.29"))]


def test_promotional_line_before_same_product() -> None:
    result = parse_receipt_text("PROMO* BREAD -1.00\nBREAD 2.49\n", receipt_id="r")

    assert [(item.name, item.price) for item in result.items] == [("Bread", Decimal("2.49"))]
    assert result.items[0].quantity == 1


def test_total_lines_never_become_items() -> None:
    result = parse_receipt_text("SUBTOTAL 9.99\nTAX 0.80\nTOTAL 10.79\nCASH 20.00\nCHANGE 9.21\n", receipt_id="r")

    assert result.items == []
    assert result.total_amount == Decimal("9.99")


def test_store_name_and_total_fields(vocabulary: ParserVocabulary) -> None:
    assert extract_store_name(RECEIPT, vocabulary) == "PUBLIX SUPER MARKETS"
    assert extract_store_name("CORNER MARKET\nMILK 3.50\n", vocabulary) == "Store"
    # the first TOTAL match wins, SUBTOTAL included
    assert extract_total_amount(RECEIPT) == Decimal("16.17")
    assert extract_total_amount("Total: 42.10") == Decimal("42.10")
    assert extract_total_amount("MILK 3.50") is None


def test_store_name_only_searched_in_leading_lines(vocabulary: ParserVocabulary) -> None:
    text = "\n".join(["LINE ONE", "LINE TWO", "LINE THREE", "LINE FOUR", "LINE FIVE", "KROGER"])

    assert extract_store_name(text, vocabulary) == "Store"


def test_items_capped_at_twenty() -> None:
    text = "\n".join(f"PRODUCT{n} 1.{n:02d}" for n in range(25))

    result = parse_receipt_text(text, receipt_id="r")

    assert len(result.items) == 20
    assert result.items[0].name == "Product0"
    assert result.items[-1].name == "Product19"


def test_empty_text_yields_empty_result() -> None:
    result = parse_receipt_text("", receipt_id="r")

    assert result.items == []
    assert result.store_name == "Store"
    assert result.total_amount is None


def test_split_raw_lines_skips_blank_lines() -> None:
    lines = split_raw_lines("  MILK 3.50 \n\n   \nEGGS 4.29")

    assert [(line.text, line.index) for line in lines] == [("MILK 3.50", 0), ("EGGS 4.29", 1)]


def test_join_ocr_texts_keeps_image_order() -> None:
    assert join_ocr_texts(["MILK 3.50", "EGGS 4.29"]) == "MILK 3.50\nEGGS 4.29\n"
