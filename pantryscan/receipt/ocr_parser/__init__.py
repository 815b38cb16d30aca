"""Composable OCR receipt-line parser components."""

from .common import ParserVocabulary, build_parser_vocabulary, default_vocabulary
from .fields_parser import extract_store_name, extract_total_amount
from .item_line_extractor import clean_item_name, display_name, extract_item
from .item_merger import ItemMerger, merge_items
from .line_classifier import LineKind, classify_line
from .price_reconstructor import LineReconstruction, PriceStrategy, correct_ocr_digits, reconstruct_prices

__all__ = [
    "ItemMerger",
    "LineKind",
    "LineReconstruction",
    "ParserVocabulary",
    "PriceStrategy",
    "build_parser_vocabulary",
    "classify_line",
    "clean_item_name",
    "correct_ocr_digits",
    "default_vocabulary",
    "display_name",
    "extract_item",
    "extract_store_name",
    "extract_total_amount",
    "merge_items",
    "reconstruct_prices",
]
