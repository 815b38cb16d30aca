"""Turn a product line's tokens and prices into an ExtractedItem."""

from __future__ import annotations

import logging
import re

from pantryscan.domain import DEFAULT_UNIT, ExtractedItem
from pantryscan.receipt.item_categories import CategoryRuleLayers, categorize_item, estimate_shelf_life

from .common import (
    MAX_NAME_TOKENS,
    MIN_NAME_LENGTH,
    OCR_ITEM_CONFIDENCE,
    PRICE_MAX,
    PRICE_MIN,
    ParserVocabulary,
    default_vocabulary,
)
from .price_reconstructor import LineReconstruction

logger = logging.getLogger(__name__)

_DIGITS_ONLY = re.compile(r"^\d+$")
_SHORT_ALPHA = re.compile(r"^[A-Z]{1,2}$")
_WHITESPACE = re.compile(r"\s+")


def _is_name_token(token: str, vocabulary: ParserVocabulary) -> bool:
    upper = token.upper()
    if upper in vocabulary.name_stopwords:
        return False
    if _DIGITS_ONLY.match(token):
        return False
    # Short OCR noise like "TF" is dropped; short tokens carrying digits ("2L") are kept.
    if _SHORT_ALPHA.match(upper):
        return False
    return len(token) > 1


def name_tokens(reconstruction: LineReconstruction, vocabulary: ParserVocabulary | None = None) -> list[str]:
    """Tokens of the line left for the item name once prices and noise are removed."""
    vocab = vocabulary or default_vocabulary()
    return [
        token
        for i, token in enumerate(reconstruction.tokens)
        if i not in reconstruction.consumed and _is_name_token(token, vocab)
    ]


def clean_item_name(tokens: list[str], vocabulary: ParserVocabulary | None = None) -> str:
    """Join the leading name tokens and strip grading and promotional words."""
    vocab = vocabulary or default_vocabulary()
    name = " ".join(tokens[:MAX_NAME_TOKENS]).lower()
    name = vocab.grading_pattern.sub("", name)
    name = vocab.promo_word_pattern.sub("", name)
    return _WHITESPACE.sub(" ", name).strip()


def is_plausible_name(name: str, vocabulary: ParserVocabulary | None = None) -> bool:
    vocab = vocabulary or default_vocabulary()
    return len(name) >= MIN_NAME_LENGTH and name not in vocab.structural_names


def display_name(name: str) -> str:
    """Upper-case the first letter of each word ("whole milk" -> "Whole Milk")."""
    return " ".join(word[:1].upper() + word[1:] for word in name.split(" "))


def extract_item(
    reconstruction: LineReconstruction,
    *,
    item_id: str,
    vocabulary: ParserVocabulary | None = None,
    rule_layers: CategoryRuleLayers | None = None,
) -> ExtractedItem | None:
    """Build an item from one product line, or return None to drop the line.

    The first positive price on the line becomes the item's price; it must
    lie strictly between PRICE_MIN and PRICE_MAX.
    """
    positive = reconstruction.positive_prices
    if not positive:
        return None

    tokens = name_tokens(reconstruction, vocabulary)
    if not tokens:
        logger.debug("No name tokens in line: %r", reconstruction.line)
        return None

    name = clean_item_name(tokens, vocabulary)
    if not is_plausible_name(name, vocabulary):
        logger.debug("Rejected item name %r", name)
        return None

    price = positive[0].amount
    if not PRICE_MIN < price < PRICE_MAX:
        logger.debug("Price out of range for %r: %s", name, price)
        return None

    return ExtractedItem(
        id=item_id,
        name=display_name(name),
        quantity=1,
        unit=DEFAULT_UNIT,
        price=price,
        category=categorize_item(name, rule_layers=rule_layers),
        estimated_shelf_life=estimate_shelf_life(name, rule_layers=rule_layers),
        confidence=OCR_ITEM_CONFIDENCE,
    )
