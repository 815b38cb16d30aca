"""Parse a spoken grocery list into ManualItems.

The transcript is normalized so that "and", semicolons and pipes all act as
list separators, split on commas, and each segment is matched against four
grammars in priority order:

    3 pounds of apples      QUANTITY_UNIT_OF
    2 bags cheese           QUANTITY_UNIT
    a can of soup           ARTICLE
    some cheese / cheese    BARE

The first grammar that matches with a usable name owns the segment; when
a grammar's name is rejected the next grammar is tried ("5 g" ends up as
the bare name "5 g"). Items with the same name are merged by summing their
quantities.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from pantryscan.domain import DEFAULT_UNIT, MANUAL_CONFIDENCE, ManualItem, ProcessingResult, promote_items

from .item_categories import CategoryRuleLayers, classify_dictated_item, normalize_unit

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_AND_SEPARATOR = re.compile(r"\band\s+")
_OTHER_SEPARATORS = re.compile(r"[;|]")
# "august 20th 2025:" spoken before the list
_DATE_PREFIX = re.compile(r"^[a-z]+ \d{1,2}(st|nd|rd|th)?,? \d{4}:?\s*", re.IGNORECASE)
_NAME_PREFIX = re.compile(r"^(of|the|some)\s+")

NAME_STOPWORDS = frozenset({"of", "the", "and", "a", "an"})
MIN_NAME_LENGTH = 2
DICTATION_ID_PREFIX = "dictation"


class SegmentGrammar(Enum):
    QUANTITY_UNIT_OF = "quantity_unit_of"
    QUANTITY_UNIT = "quantity_unit"
    ARTICLE = "article"
    BARE = "bare"


SEGMENT_GRAMMARS: tuple[tuple[SegmentGrammar, re.Pattern[str]], ...] = (
    (SegmentGrammar.QUANTITY_UNIT_OF, re.compile(r"^(?P<qty>\d+(?:\.\d+)?)\s*(?P<unit>\w+)?\s+of\s+(?P<name>.+)$")),
    (SegmentGrammar.QUANTITY_UNIT, re.compile(r"^(?P<qty>\d+(?:\.\d+)?)\s*(?P<unit>\w+)?\s+(?P<name>.+)$")),
    (SegmentGrammar.ARTICLE, re.compile(r"^(?:a|an)\s+(?:(?P<unit>\w+)\s+)?(?:of\s+)?(?P<name>.+)$")),
    (SegmentGrammar.BARE, re.compile(r"^(?:some\s+)?(?P<name>.+)$")),
)


@dataclass(frozen=True)
class SegmentMatch:
    grammar: SegmentGrammar
    quantity: int
    unit: str
    name: str


def normalize_transcript(transcript: str) -> str:
    """Lowercase, unify list separators to commas and drop a spoken date prefix."""
    text = _WHITESPACE.sub(" ", transcript.lower())
    text = _AND_SEPARATOR.sub(", ", text)
    text = _OTHER_SEPARATORS.sub(",", text).strip()
    return _DATE_PREFIX.sub("", text)


def split_segments(text: str) -> list[str]:
    return [segment.strip() for segment in text.split(",") if segment.strip()]


def _quantity(raw: str | None) -> int:
    """Round a spoken quantity half-up to a whole number, at least 1."""
    if not raw:
        return 1
    try:
        value = Decimal(raw).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return 1
    return max(1, int(value))


def clean_name(name: str) -> str:
    return _WHITESPACE.sub(" ", _NAME_PREFIX.sub("", name)).strip()


def match_segment(segment: str) -> SegmentMatch | None:
    """Match one segment against the grammars; None when no grammar yields a usable name."""
    for grammar, pattern in SEGMENT_GRAMMARS:
        match = pattern.match(segment)
        if not match:
            continue
        groups = match.groupdict()
        name = clean_name(groups["name"])
        if len(name) < MIN_NAME_LENGTH or name in NAME_STOPWORDS:
            logger.debug("Segment %r (%s): unusable name %r, trying next grammar", segment, grammar.value, name)
            continue
        unit = (groups.get("unit") or "").strip() or DEFAULT_UNIT
        return SegmentMatch(grammar=grammar, quantity=_quantity(groups.get("qty")), unit=unit, name=name)
    return None


def parse_segment(segment: str, rule_layers: CategoryRuleLayers | None = None) -> ManualItem | None:
    """Turn one list segment into a ManualItem with category and shelf life."""
    matched = match_segment(segment)
    if matched is None:
        return None

    category, shelf_life = classify_dictated_item(matched.name, rule_layers=rule_layers)

    unit_rule = normalize_unit(matched.unit, rule_layers=rule_layers)
    if unit_rule.category:
        category = unit_rule.category
    if unit_rule.shelf_life_days:
        shelf_life = unit_rule.shelf_life_days

    return ManualItem(
        name=matched.name,
        quantity=matched.quantity,
        unit=unit_rule.unit,
        category=category,
        estimated_shelf_life=shelf_life,
    )


def parse_dictation(transcript: str, rule_layers: CategoryRuleLayers | None = None) -> list[ManualItem]:
    """
    Parse a dictated grocery list.

    Args:
        transcript: Final speech-recognition text, e.g.
            "3 apples, a can of tomato soup and a pint of blueberries"
        rule_layers: Preloaded category rules (typically from runtime loader).

    Returns:
        One ManualItem per distinct name, in first-mentioned order.
    """
    merged: dict[str, ManualItem] = {}
    for segment in split_segments(normalize_transcript(transcript)):
        item = parse_segment(segment, rule_layers=rule_layers)
        if item is None:
            continue
        key = item.name.lower()
        if key in merged:
            merged[key].quantity += item.quantity
        else:
            merged[key] = item
    return list(merged.values())


def dictation_result(
    transcript: str,
    *,
    receipt_id: str | None = None,
    purchase_date: date | None = None,
    rule_layers: CategoryRuleLayers | None = None,
) -> ProcessingResult:
    """Wrap a parsed transcript as a ProcessingResult ("dictation-<millis>", confidence 100)."""
    items = promote_items(parse_dictation(transcript, rule_layers=rule_layers), DICTATION_ID_PREFIX)
    return ProcessingResult(
        receipt_id=receipt_id or f"{DICTATION_ID_PREFIX}-{int(time.time() * 1000)}",
        purchase_date=purchase_date or date.today(),
        items=items,
        confidence=MANUAL_CONFIDENCE,
        store_name=None,
        total_amount=None,
        raw_text=transcript,
        processing_method="dictation",
    )
