"""Optional enhancement pass over a processing result.

Items are sent to the enhancement service one at a time so progress can
be reported per item. Any item the service cannot handle is categorized
locally instead; the pass never fails.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from pantryscan.domain import ExtractedItem, ProcessingResult
from pantryscan.receipt.item_categories import CategoryRuleLayers, categorize_item, estimate_shelf_life
from pantryscan.runtime import get_logger, load_category_rule_layers
from pantryscan.runtime.enhancement_gateway import EnhancementUnavailable

if TYPE_CHECKING:
    from pantryscan.runtime.enhancement_gateway import EnhancementGateway

logger = get_logger(__name__)

ENHANCEMENT_DELAY_SECONDS = 0.3
FALLBACK_CONFIDENCE = 70
ENHANCED_RESULT_BOOST = 15
ENHANCED_RESULT_CAP = 95
FALLBACK_RESULT_BOOST = 5
FALLBACK_RESULT_CAP = 85

FALLBACK_NOTICE = "AI enhancement is unavailable, using local categorization."


@dataclass(frozen=True)
class EnhancementOutcome:
    result: ProcessingResult
    enhanced_count: int
    fallback_count: int

    @property
    def notice(self) -> str | None:
        return FALLBACK_NOTICE if self.fallback_count else None


def categorize_locally(item: ExtractedItem, rule_layers: CategoryRuleLayers | None = None) -> ExtractedItem:
    return replace(
        item,
        category=categorize_item(item.name, rule_layers=rule_layers),
        estimated_shelf_life=estimate_shelf_life(item.name, rule_layers=rule_layers),
        confidence=max(item.confidence, FALLBACK_CONFIDENCE),
    )


def enhance_result(
    result: ProcessingResult,
    gateway: EnhancementGateway | None,
    on_progress: Callable[[int, int, str], None] | None = None,
    delay: float = ENHANCEMENT_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> EnhancementOutcome:
    """
    Enhance every item of ``result`` and return a new result.

    Args:
        result: Result to enhance; it is not modified
        gateway: Enhancement service client, or None to categorize locally only
        on_progress: Called with (index, total, item name) before each item
        delay: Pause between service calls, in seconds
        sleep: Injected for tests

    Returns:
        Outcome whose result carries the enhanced items and boosted confidence.
    """
    rule_layers = load_category_rule_layers()
    items: list[ExtractedItem] = []
    enhanced_count = 0
    total = len(result.items)

    for index, item in enumerate(result.items, start=1):
        if on_progress is not None:
            on_progress(index, total, item.name)

        if gateway is None:
            items.append(categorize_locally(item, rule_layers))
            continue

        try:
            enhanced = gateway.enhance_item(item, result.store_name, result.purchase_date)
        except EnhancementUnavailable as exc:
            logger.warning("Enhancement failed for %r, using local categorization: %s", item.name, exc)
            items.append(categorize_locally(item, rule_layers))
        else:
            enhanced.confidence = max(item.confidence, enhanced.confidence)
            items.append(enhanced)
            enhanced_count += 1

        if index < total and delay > 0:
            sleep(delay)

    if enhanced_count:
        confidence = min(ENHANCED_RESULT_CAP, result.confidence + ENHANCED_RESULT_BOOST)
    else:
        confidence = min(FALLBACK_RESULT_CAP, result.confidence + FALLBACK_RESULT_BOOST)

    return EnhancementOutcome(
        result=result.with_items(items, confidence=confidence),
        enhanced_count=enhanced_count,
        fallback_count=total - enhanced_count,
    )
