"""Recover prices that OCR split across tokens or misread.

A line is normalized, split into tokens, and scanned by three strategies in
a fixed priority order:

1. STRICT_DECIMAL - a token that already looks like ``3.99`` or ``3.9``
2. FRAGMENT - a two-digit cents token paired with a nearby dollars token,
   after correcting letters OCR confuses with digits (``S 79`` -> 5.79)
3. THREE_DIGIT - a run like ``579`` read as 5.79

Each strategy receives the set of token indices already consumed and
returns the indices it consumed in turn, so no token feeds two prices.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from pantryscan.domain import ReconstructedPrice

from .common import FRAGMENT_DOLLARS_MAX, FRAGMENT_DOLLARS_MIN, FRAGMENT_SEARCH_RADIUS

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

_NON_PRICE_CHARS = re.compile(r"[^\w\s.$]", re.ASCII)
_SPACED_DOLLAR = re.compile(r"\$\s*(\d+\.?\d*)")
_WHITESPACE = re.compile(r"\s+")
# "5 79" -> "5.79"; both parts must be whole tokens
_SPLIT_PRICE = re.compile(r"(?<!\S)(\d{1,3})\s+(\d{2})(?!\S)")

_STRICT_PRICE = re.compile(r"^\d+\.\d{1,2}$")
_TWO_DIGITS = re.compile(r"^\d{2}$")
_ONE_OR_TWO_DIGITS = re.compile(r"^\d{1,2}$")
_THREE_DIGITS = re.compile(r"^\d{3}$")

# Letters OCR commonly returns for digits, applied in this order.
OCR_DIGIT_CORRECTIONS: tuple[tuple[str, str], ...] = (
    ("S", "5"),
    ("s", "5"),
    ("l", "1"),
    ("I", "1"),
    ("O", "0"),
    ("o", "0"),
)


class PriceStrategy(Enum):
    STRICT_DECIMAL = "strict_decimal"
    FRAGMENT = "fragment"
    THREE_DIGIT = "three_digit"


@dataclass(frozen=True)
class LineReconstruction:
    """Normalized tokens of one line and the prices recovered from them."""

    line: str
    tokens: tuple[str, ...]
    prices: tuple[ReconstructedPrice, ...]
    consumed: frozenset[int]

    @property
    def positive_prices(self) -> tuple[ReconstructedPrice, ...]:
        return tuple(price for price in self.prices if price.is_positive)


StrategyResult = tuple[list[ReconstructedPrice], frozenset[int]]


def normalize_line(line: str) -> str:
    """Strip punctuation except ``.`` and ``$``, glue ``$ 3.99`` and collapse spaces."""
    cleaned = _NON_PRICE_CHARS.sub(" ", line)
    cleaned = _SPACED_DOLLAR.sub(r"\1", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def rejoin_split_prices(line: str) -> str:
    """Rewrite ``<1-3 digits> <2 digits>`` token pairs as ``dollars.cents``."""
    return _SPLIT_PRICE.sub(r"\1.\2", line)


def correct_ocr_digits(token: str) -> str:
    """Apply OCR_DIGIT_CORRECTIONS to a token, in order."""
    for wrong, right in OCR_DIGIT_CORRECTIONS:
        token = token.replace(wrong, right)
    return token


def _price(dollars: int, cents: int) -> Decimal:
    return (Decimal(dollars) + Decimal(cents) / 100).quantize(CENTS)


def _strict_decimal(tokens: tuple[str, ...], consumed: frozenset[int]) -> StrategyResult:
    prices: list[ReconstructedPrice] = []
    used = set(consumed)
    for i, token in enumerate(tokens):
        if i in used or not _STRICT_PRICE.match(token):
            continue
        used.add(i)
        prices.append(
            ReconstructedPrice(
                amount=Decimal(token).quantize(CENTS),
                token_indices=frozenset({i}),
                source_tokens=(token,),
                strategy=PriceStrategy.STRICT_DECIMAL.value,
            )
        )
    return prices, frozenset(used)


def _dollars_value(token: str) -> int | None:
    corrected = correct_ocr_digits(token)
    if not _ONE_OR_TWO_DIGITS.match(corrected):
        return None
    value = int(corrected)
    if FRAGMENT_DOLLARS_MIN <= value <= FRAGMENT_DOLLARS_MAX:
        return value
    return None


def _fragment(tokens: tuple[str, ...], consumed: frozenset[int]) -> StrategyResult:
    prices: list[ReconstructedPrice] = []
    used = set(consumed)

    def accept(dollars_idx: int, cents_idx: int, dollars: int) -> None:
        used.update((dollars_idx, cents_idx))
        prices.append(
            ReconstructedPrice(
                amount=_price(dollars, int(tokens[cents_idx])),
                token_indices=frozenset({dollars_idx, cents_idx}),
                source_tokens=(tokens[dollars_idx], tokens[cents_idx]),
                strategy=PriceStrategy.FRAGMENT.value,
            )
        )

    for i, token in enumerate(tokens):
        if i in used:
            continue

        # Cents fragment: look up to FRAGMENT_SEARCH_RADIUS tokens either side for dollars
        if _TWO_DIGITS.match(token) and 10 <= int(token) <= 99:
            start = max(0, i - FRAGMENT_SEARCH_RADIUS)
            stop = min(len(tokens) - 1, i + FRAGMENT_SEARCH_RADIUS)
            for j in range(start, stop + 1):
                if j == i or j in used:
                    continue
                dollars = _dollars_value(tokens[j])
                if dollars is not None:
                    accept(j, i, dollars)
                    break

        # Adjacent "<dollars> <cents>" fallback
        if i in used or i + 1 >= len(tokens) or i + 1 in used:
            continue
        if _ONE_OR_TWO_DIGITS.match(token) and _TWO_DIGITS.match(tokens[i + 1]):
            dollars = int(token)
            if FRAGMENT_DOLLARS_MIN <= dollars <= FRAGMENT_DOLLARS_MAX:
                accept(i, i + 1, dollars)

    return prices, frozenset(used)


def _three_digit(tokens: tuple[str, ...], consumed: frozenset[int]) -> StrategyResult:
    prices: list[ReconstructedPrice] = []
    used = set(consumed)
    for i, token in enumerate(tokens):
        if i in used or not _THREE_DIGITS.match(token):
            continue
        value = int(token)
        if not 100 <= value <= 999:
            continue
        used.add(i)
        prices.append(
            ReconstructedPrice(
                amount=_price(value // 100, value % 100),
                token_indices=frozenset({i}),
                source_tokens=(token,),
                strategy=PriceStrategy.THREE_DIGIT.value,
            )
        )
    return prices, frozenset(used)


PRICE_STRATEGIES: tuple[tuple[PriceStrategy, Callable[[tuple[str, ...], frozenset[int]], StrategyResult]], ...] = (
    (PriceStrategy.STRICT_DECIMAL, _strict_decimal),
    (PriceStrategy.FRAGMENT, _fragment),
    (PriceStrategy.THREE_DIGIT, _three_digit),
)


def tokenize(line: str) -> tuple[str, ...]:
    """Normalize a raw line, rejoin split prices and split into tokens."""
    return tuple(token for token in rejoin_split_prices(normalize_line(line)).split(" ") if token)


def reconstruct_prices(line: str) -> LineReconstruction:
    """Run every price strategy over one raw OCR line.

    Prices are returned in strategy priority order, then left to right.
    """
    tokens = tokenize(line)
    consumed: frozenset[int] = frozenset()
    prices: list[ReconstructedPrice] = []
    for strategy, run in PRICE_STRATEGIES:
        found, consumed = run(tokens, consumed)
        for price in found:
            logger.debug("%s price %s from %s", strategy.value, price.amount, price.source_tokens)
        prices.extend(found)
    return LineReconstruction(
        line=" ".join(tokens),
        tokens=tokens,
        prices=tuple(prices),
        consumed=consumed,
    )
