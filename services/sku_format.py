"""Pure helpers for the canonical ``EPG-<CAT>-<BRAND>-<00001>`` SKU format."""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

from config import (
    BRAND_PREFIX_LENGTH,
    CATEGORY_PREFIX_MAX,
    CATEGORY_PREFIX_MIN,
    SKU_DIGITS,
    SKU_MAX_SEQUENCE,
    SKU_PREFIX,
)

CATEGORY_PREFIX_PATTERN = re.compile(rf"[A-Z]{{{CATEGORY_PREFIX_MIN},{CATEGORY_PREFIX_MAX}}}")
BRAND_PREFIX_PATTERN = re.compile(rf"[A-Z]{{{BRAND_PREFIX_LENGTH}}}")
SKU_PATTERN = re.compile(
    rf"^{SKU_PREFIX}-(?P<category>{CATEGORY_PREFIX_PATTERN.pattern})"
    rf"-(?P<brand>{BRAND_PREFIX_PATTERN.pattern})"
    rf"-(?P<sequence>\d{{{SKU_DIGITS}}})$"
)


class ParsedSku(NamedTuple):
    category_prefix: str
    brand_prefix: str
    sequence: int


def is_category_prefix(value: str) -> bool:
    return bool(value) and CATEGORY_PREFIX_PATTERN.fullmatch(value) is not None


def is_brand_prefix(value: str) -> bool:
    return bool(value) and BRAND_PREFIX_PATTERN.fullmatch(value) is not None


def format_sku(category_prefix: str, brand_prefix: str, sequence: int) -> str:
    """Return the canonical SKU for the given prefixes and sequence.

    Raises ``ValueError`` for malformed prefixes or an out-of-range sequence;
    those are programming errors rather than runtime conditions.
    """
    if not is_category_prefix(category_prefix):
        raise ValueError(f"Invalid category prefix: {category_prefix!r}")
    if not is_brand_prefix(brand_prefix):
        raise ValueError(f"Invalid brand prefix: {brand_prefix!r}")
    if isinstance(sequence, bool) or not 1 <= sequence <= SKU_MAX_SEQUENCE:
        raise ValueError(f"Sequence out of range: {sequence!r}")
    return f"{SKU_PREFIX}-{category_prefix}-{brand_prefix}-{sequence:0{SKU_DIGITS}d}"


def parse_sku(sku: str) -> Optional[ParsedSku]:
    """Split a canonical SKU into its parts, or return None for manual SKUs."""
    if not isinstance(sku, str):
        return None
    match = SKU_PATTERN.fullmatch(sku)
    if not match:
        return None
    sequence = int(match["sequence"])
    if sequence == 0:
        return None
    return ParsedSku(match["category"], match["brand"], sequence)


def validate_format(sku: str) -> bool:
    """Structural check only; storage is not consulted."""
    return parse_sku(sku) is not None
