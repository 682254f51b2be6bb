#!/usr/bin/env python3
"""Validate SKU integrity for the EPG SKU allocator.

Scans equipment units and sequence counters to ensure that issued SKUs are
unique, that auto-generated SKUs are well formed, and that no counter points
at a number an existing unit already holds.  Problems are logged and
returned as errors.
"""

import logging
from collections import Counter, defaultdict
from typing import Dict, Iterable, Tuple

from sqlalchemy import select

from services import sequence_store
from services.sku_format import format_sku, parse_sku
from utils.catalog import EquipmentUnit

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

Key = Tuple[str, str]


def highest_issued(skus: Iterable[str]) -> Dict[Key, int]:
    """Return the highest sequence issued per ``(category, brand)`` pair."""
    highest: Dict[Key, int] = defaultdict(int)
    for sku in skus:
        parsed = parse_sku(sku)
        if parsed:
            key = (parsed.category_prefix, parsed.brand_prefix)
            highest[key] = max(highest[key], parsed.sequence)
    return dict(highest)


def check_units(skus: list[str]) -> list[str]:
    """Validate the SKUs held by equipment units."""
    errors: list[str] = []
    counts = Counter(s.upper() for s in skus)
    for sku, n in sorted(counts.items()):
        if n > 1:
            errors.append(f"Duplicate SKU {sku} held by {n} units")
    for sku in skus:
        if sku != sku.upper():
            errors.append(f"SKU {sku} is not uppercase")
        if sku.upper().startswith("EPG-") and parse_sku(sku.upper()) is None:
            errors.append(f"Malformed auto-generated SKU {sku}")
    return errors


def check_sequences(session, skus: list[str]) -> list[str]:
    """Validate counters against the SKUs already issued."""
    errors: list[str] = []
    counters = {(s.category_prefix, s.brand_prefix): s for s in sequence_store.list_all(session)}
    taken = {s.upper() for s in skus}
    for key, seq in sorted(counters.items()):
        candidate = format_sku(key[0], key[1], seq.current_sequence)
        if candidate in taken:
            errors.append(
                f"Counter {key[0]}-{key[1]} at {seq.current_sequence} points at issued SKU {candidate}"
            )
    return errors


def validate(session) -> list[str]:
    """Run SKU integrity validation for units and counters."""
    skus = list(session.scalars(select(EquipmentUnit.sku)))
    errors = check_units(skus) + check_sequences(session, skus)
    if errors:
        for err in errors:
            logging.error(err)
    else:
        logging.info("All %d SKUs validated", len(skus))
    return errors


def main() -> int:
    from db import get_session, init_db

    init_db()
    session = get_session()
    try:
        errors = validate(session)
    finally:
        session.close()
    return 1 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
