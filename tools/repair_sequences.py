#!/usr/bin/env python3
"""Find sequence counters lagging behind issued SKUs and optionally repair them."""

from __future__ import annotations

import argparse
import logging
from typing import Iterable

from sqlalchemy import select

from config import SKU_MAX_SEQUENCE
from services import sequence_store
from tools.validate_sku_integrity import highest_issued
from utils.catalog import EquipmentUnit

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


def lagging_counters(session) -> list[tuple[str, str, int, int]]:
    """Return ``(category, brand, current, highest_issued)`` for lagging keys.

    Keys with issued SKUs but no counter are reported with ``current`` 0.
    """
    skus = list(session.scalars(select(EquipmentUnit.sku)))
    counters = {(s.category_prefix, s.brand_prefix): s.current_sequence for s in sequence_store.list_all(session)}
    found = []
    for (cat, brand), top in sorted(highest_issued(skus).items()):
        current = counters.get((cat, brand), 0)
        if current <= top:
            found.append((cat, brand, current, top))
    return found


def repair(session, cat: str, brand: str, top: int, auto: bool) -> None:
    target = min(top + 1, SKU_MAX_SEQUENCE)
    if not auto:
        logging.warning("Lagging counter: %s-%s should be at least %d", cat, brand, target)
        return
    sequence_store.get_next(session, cat, brand)
    sequence_store.reset(session, cat, brand, target)
    logging.info("Fast-forwarded %s-%s to %d", cat, brand, target)


def scan(session, auto: bool) -> int:
    lagging = lagging_counters(session)
    for cat, brand, _current, top in lagging:
        repair(session, cat, brand, top, auto)
    return len(lagging)


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Repair lagging SKU sequence counters")
    parser.add_argument("--auto", action="store_true", help="Fast-forward lagging counters")
    args = parser.parse_args(argv)

    from db import get_session, init_db

    init_db()
    session = get_session()
    try:
        count = scan(session, args.auto)
    finally:
        session.close()
    if count == 0:
        logging.info("All sequence counters are ahead of issued SKUs")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
