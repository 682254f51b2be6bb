"""Reporting and administrative operations on SKU sequences."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from config import SKU_MAX_SEQUENCE, auto_generation_disabled_by_env
from services import sequence_store
from services.sku_format import format_sku
from services.sku_service import is_auto_generation_disabled
from utils.catalog import count_units, get_brand_by_prefix, get_category_by_prefix
from utils.settings import store_auto_generation

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _next_sku(category_prefix: str, brand_prefix: str, sequence: int) -> Optional[str]:
    # The capacity number itself is never issued.
    if sequence >= SKU_MAX_SEQUENCE:
        return None
    return format_sku(category_prefix, brand_prefix, sequence)


def statistics(session: Session) -> Dict[str, Any]:
    by_category: Dict[str, List[Dict[str, Any]]] = {}
    for seq in sequence_store.list_all(session):
        by_category.setdefault(seq.category_prefix, []).append(
            {
                "brandPrefix": seq.brand_prefix,
                "currentSequence": seq.current_sequence,
                "remainingCapacity": seq.remaining,
            }
        )
    return {
        "totalInstances": count_units(session),
        "sequencesByCategory": by_category,
        "lastUpdated": _now_iso(),
    }


def list_sequences(session: Session) -> Dict[str, Any]:
    """All counters with display names and the next SKU each would issue."""
    rows = []
    for seq in sequence_store.list_all(session):
        category = get_category_by_prefix(session, seq.category_prefix)
        brand = get_brand_by_prefix(session, seq.brand_prefix)
        rows.append(
            {
                "id": seq.id,
                "categoryPrefix": seq.category_prefix,
                "brandPrefix": seq.brand_prefix,
                "currentSequence": seq.current_sequence,
                "lastUsed": seq.last_used.isoformat() if seq.last_used else None,
                "categoryName": category.name if category else "Unknown",
                "brandName": brand.brand_name if brand else "Unknown",
                "nextSKU": _next_sku(seq.category_prefix, seq.brand_prefix, seq.current_sequence),
                "exhausted": seq.remaining <= 0,
                "remaining": seq.remaining,
            }
        )
    return {"sequences": rows, "totalSequences": len(rows)}


def reset_sequence(
    session: Session, category_prefix: str, brand_prefix: str, new_value: int
) -> Dict[str, Any]:
    """Force a counter to ``new_value``.

    Issued SKUs are not checked.  Numbers that already belong to a unit are
    skipped by the allocator, but numbers handed out and never attached to
    a unit can be issued again.
    """
    old, new = sequence_store.reset(session, category_prefix, brand_prefix, new_value)
    return {
        "category": category_prefix,
        "brand": brand_prefix,
        "oldSequence": old,
        "newSequence": new,
        "nextSKU": _next_sku(category_prefix, brand_prefix, new),
    }


def toggle_auto_generation(session: Session, enabled: bool) -> Dict[str, Any]:
    store_auto_generation(session, enabled)
    logger.info("Auto SKU generation %s", "enabled" if enabled else "disabled")
    if enabled and auto_generation_disabled_by_env():
        logger.warning("Auto SKU generation is still disabled by the environment")
    return {"autoGenerationEnabled": enabled, "timestamp": _now_iso()}


def auto_generation_status(session: Session) -> Dict[str, Any]:
    disabled = is_auto_generation_disabled(session)
    return {
        "autoGenerationEnabled": not disabled,
        "isDisabled": disabled,
        "overriddenByEnvironment": auto_generation_disabled_by_env(),
        "timestamp": _now_iso(),
    }
