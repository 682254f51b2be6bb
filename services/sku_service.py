from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from sqlalchemy.orm import Session

from config import (
    MANUAL_SKU_MIN_LENGTH,
    MAX_SKU_RETRIES,
    SKU_MAX_SEQUENCE,
    auto_generation_disabled_by_env,
)
from services import sequence_store
from services.brand_resolver import extract_reference, resolve_brand_prefix
from services.errors import (
    AllocationExhaustedError,
    ResolutionError,
    SequenceExhaustedError,
    ValidationError,
)
from services.sku_format import format_sku, is_brand_prefix, is_category_prefix
from utils.catalog import find_unit_by_sku, get_category, get_equipment_model
from utils.settings import stored_auto_generation_disabled

logger = logging.getLogger(__name__)

MANUAL_SKU_CHARS = re.compile(r"^[A-Z0-9-]+$")


# ==========================================================================
# 1. Lookups
# ==========================================================================
def sku_exists(session: Session, sku: str) -> bool:
    return find_unit_by_sku(session, sku) is not None


def is_auto_generation_disabled(session: Session) -> bool:
    """The environment kill switch wins over the stored setting."""
    if auto_generation_disabled_by_env():
        return True
    return stored_auto_generation_disabled(session)


def resolve_category_prefix(session: Session, unit_data: Mapping[str, Any]) -> str:
    """Return the SKU prefix of the unit's category.

    The category comes from ``equipment_model`` when given, otherwise from
    ``category``.  Unlike brands there is no fallback.
    """
    model_ref = extract_reference(unit_data.get("equipment_model"))
    if model_ref is not None:
        model = get_equipment_model(session, model_ref) if isinstance(model_ref, int) else None
        if model is None:
            raise ResolutionError("Invalid equipment model reference")
        category = model.category
    else:
        category_ref = extract_reference(unit_data.get("category"))
        category = get_category(session, category_ref) if isinstance(category_ref, int) else None
        if category is None:
            raise ResolutionError("Invalid category reference")

    if category is None or not category.sku_prefix:
        raise ResolutionError("Equipment model must have a valid category with SKU prefix")
    return category.sku_prefix


# ==========================================================================
# 2. Manual SKUs
# ==========================================================================
def validate_manual_sku(session: Session, sku: str) -> str:
    """Validate an operator-supplied SKU and return it normalised.

    Rules are checked in order and the first violation is raised, so the
    message can be shown to the operator verbatim.
    """
    normalised = (sku or "").strip().upper()
    if len(normalised) < MANUAL_SKU_MIN_LENGTH:
        raise ValidationError(
            f"Manual SKU must be at least {MANUAL_SKU_MIN_LENGTH} characters long"
        )
    if not MANUAL_SKU_CHARS.match(normalised):
        raise ValidationError(
            "Manual SKU can only contain uppercase letters, numbers, and hyphens"
        )
    if sku_exists(session, normalised):
        raise ValidationError(f'Manual SKU "{normalised}" already exists')
    return normalised


# ==========================================================================
# 3. Generation
# ==========================================================================
def generate_sku(session: Session, unit_data: Mapping[str, Any]) -> str:
    """Return the SKU for a new equipment unit.

    A manual ``sku`` is validated and returned as is (uppercased).  Otherwise
    the category and brand prefixes are resolved and the next free number
    for that pair is allocated and consumed.  The unit itself is not created.
    """
    manual = unit_data.get("sku")
    if isinstance(manual, str) and manual.strip():
        normalised = validate_manual_sku(session, manual)
        logger.info("Using manual SKU: %s", normalised)
        return normalised

    if unit_data.get("skip_auto_sku") or is_auto_generation_disabled(session):
        raise ValidationError("Auto SKU generation is disabled and no manual SKU provided")

    has_category = unit_data.get("equipment_model") or unit_data.get("category")
    if not has_category or not unit_data.get("brand"):
        raise ValidationError("Equipment model and brand are required for SKU generation")

    category_prefix = resolve_category_prefix(session, unit_data)
    brand_prefix = resolve_brand_prefix(session, unit_data["brand"])
    return allocate(session, category_prefix, brand_prefix)


def allocate(
    session: Session,
    category_prefix: str,
    brand_prefix: str,
    max_retries: int = MAX_SKU_RETRIES,
) -> str:
    """Claim the next unused SKU for the prefix pair.

    Up to ``max_retries`` further attempts follow the first.  A candidate
    already held by a unit advances the counter; a candidate claimed by a
    concurrent request is simply re-read.
    """
    attempts = max_retries + 1
    candidate = None
    for attempt in range(1, attempts + 1):
        sequence = sequence_store.get_next(session, category_prefix, brand_prefix)
        candidate = format_sku(category_prefix, brand_prefix, sequence)

        if sku_exists(session, candidate):
            logger.warning("SKU %s already exists, retrying (attempt %d)", candidate, attempt)
            sequence_store.advance(session, category_prefix, brand_prefix)
            continue

        if sequence_store.claim(session, category_prefix, brand_prefix, sequence):
            logger.info("Generated SKU: %s (attempt %d)", candidate, attempt)
            return candidate
        logger.warning("SKU %s claimed concurrently, retrying (attempt %d)", candidate, attempt)

    logger.error(
        "SKU allocation exhausted for %s-%s after %d attempts", category_prefix, brand_prefix, attempts
    )
    raise AllocationExhaustedError(attempts, candidate)


def preview_sku(session: Session, category_prefix: str, brand_prefix: str) -> str:
    """Return the SKU the next allocation would try; nothing is reserved.

    Raises ``SequenceExhaustedError`` when the counter has no numbers left.
    """
    category_prefix = (category_prefix or "").strip().upper()
    brand_prefix = (brand_prefix or "").strip().upper()
    if not is_category_prefix(category_prefix):
        raise ValidationError(f"Invalid category prefix: {category_prefix!r}")
    if not is_brand_prefix(brand_prefix):
        raise ValidationError(f"Invalid brand prefix: {brand_prefix!r}")
    sequence = sequence_store.peek(session, category_prefix, brand_prefix)
    if sequence >= SKU_MAX_SEQUENCE:
        raise SequenceExhaustedError(
            f"Sequence limit exceeded for {category_prefix}-{brand_prefix}. "
            f"Maximum is {SKU_MAX_SEQUENCE}."
        )
    return format_sku(category_prefix, brand_prefix, sequence)
