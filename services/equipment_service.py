"""Equipment unit creation with SKU assignment."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from services import sequence_store
from services.brand_resolver import extract_reference, pick_brand
from services.errors import AllocationExhaustedError, NotFoundError, ValidationError
from services.sku_format import parse_sku
from services.sku_service import generate_sku
from utils.catalog import EquipmentUnit, active_brands

logger = logging.getLogger(__name__)

_MUTABLE_FIELDS = {"serial_number", "notes"}


def create_unit(session: Session, data: Mapping[str, Any]) -> EquipmentUnit:
    """Create an equipment unit, generating its SKU unless one is supplied."""
    manual = data.get("sku")
    generated = not (isinstance(manual, str) and manual.strip())
    sku = generate_sku(session, data)
    parsed = parse_sku(sku)

    model_ref = extract_reference(data.get("equipment_model"))
    brand = pick_brand(active_brands(session), data.get("brand")) if data.get("brand") else None
    unit = EquipmentUnit(
        sku=sku,
        equipment_model_id=model_ref if isinstance(model_ref, int) else None,
        brand_id=brand.id if brand else None,
        serial_number=data.get("serial_number"),
        notes=data.get("notes"),
    )
    session.add(unit)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.error("Unique constraint rejected SKU %s", sku)
        if generated:
            # Lost an insert race for a freshly allocated number; resubmit.
            raise AllocationExhaustedError(1, sku) from exc
        raise ValidationError(f'SKU "{sku}" already exists') from exc

    if parsed:
        sequence_store.touch(session, parsed.category_prefix, parsed.brand_prefix)
    logger.info("Equipment unit created with SKU %s", sku)
    return unit


def get_unit(session: Session, unit_id: int) -> EquipmentUnit:
    unit = session.get(EquipmentUnit, unit_id)
    if unit is None:
        raise NotFoundError(f"Equipment unit {unit_id} not found")
    return unit


def update_unit(session: Session, unit_id: int, updates: Dict[str, Any]) -> EquipmentUnit:
    """Update descriptive fields; a unit's SKU never changes once assigned."""
    unit = get_unit(session, unit_id)
    new_sku = updates.get("sku")
    if new_sku is not None and str(new_sku).strip().upper() != unit.sku:
        raise ValidationError(f"SKU of equipment unit {unit.sku} cannot be changed")

    for field in _MUTABLE_FIELDS & updates.keys():
        setattr(unit, field, updates[field])
    session.commit()
    return unit
