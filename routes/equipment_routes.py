"""Blueprint for equipment unit creation and lookup."""
from __future__ import annotations

from flask import Blueprint, jsonify

from routes.utils import db_session, json_body
from services.equipment_service import create_unit, update_unit
from services.errors import NotFoundError
from utils.catalog import find_unit_by_sku

bp = Blueprint("equipment", __name__, url_prefix="/equipment-units")

# JSON field -> unit_data key
_FIELDS = {
    "sku": "sku",
    "equipmentModel": "equipment_model",
    "category": "category",
    "brand": "brand",
    "skipAutoSKU": "skip_auto_sku",
    "serialNumber": "serial_number",
    "notes": "notes",
}


def _unit_data(body: dict) -> dict:
    return {key: body[field] for field, key in _FIELDS.items() if field in body}


@bp.post("")
def create():
    data = _unit_data(json_body())
    with db_session() as session:
        unit = create_unit(session, data)
        return jsonify(unit.to_dict()), 201


@bp.get("/<string:sku>")
def by_sku(sku: str):
    with db_session() as session:
        unit = find_unit_by_sku(session, sku)
        if unit is None:
            raise NotFoundError(f"No equipment unit with SKU {sku.upper()}")
        return jsonify(unit.to_dict())


@bp.patch("/<int:unit_id>")
def update(unit_id: int):
    data = _unit_data(json_body())
    with db_session() as session:
        unit = update_unit(session, unit_id, data)
        return jsonify(unit.to_dict())
