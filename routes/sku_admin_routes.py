# routes/sku_admin_routes.py
# ======================================================================
# SKU Admin Routes – JSON API for previewing, validating and managing
# SKU sequences.  Domain errors (SkuError) are turned into JSON by the
# handler registered in app.create_app().
# ======================================================================

from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from routes.utils import db_session, is_int, json_body
from services import sku_admin
from services.errors import ValidationError
from services.sku_service import preview_sku, validate_manual_sku
from utils import catalog

bp = Blueprint("sku_admin", __name__, url_prefix="/sku-admin")


# ----------------------------------------------------------------------
# GET /sku-admin/preview?category=LT&brand=CHV
# ----------------------------------------------------------------------
@bp.get("/preview")
def preview():
    category = (request.args.get("category") or "").strip().upper()
    brand = (request.args.get("brand") or "").strip().upper()
    if not category or not brand:
        return jsonify({"error": "Category and brand parameters are required"}), 400

    with db_session() as session:
        next_sku = preview_sku(session, category, brand)
    return jsonify(
        {
            "nextSKU": next_sku,
            "category": category,
            "brand": brand,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


@bp.get("/statistics")
def statistics():
    with db_session() as session:
        return jsonify(sku_admin.statistics(session))


# ----------------------------------------------------------------------
# POST /sku-admin/validate  {"sku": "CUSTOM-SKU-001"}
# A rule violation is a normal answer here, not an HTTP error.
# ----------------------------------------------------------------------
@bp.post("/validate")
def validate():
    sku = json_body().get("sku")
    if not isinstance(sku, str) or not sku:
        return jsonify({"error": "SKU is required"}), 400

    with db_session() as session:
        try:
            normalised = validate_manual_sku(session, sku)
        except ValidationError as exc:
            return jsonify(
                {
                    "success": False,
                    "message": str(exc),
                    "sku": sku.strip().upper(),
                    "isAvailable": False,
                }
            )
    return jsonify(
        {
            "success": True,
            "message": "SKU is valid and available",
            "sku": normalised,
            "isAvailable": True,
        }
    )


@bp.post("/reset-sequence")
def reset_sequence():
    data = json_body()
    category = str(data.get("category") or "").strip().upper()
    brand = str(data.get("brand") or "").strip().upper()
    new_sequence = data.get("newSequence")
    if not category or not brand or not is_int(new_sequence):
        return jsonify({"error": "Category, brand, and newSequence are required"}), 400

    with db_session() as session:
        result = sku_admin.reset_sequence(session, category, brand, new_sequence)
    current_app.logger.info(
        "Sequence reset for %s-%s via admin API", category, brand
    )
    return jsonify(result)


@bp.get("/sequences")
def sequences():
    with db_session() as session:
        return jsonify(sku_admin.list_sequences(session))


@bp.post("/toggle-auto-generation")
def toggle_auto_generation():
    enabled = json_body().get("enabled")
    if not isinstance(enabled, bool):
        return jsonify({"error": "enabled parameter must be true or false"}), 400
    with db_session() as session:
        return jsonify(sku_admin.toggle_auto_generation(session, enabled))


@bp.get("/auto-generation-status")
def auto_generation_status():
    with db_session() as session:
        return jsonify(sku_admin.auto_generation_status(session))


# ----------------------------------------------------------------------
# Brand and category prefixes
# ----------------------------------------------------------------------
@bp.get("/categories")
def categories():
    with db_session() as session:
        rows = catalog.list_categories(session)
        return jsonify({"categories": [c.to_dict() for c in rows]})


@bp.get("/brands")
def brands():
    active_only = request.args.get("active", "").lower() in {"1", "true"}
    with db_session() as session:
        rows = catalog.list_brands(session, active_only=active_only)
        return jsonify({"brands": [b.to_dict() for b in rows], "total": len(rows)})


@bp.post("/brands")
def create_brand():
    data = json_body()
    with db_session() as session:
        brand = catalog.create_brand(
            session,
            str(data.get("brandName") or ""),
            str(data.get("prefix") or ""),
            category=data.get("category"),
            description=data.get("description"),
            website=data.get("website"),
            notes=data.get("notes"),
        )
        return jsonify(brand.to_dict()), 201


@bp.put("/brands/<int:brand_id>")
def update_brand(brand_id: int):
    data = json_body()
    with db_session() as session:
        brand = catalog.update_brand(session, brand_id, data)
        return jsonify(brand.to_dict())


@bp.post("/brands/initialize")
def initialize_brands():
    with db_session() as session:
        result = catalog.initialize_default_brands(session)
    return jsonify(
        {
            **result,
            "message": (
                f"Brand initialization complete: {result['created']} created, "
                f"{result['skipped']} skipped"
            ),
        }
    )
