"""HTTP route definitions for the SKU allocator."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("routes", __name__)


@bp.route("/healthz")
def health_check() -> tuple[str, int]:
    return "OK", 200
