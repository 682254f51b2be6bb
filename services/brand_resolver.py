"""Brand reference resolution.

A brand reference may be an id, a name, a prefix or a relation object such as
``{"id": 3}`` or ``{"connect": [{"id": 3}]}``.  Resolution runs an ordered list
of strategies over the active brands and falls back to the default brand, so
an unknown brand still yields a usable prefix.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from config import DEFAULT_BRAND_PREFIX
from services.errors import ResolutionError
from utils.catalog import Brand, active_brands

logger = logging.getLogger(__name__)

Strategy = Callable[[Sequence[Brand], Any], Optional[Brand]]


def extract_reference(ref: Any) -> Any:
    """Unwrap relation objects down to an id, name or None."""
    if isinstance(ref, dict):
        connect = ref.get("connect")
        if connect:
            first = connect[0] if isinstance(connect, list) else connect
            return extract_reference(first)
        for key in ("id", "documentId", "name", "brandName"):
            if ref.get(key) not in (None, ""):
                return ref[key]
        return None
    if isinstance(ref, str):
        stripped = ref.strip()
        if stripped.isdigit():
            return int(stripped)
        return stripped or None
    if isinstance(ref, bool):
        return None
    return ref


def match_by_id(brands: Sequence[Brand], ref: Any) -> Optional[Brand]:
    if not isinstance(ref, int):
        return None
    return next((b for b in brands if b.id == ref), None)


def match_exact_name(brands: Sequence[Brand], ref: Any) -> Optional[Brand]:
    if not isinstance(ref, str):
        return None
    wanted = ref.lower()
    return next((b for b in brands if b.brand_name.lower() == wanted), None)


def match_prefix(brands: Sequence[Brand], ref: Any) -> Optional[Brand]:
    if not isinstance(ref, str):
        return None
    wanted = ref.upper()
    return next((b for b in brands if b.prefix == wanted), None)


def match_substring(brands: Sequence[Brand], ref: Any) -> Optional[Brand]:
    if not isinstance(ref, str):
        return None
    wanted = ref.lower()
    for brand in brands:
        name = brand.brand_name.lower()
        if wanted in name or name in wanted:
            return brand
    return None


STRATEGIES: tuple[Strategy, ...] = (
    match_by_id,
    match_exact_name,
    match_prefix,
    match_substring,
)


def pick_brand(brands: Iterable[Brand], ref: Any) -> Optional[Brand]:
    """Return the first active brand matched by :data:`STRATEGIES`."""
    candidates = [b for b in brands if b.is_active]
    value = extract_reference(ref)
    if value is None:
        return None
    for strategy in STRATEGIES:
        brand = strategy(candidates, value)
        if brand is not None:
            return brand
    return None


def default_prefix(brands: Iterable[Brand]) -> Optional[str]:
    default = next((b for b in brands if b.is_active and b.is_default), None)
    if default is not None:
        return default.prefix
    return DEFAULT_BRAND_PREFIX or None


def resolve_brand_prefix(session: Session, ref: Any) -> str:
    """Resolve ``ref`` to a brand prefix, falling back to the default."""
    brands = active_brands(session)
    brand = pick_brand(brands, ref)
    if brand is not None:
        return brand.prefix

    fallback = default_prefix(brands)
    if not fallback:
        raise ResolutionError(f"Brand {ref!r} could not be resolved to a prefix")
    logger.warning("Unknown brand %r, using default prefix %s", ref, fallback)
    return fallback
