from __future__ import annotations

"""Catalog models and helpers backed by SQLAlchemy.

Categories, equipment models and brands are owned by catalog administrators;
the SKU allocator only reads their prefixes.  Equipment units carry the SKU.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, relationship

from config import BRAND_PREFIX_LENGTH
from db import Base, get_session
from services.errors import BrandError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    __tablename__ = "equipment_categories"
    id = Column(Integer, primary_key=True)
    name = Column(String(120), unique=True, nullable=False)
    sku_prefix = Column(String(3), unique=True, nullable=True)

    models = relationship("EquipmentModel", back_populates="category")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "skuPrefix": self.sku_prefix}


class EquipmentModel(Base):
    __tablename__ = "equipment_models"
    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    category_id = Column(Integer, ForeignKey("equipment_categories.id"), nullable=True)

    category = relationship("Category", back_populates="models")


class Brand(Base):
    __tablename__ = "brand_prefixes"
    id = Column(Integer, primary_key=True)
    brand_name = Column(String(120), unique=True, nullable=False)
    prefix = Column(String(BRAND_PREFIX_LENGTH), nullable=False, index=True)
    category = Column(String(60), nullable=False, default="general")
    description = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_default = Column(Boolean, nullable=False, default=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "brandName": self.brand_name,
            "prefix": self.prefix,
            "category": self.category,
            "description": self.description,
            "website": self.website,
            "notes": self.notes,
            "isActive": self.is_active,
            "isDefault": self.is_default,
        }


class EquipmentUnit(Base):
    __tablename__ = "equipment_units"
    id = Column(Integer, primary_key=True)
    sku = Column(String(64), unique=True, nullable=False, index=True)
    equipment_model_id = Column(Integer, ForeignKey("equipment_models.id"), nullable=True)
    brand_id = Column(Integer, ForeignKey("brand_prefixes.id"), nullable=True)
    serial_number = Column(String(120), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    equipment_model = relationship("EquipmentModel")
    brand = relationship("Brand")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sku": self.sku,
            "equipmentModel": self.equipment_model_id,
            "brand": self.brand_id,
            "serialNumber": self.serial_number,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


# ==========================================================================
# 1. Lookups
# ==========================================================================
def get_category(session: Session, category_id: int) -> Optional[Category]:
    return session.get(Category, category_id)


def list_categories(session: Session) -> List[Category]:
    return list(session.scalars(select(Category).order_by(Category.name)))


def get_category_by_prefix(session: Session, prefix: str) -> Optional[Category]:
    return session.scalar(select(Category).where(Category.sku_prefix == prefix))


def get_equipment_model(session: Session, model_id: int) -> Optional[EquipmentModel]:
    return session.get(EquipmentModel, model_id)


def active_brands(session: Session) -> List[Brand]:
    return list(
        session.scalars(
            select(Brand).where(Brand.is_active.is_(True)).order_by(Brand.id)
        )
    )


def get_brand_by_prefix(session: Session, prefix: str) -> Optional[Brand]:
    """Return the first brand carrying ``prefix``, preferring active ones."""
    return session.scalar(
        select(Brand)
        .where(Brand.prefix == prefix)
        .order_by(Brand.is_active.desc(), Brand.id)
        .limit(1)
    )


def find_unit_by_sku(session: Session, sku: str) -> Optional[EquipmentUnit]:
    """Case-insensitive lookup of an equipment unit by SKU."""
    return session.scalar(
        select(EquipmentUnit).where(func.upper(EquipmentUnit.sku) == sku.strip().upper())
    )


def count_units(session: Session) -> int:
    return session.scalar(select(func.count(EquipmentUnit.id))) or 0


# ==========================================================================
# 2. Brand prefix administration
# ==========================================================================
def _normalise_prefix(prefix: str) -> str:
    upper = str(prefix or "").strip().upper()
    if len(upper) != BRAND_PREFIX_LENGTH or not upper.isalpha():
        raise ValidationError(f"Prefix must be exactly {BRAND_PREFIX_LENGTH} letters")
    return upper


def list_brands(session: Session, active_only: bool = False) -> List[Brand]:
    query = select(Brand).order_by(Brand.brand_name)
    if active_only:
        query = query.where(Brand.is_active.is_(True))
    return list(session.scalars(query))


def create_brand(session: Session, brand_name: str, prefix: str, **options: Any) -> Brand:
    """Create a brand prefix entry; name and prefix must both be unused."""
    if not brand_name or not prefix:
        raise ValidationError("Brand name and prefix are required")
    name = brand_name.strip().lower()
    upper = _normalise_prefix(prefix)

    existing = session.scalar(select(Brand).where(Brand.brand_name == name))
    if existing:
        raise BrandError(f'Brand "{brand_name}" already exists with prefix "{existing.prefix}"')
    clash = session.scalar(select(Brand).where(Brand.prefix == upper))
    if clash:
        raise BrandError(f'Prefix "{upper}" already exists for brand "{clash.brand_name}"')

    brand = Brand(
        brand_name=name,
        prefix=upper,
        category=options.get("category") or "general",
        description=options.get("description"),
        website=options.get("website"),
        notes=options.get("notes"),
        is_active=True,
        is_default=False,
    )
    session.add(brand)
    session.commit()
    logger.info("Created brand prefix: %s -> %s", name, upper)
    return brand


def update_brand(session: Session, brand_id: int, updates: Dict[str, Any]) -> Brand:
    brand = session.get(Brand, brand_id)
    if brand is None:
        raise NotFoundError(f"Brand prefix with ID {brand_id} not found")

    if "prefix" in updates and updates["prefix"] is not None:
        upper = _normalise_prefix(updates["prefix"])
        # Aliases share a prefix; only a change of prefix can clash.
        if upper != brand.prefix:
            clash = session.scalar(
                select(Brand).where(Brand.prefix == upper, Brand.id != brand_id)
            )
            if clash:
                raise BrandError(
                    f'Prefix "{upper}" already exists for brand "{clash.brand_name}"'
                )
            brand.prefix = upper
    if updates.get("brandName"):
        name = str(updates["brandName"]).strip().lower()
        if name != brand.brand_name:
            existing = session.scalar(
                select(Brand).where(Brand.brand_name == name, Brand.id != brand_id)
            )
            if existing:
                raise BrandError(
                    f'Brand "{name}" already exists with prefix "{existing.prefix}"'
                )
            brand.brand_name = name
    for field, attr in (
        ("category", "category"),
        ("description", "description"),
        ("website", "website"),
        ("notes", "notes"),
    ):
        if field in updates:
            setattr(brand, attr, updates[field])
    if "isActive" in updates:
        brand.is_active = bool(updates["isActive"])

    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise BrandError(f"Brand {brand_id} conflicts with an existing brand") from exc
    logger.info("Updated brand prefix: %s -> %s", brand.brand_name, brand.prefix)
    return brand


# ==========================================================================
# 3. Default data
# ==========================================================================
DEFAULT_CATEGORIES = [
    ("Lighting", "LT"),
    ("Audio", "AU"),
    ("Power & Distribution", "PW"),
    ("Staging", "ST"),
    ("Effects", "EF"),
]

DEFAULT_BRANDS = [
    # Primary partners
    ("chauvet", "CHV", "lighting", "Chauvet Professional Lighting"),
    ("chauvet professional", "CHV", "lighting", "Chauvet Professional Lighting"),
    ("qsc", "QSC", "audio", "QSC Audio Systems"),
    ("martin", "MAR", "lighting", "Martin by Harman Lighting"),
    ("martin by harman", "MAR", "lighting", "Martin by Harman Lighting"),
    ("shure", "SHU", "audio", "Shure Microphone Systems"),
    ("adj", "ADJ", "lighting", "ADJ Lighting Equipment"),
    ("american dj", "ADJ", "lighting", "American DJ Lighting"),
    # Audio
    ("yamaha", "YAM", "audio", "Yamaha Audio Equipment"),
    ("crown", "CRN", "audio", "Crown Amplifiers"),
    ("mackie", "MAC", "audio", "Mackie Audio"),
    ("jbl", "JBL", "audio", "JBL Professional"),
    ("electro-voice", "ELV", "audio", "Electro-Voice"),
    ("behringer", "BEH", "audio", "Behringer Audio"),
    ("focusrite", "FOC", "audio", "Focusrite Audio Interfaces"),
    ("akg", "AKG", "audio", "AKG Microphones"),
    ("sennheiser", "SEN", "audio", "Sennheiser Audio"),
    ("rode", "ROD", "audio", "RODE Microphones"),
    # Lighting
    ("elation", "ELA", "lighting", "Elation Professional"),
    ("elation professional", "ELA", "lighting", "Elation Professional"),
    ("arri", "ARR", "lighting", "ARRI Lighting"),
    ("kino flo", "KIN", "lighting", "Kino Flo Lighting"),
    ("litepanels", "LIT", "lighting", "Litepanels LED"),
    ("godox", "GOD", "lighting", "Godox Lighting"),
    ("aputure", "APU", "lighting", "Aputure Lighting"),
    # Generic / fallback
    ("generic", "GEN", "general", "Generic/Unknown Brand"),
    ("other", "GEN", "general", "Other/Unspecified Brand"),
    ("unknown", "GEN", "general", "Unknown Brand"),
]


def initialize_default_brands(session: Session) -> Dict[str, int]:
    """Seed the default brand set; existing names are left untouched."""
    created = skipped = 0
    existing = set(session.scalars(select(Brand.brand_name)))
    for name, prefix, category, description in DEFAULT_BRANDS:
        if name in existing:
            skipped += 1
            continue
        session.add(
            Brand(
                brand_name=name,
                prefix=prefix,
                category=category,
                description=description,
                is_active=True,
                is_default=name == "generic",
            )
        )
        created += 1
    session.commit()
    logger.info("Default brands initialised: %d created, %d skipped", created, skipped)
    return {"created": created, "skipped": skipped, "total": len(DEFAULT_BRANDS)}


def ensure_default_categories(session: Session) -> None:
    existing = set(session.scalars(select(Category.name)))
    for name, prefix in DEFAULT_CATEGORIES:
        if name not in existing:
            session.add(Category(name=name, sku_prefix=prefix))
    session.commit()


def ensure_default_catalog() -> None:
    """Create default categories and brands if the catalog is empty."""
    session: Session = get_session()
    try:
        if session.scalar(select(func.count(Category.id))) == 0:
            ensure_default_categories(session)
        if session.scalar(select(func.count(Brand.id))) == 0:
            initialize_default_brands(session)
    finally:
        session.close()
