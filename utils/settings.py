from __future__ import annotations

"""Key/value system settings stored in the database."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Integer, String, select
from sqlalchemy.orm import Session

from config import AUTO_SKU_SETTING_KEY
from db import Base


class SystemSetting(Base):
    __tablename__ = "system_settings"
    id = Column(Integer, primary_key=True)
    key = Column(String(120), unique=True, nullable=False)
    value = Column(String(255), nullable=True)
    description = Column(String(255), nullable=True)
    category = Column(String(60), nullable=True)
    data_type = Column(String(20), nullable=False, default="string")
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


def get_setting(session: Session, key: str) -> Optional[str]:
    setting = session.scalar(select(SystemSetting).where(SystemSetting.key == key))
    return setting.value if setting else None


def set_setting(session: Session, key: str, value: str, **meta: str) -> SystemSetting:
    """Insert or update ``key`` and commit."""
    setting = session.scalar(select(SystemSetting).where(SystemSetting.key == key))
    if setting is None:
        setting = SystemSetting(key=key, **meta)
        session.add(setting)
    setting.value = value
    session.commit()
    return setting


def stored_auto_generation_disabled(session: Session) -> bool:
    """Return the persisted kill switch; a missing row means enabled."""
    return (get_setting(session, AUTO_SKU_SETTING_KEY) or "").lower() == "true"


def store_auto_generation(session: Session, enabled: bool) -> None:
    # The row stores the *disable* flag, hence the inversion.
    set_setting(
        session,
        AUTO_SKU_SETTING_KEY,
        "false" if enabled else "true",
        description="Disable automatic SKU generation for new equipment units",
        category="SKU Generation",
        data_type="boolean",
    )
