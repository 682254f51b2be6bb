"""Persisted per-(category, brand) SKU counters.

``current_sequence`` always holds the *next* number to hand out.  Every
mutation is a single UPDATE statement so concurrent requests never
read-modify-write in Python; each write is committed immediately so an
advanced counter stays advanced even if the surrounding request fails.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Tuple

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import SKU_MAX_SEQUENCE
from db import Base
from services.errors import (
    InvalidResetError,
    SequenceExhaustedError,
    SequenceNotFoundError,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SkuSequence(Base):
    __tablename__ = "sku_sequences"
    __table_args__ = (
        UniqueConstraint("category_prefix", "brand_prefix", name="uq_sku_sequence_key"),
    )
    id = Column(Integer, primary_key=True)
    category_prefix = Column(String(3), nullable=False)
    brand_prefix = Column(String(3), nullable=False)
    current_sequence = Column(Integer, nullable=False, default=1)
    last_used = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    @property
    def remaining(self) -> int:
        return SKU_MAX_SEQUENCE - self.current_sequence


def _where_key(category_prefix: str, brand_prefix: str):
    return (
        SkuSequence.category_prefix == category_prefix,
        SkuSequence.brand_prefix == brand_prefix,
    )


def get(session: Session, category_prefix: str, brand_prefix: str) -> SkuSequence | None:
    return session.scalar(select(SkuSequence).where(*_where_key(category_prefix, brand_prefix)))


def _current(session: Session, category_prefix: str, brand_prefix: str) -> int | None:
    return session.scalar(
        select(SkuSequence.current_sequence).where(*_where_key(category_prefix, brand_prefix))
    )


def peek(session: Session, category_prefix: str, brand_prefix: str) -> int:
    """Return the next candidate without creating or changing anything."""
    current = _current(session, category_prefix, brand_prefix)
    return 1 if current is None else current


def get_next(session: Session, category_prefix: str, brand_prefix: str) -> int:
    """Return the next candidate, creating the counter at 1 on first use.

    The value is not consumed; see :func:`claim`.
    """
    current = _current(session, category_prefix, brand_prefix)
    if current is not None:
        return current

    session.add(
        SkuSequence(
            category_prefix=category_prefix,
            brand_prefix=brand_prefix,
            current_sequence=1,
        )
    )
    try:
        session.commit()
        logger.info("Created sequence counter %s-%s", category_prefix, brand_prefix)
        return 1
    except IntegrityError:
        # Another request created the row first; use theirs.
        session.rollback()
        current = _current(session, category_prefix, brand_prefix)
        if current is None:
            raise
        return current


def advance(session: Session, category_prefix: str, brand_prefix: str) -> int:
    """Atomically add one to the counter and return the value this call set.

    Uses ``UPDATE ... RETURNING`` where the dialect supports it.  Elsewhere
    the value is re-read after the commit and may already include a
    concurrent advance.
    """
    stmt = (
        update(SkuSequence)
        .where(*_where_key(category_prefix, brand_prefix))
        .where(SkuSequence.current_sequence < SKU_MAX_SEQUENCE)
        .values(current_sequence=SkuSequence.current_sequence + 1)
        .execution_options(synchronize_session=False)
    )
    if session.get_bind().dialect.update_returning:
        new_value = session.execute(stmt.returning(SkuSequence.current_sequence)).scalar()
        session.commit()
        updated = new_value is not None
    else:
        updated = session.execute(stmt).rowcount > 0
        session.commit()
        new_value = _current(session, category_prefix, brand_prefix) if updated else None

    if not updated:
        if get(session, category_prefix, brand_prefix) is None:
            raise SequenceNotFoundError(
                f"Sequence record not found for {category_prefix}-{brand_prefix}"
            )
        raise SequenceExhaustedError(
            f"Sequence limit exceeded for {category_prefix}-{brand_prefix}. "
            f"Maximum is {SKU_MAX_SEQUENCE}."
        )
    return new_value


def claim(session: Session, category_prefix: str, brand_prefix: str, sequence: int) -> bool:
    """Consume ``sequence`` if the counter still points at it.

    Compare-and-set: returns False when another request moved the counter
    after ``sequence`` was read.
    """
    if sequence >= SKU_MAX_SEQUENCE:
        raise SequenceExhaustedError(
            f"Sequence limit exceeded for {category_prefix}-{brand_prefix}. "
            f"Maximum is {SKU_MAX_SEQUENCE}."
        )
    result = session.execute(
        update(SkuSequence)
        .where(*_where_key(category_prefix, brand_prefix))
        .where(SkuSequence.current_sequence == sequence)
        .values(current_sequence=sequence + 1, last_used=_utcnow())
        .execution_options(synchronize_session=False)
    )
    session.commit()
    return result.rowcount == 1


def touch(session: Session, category_prefix: str, brand_prefix: str) -> None:
    """Record that a unit was created with a SKU from this counter."""
    session.execute(
        update(SkuSequence)
        .where(*_where_key(category_prefix, brand_prefix))
        .values(last_used=_utcnow())
        .execution_options(synchronize_session=False)
    )
    session.commit()


def reset(
    session: Session, category_prefix: str, brand_prefix: str, new_value: int
) -> Tuple[int, int]:
    """Administrative override of the counter; returns ``(old, new)``."""
    if isinstance(new_value, bool) or not isinstance(new_value, int):
        raise InvalidResetError("New sequence must be an integer")
    if not 1 <= new_value <= SKU_MAX_SEQUENCE:
        raise InvalidResetError(f"New sequence must be between 1 and {SKU_MAX_SEQUENCE}")

    record = get(session, category_prefix, brand_prefix)
    if record is None:
        raise SequenceNotFoundError(
            f"Sequence record not found for {category_prefix}-{brand_prefix}"
        )
    old = record.current_sequence
    record.current_sequence = new_value
    record.last_used = _utcnow()
    session.commit()
    logger.info(
        "Sequence reset for %s-%s: %d -> %d", category_prefix, brand_prefix, old, new_value
    )
    return old, new_value


def list_all(session: Session) -> List[SkuSequence]:
    return list(
        session.scalars(
            select(SkuSequence).order_by(SkuSequence.category_prefix, SkuSequence.brand_prefix)
        )
    )
