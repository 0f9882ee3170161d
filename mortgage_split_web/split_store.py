"""Persistence layer for saved split previews.

The web app lets a user keep the previews they have worked out so they can
come back to them before recording the payment. Each saved preview is one
row holding the split components as money columns, keyed by the browser
session token that saved it. Any SQLAlchemy-compatible database works;
SQLite is the default for local development. This is a scratch history of
previews, not the ledger.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    delete,
    select,
)
from sqlalchemy.orm import declarative_base, sessionmaker

from mortgage_split.preview import SplitPreview

logger = logging.getLogger("mortgage_split.web.store")

Base = declarative_base()

Money = Numeric(14, 2)
WARNING_SEPARATOR = "\n"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedSplitModel(Base):
    __tablename__ = "saved_splits"

    id = Column(String(32), primary_key=True)
    user_token = Column(String(64), index=True, nullable=False)
    deal_nickname = Column(String(255), nullable=False)
    payment_date = Column(Date, nullable=True)
    total = Column(Money, nullable=False)
    principal = Column(Money, nullable=False)
    interest = Column(Money, nullable=False)
    escrow_taxes = Column(Money, nullable=False)
    escrow_insurance = Column(Money, nullable=False)
    payment_number = Column(Integer, nullable=True)
    frequency = Column(String(16), nullable=True)
    is_auto_calculated = Column(Boolean, nullable=False)
    escrow_inferred = Column(Boolean, nullable=False, default=False)
    warnings = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class SplitStore:
    """Saved split previews, at most ``max_per_user`` per session token.

    Saving beyond the limit drops the oldest previews of that token. A limit
    of zero or less keeps everything.
    """

    def __init__(self, url: str, *, max_per_user: int = 10) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_per_user = max_per_user

    def saved_previews(self, user_token: Optional[str]) -> List[Dict[str, Any]]:
        """Previews saved under ``user_token``, oldest first."""
        if not user_token:
            return []
        query = (
            select(SavedSplitModel)
            .where(SavedSplitModel.user_token == user_token)
            .order_by(SavedSplitModel.created_at.asc())
        )
        with self._session_factory() as session:
            return [self._to_dict(row) for row in session.execute(query).scalars()]

    def save_preview(
        self,
        user_token: Optional[str],
        preview: SplitPreview,
        payment_date: Optional[date] = None,
    ) -> Optional[str]:
        """Store ``preview`` and return the id it was saved under.

        Nothing is stored without a session token.
        """
        if not user_token:
            return None
        row = SavedSplitModel(
            id=uuid4().hex,
            user_token=user_token,
            deal_nickname=preview.deal_nickname or "Unknown",
            payment_date=payment_date,
            total=preview.total,
            principal=preview.principal,
            interest=preview.interest,
            escrow_taxes=preview.escrow_taxes,
            escrow_insurance=preview.escrow_insurance,
            payment_number=preview.payment_number,
            frequency=preview.frequency,
            is_auto_calculated=preview.is_auto_calculated,
            escrow_inferred=preview.escrow_inferred,
            warnings=WARNING_SEPARATOR.join(preview.warnings),
        )
        with self._session_factory() as session:
            session.add(row)
            session.commit()
        logger.debug("Saved %s split preview %s", "auto" if row.is_auto_calculated else "manual", row.id)
        self._drop_oldest(user_token)
        return row.id

    def remove_preview(self, user_token: Optional[str], split_id: Optional[str]) -> None:
        if not user_token or not split_id:
            return
        with self._session_factory() as session:
            session.execute(
                delete(SavedSplitModel).where(
                    SavedSplitModel.id == split_id, SavedSplitModel.user_token == user_token
                )
            )
            session.commit()

    def clear_previews(self, user_token: Optional[str]) -> None:
        if not user_token:
            return
        with self._session_factory() as session:
            session.execute(delete(SavedSplitModel).where(SavedSplitModel.user_token == user_token))
            session.commit()

    def _drop_oldest(self, user_token: str) -> None:
        if self._max_per_user <= 0:
            return
        with self._session_factory() as session:
            stale_ids = session.execute(
                select(SavedSplitModel.id)
                .where(SavedSplitModel.user_token == user_token)
                .order_by(SavedSplitModel.created_at.desc())
                .offset(self._max_per_user)
            ).scalars().all()
            if not stale_ids:
                return
            session.execute(delete(SavedSplitModel).where(SavedSplitModel.id.in_(stale_ids)))
            session.commit()
        logger.debug("Dropped %d old split previews", len(stale_ids))

    @staticmethod
    def _to_dict(row: SavedSplitModel) -> Dict[str, Any]:
        escrow_taxes = row.escrow_taxes
        escrow_insurance = row.escrow_insurance
        return {
            "id": row.id,
            "deal_nickname": row.deal_nickname,
            "payment_date": row.payment_date.isoformat() if row.payment_date else None,
            "total": row.total,
            "principal": row.principal,
            "interest": row.interest,
            "escrow_taxes": escrow_taxes,
            "escrow_insurance": escrow_insurance,
            "escrow": escrow_taxes + escrow_insurance,
            "payment_number": row.payment_number,
            "frequency": row.frequency,
            "is_auto_calculated": row.is_auto_calculated,
            "escrow_inferred": row.escrow_inferred,
            "warnings": row.warnings.split(WARNING_SEPARATOR) if row.warnings else [],
        }


def create_store(url: Optional[str], max_per_user: int = 10) -> SplitStore:
    return SplitStore(url or "sqlite:///mortgage_splits.sqlite3", max_per_user=max_per_user)
