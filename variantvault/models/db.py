"""
SQLAlchemy ORM models for persistent storage.

collection_items is read by the quantity resolver and the aggregator and
written only by the quantity update endpoints. card_prices is populated
by an external ingestion job and only read here, as is exchange_rates.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CollectionItemDB(Base):
    """
    How many copies of one card variant a user owns.

    The variant column holds a stored variant code. It is plain text rather
    than an enum so that legacy codes survive schema changes; readers map it
    through variant_mapper and ignore what they cannot map.
    """

    __tablename__ = "collection_items"
    __table_args__ = (
        UniqueConstraint("user_id", "card_id", "variant", name="uq_user_card_variant"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    card_id: Mapped[str] = mapped_column(String(255), index=True)
    variant: Mapped[str] = mapped_column(String(50), default="normal")
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    condition: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<CollectionItemDB(user={self.user_id}, card={self.card_id}, "
            f"variant={self.variant}, qty={self.quantity})>"
        )


class CardPriceDB(Base):
    """Market price of a card under one pricing source."""

    __tablename__ = "card_prices"
    __table_args__ = (UniqueConstraint("card_id", "source", name="uq_card_price_source"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[str] = mapped_column(String(255), index=True)
    source: Mapped[str] = mapped_column(String(20), index=True)
    market: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    mid: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="EUR")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<CardPriceDB(card={self.card_id}, source={self.source}, market={self.market})>"


class ExchangeRateDB(Base):
    """
    Exchange rate between two currencies.

    One unit of from_currency buys `rate` units of to_currency. Rows are
    written by an external rates job; the newest row for a pair wins.
    """

    __tablename__ = "exchange_rates"
    __table_args__ = (Index("ix_exchange_rates_pair", "from_currency", "to_currency"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    from_currency: Mapped[str] = mapped_column(String(3))
    to_currency: Mapped[str] = mapped_column(String(3))
    rate: Mapped[Decimal] = mapped_column(Numeric(10, 6))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<ExchangeRateDB({self.from_currency}->{self.to_currency}={self.rate})>"
