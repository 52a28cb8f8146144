import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from table_engine.core.db import Base
from table_engine.utils.enums import ReservationStatus

if TYPE_CHECKING:
    from table_engine.models import ReservationTable


class Reservation(Base):
    """Таблица броней столов ресторана."""

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
    )
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    end_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ReservationStatus] = mapped_column(
        Enum(ReservationStatus, name='reservation_status'),
        nullable=False,
        default=ReservationStatus.CONFIRMED,
    )
    guest_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    confirmation_code: Mapped[str] = mapped_column(
        String(12),
        nullable=False,
    )

    table_links: Mapped[List['ReservationTable']] = relationship(
        back_populates='reservation',
        lazy='selectin',
        cascade='all, delete-orphan',
    )

    __table_args__ = (
        UniqueConstraint(
            'restaurant_id',
            'confirmation_code',
            name='uq_reservation_confirmation_code',
        ),
        CheckConstraint('end_time > start_time', name='ck_reservation_window'),
        CheckConstraint('party_size >= 1', name='ck_reservation_party_size'),
        Index(
            'ix_reservation_restaurant_window',
            'restaurant_id',
            'start_time',
            'end_time',
        ),
    )

    @property
    def table_ids(self) -> list[uuid.UUID]:
        """Идентификаторы столов брони."""
        return [link.table_id for link in self.table_links]
