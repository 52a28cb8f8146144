import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from table_engine.core.db import Base

if TYPE_CHECKING:
    from table_engine.models import Reservation


class ReservationTable(Base):
    """Таблица связей брони со столами."""

    reservation_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('reservation.id', ondelete='CASCADE'),
        index=True,
        nullable=False,
    )
    table_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('table.id', ondelete='RESTRICT'),
        index=True,
        nullable=False,
    )

    reservation: Mapped['Reservation'] = relationship(
        back_populates='table_links',
    )

    __table_args__ = (
        UniqueConstraint(
            'reservation_id',
            'table_id',
            name='uq_reservation_table',
        ),
    )
