import uuid
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Enum,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from table_engine.core.db import Base
from table_engine.utils.enums import TableType


class Table(Base):
    """Таблица столов ресторана."""

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        index=True,
        nullable=False,
    )
    number: Mapped[str] = mapped_column(String(20), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    min_capacity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        server_default='1',
    )
    table_type: Mapped[TableType] = mapped_column(
        Enum(TableType, name='table_type'),
        nullable=False,
        default=TableType.STANDARD,
    )
    features: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    max_party_size_per_booking: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    is_combinable: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    combinable_with: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    priority_score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    __table_args__ = (
        UniqueConstraint(
            'restaurant_id',
            'number',
            name='uq_table_number_per_restaurant',
        ),
        CheckConstraint('capacity >= 1', name='ck_table_capacity'),
        CheckConstraint(
            'min_capacity >= 1 AND min_capacity <= capacity',
            name='ck_table_min_capacity',
        ),
    )
