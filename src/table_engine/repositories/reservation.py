from typing import AbstractSet
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from table_engine.models import Reservation, ReservationTable
from table_engine.repositories.base import CRUDBase
from table_engine.schemas.reservation import ReservationCreate, ReservationData
from table_engine.schemas.window import TimeWindow
from table_engine.utils.enums import ReservationStatus


class ReservationRepository(CRUDBase[Reservation, ReservationCreate]):
    """Репозиторий для операций с бронями."""

    def __init__(self) -> None:
        """Инициализация репозитория броней."""
        super().__init__(Reservation)

    async def fetch_occupying_reservations(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        window: TimeWindow,
        statuses: AbstractSet[ReservationStatus],
    ) -> list[ReservationData]:
        """Возвращает брони ресторана, занимающие столы в интервале.

        Args:
            session: Асинхронная сессия базы данных
            restaurant_id: UUID ресторана
            window: Интервал, с которым брони должны пересекаться
            statuses: Статусы, при которых бронь удерживает стол

        Returns:
            list[ReservationData]: Снимок броней для движка доступности

        """
        reservations = await self.get(
            session,
            Reservation.is_active.is_(True),
            Reservation.status.in_(list(statuses)),
            Reservation.start_time < window.end,
            Reservation.end_time > window.start,
            many=True,
            order_by=[Reservation.start_time],
            restaurant_id=restaurant_id,
        )
        return [
            ReservationData.model_validate(reservation)
            for reservation in reservations
            if reservation.table_links
        ]

    async def confirmation_code_exists(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        code: str,
    ) -> bool:
        """Проверяет, занят ли код подтверждения в ресторане."""
        stmt = select(Reservation.id).where(
            Reservation.restaurant_id == restaurant_id,
            Reservation.confirmation_code == code,
        )
        result = await session.execute(stmt)
        return result.first() is not None

    def build(
        self,
        restaurant_id: UUID,
        obj_in: ReservationCreate,
        confirmation_code: str,
    ) -> Reservation:
        """Собирает модель брони со связями на столы (без сохранения)."""
        window = obj_in.window
        return Reservation(
            restaurant_id=restaurant_id,
            start_time=window.start,
            end_time=window.end,
            duration_minutes=obj_in.duration_minutes,
            party_size=obj_in.party_size,
            status=obj_in.status,
            guest_name=obj_in.guest_name,
            confirmation_code=confirmation_code,
            table_links=[
                ReservationTable(table_id=table_id)
                for table_id in obj_in.table_ids
            ],
        )


reservation_repository = ReservationRepository()
