from typing import AbstractSet, Iterable, Optional
from uuid import UUID

from loguru import logger

from table_engine.schemas.availability import SeatAllocation, SeatAvailability
from table_engine.schemas.reservation import ReservationData
from table_engine.schemas.table import TableData
from table_engine.schemas.window import TimeWindow
from table_engine.services.capacity_validator import check_party_size
from table_engine.services.conflict_detector import (
    default_occupying_statuses,
    occupying_reservations,
)
from table_engine.utils.enums import AvailabilityReason, ReservationStatus


class SharedTableSeatAllocator:
    """Поштучный учет мест за общими столами.

    В отличие от обычных столов, пересекающиеся брони за общим столом не
    исключают друг друга: места суммируются, пока не закончится
    вместимость стола.
    """

    def __init__(
        self,
        occupying_statuses: Optional[AbstractSet[ReservationStatus]] = None,
    ) -> None:
        """Инициализация с набором занимающих статусов."""
        self.occupying_statuses = frozenset(
            occupying_statuses
            if occupying_statuses is not None
            else default_occupying_statuses(),
        )

    def allocate(
        self,
        table: TableData,
        window: TimeWindow,
        reservations: Iterable[ReservationData],
        exclude_reservation_id: Optional[UUID] = None,
    ) -> SeatAllocation:
        """Считает занятые и свободные места общего стола в интервале."""
        self._ensure_shared(table)
        holding = list(
            occupying_reservations(
                table.id,
                window,
                reservations,
                self.occupying_statuses,
                exclude_reservation_id,
            ),
        )
        occupied = sum(reservation.party_size for reservation in holding)
        return SeatAllocation(
            table_id=table.id,
            window=window,
            capacity=table.capacity,
            occupied_seats=occupied,
            available_seats=max(table.capacity - occupied, 0),
            reservation_ids=[reservation.id for reservation in holding],
        )

    def check_seat_availability(
        self,
        table: TableData,
        window: TimeWindow,
        party_size: int,
        reservations: Iterable[ReservationData],
        exclude_reservation_id: Optional[UUID] = None,
    ) -> SeatAvailability:
        """Проверяет, хватает ли мест за общим столом для компании.

        Args:
            table: Общий стол
            window: Запрошенный интервал
            party_size: Количество гостей новой брони
            reservations: Снимок броней ресторана
            exclude_reservation_id: Бронь, которую нужно пропустить

        Returns:
            SeatAvailability: Свободные места и причина отказа, если есть

        Raises:
            InvalidPartySizeError: Если размер компании не положительный
            ValueError: Если стол не общий

        """
        check_party_size(party_size)
        allocation = self.allocate(
            table,
            window,
            reservations,
            exclude_reservation_id,
        )
        result = SeatAvailability(
            table_id=table.id,
            capacity=table.capacity,
            occupied_seats=allocation.occupied_seats,
            available_seats=allocation.available_seats,
            available=True,
        )
        limit = table.max_party_size_per_booking
        if limit is not None and party_size > limit:
            result.available = False
            result.reason = AvailabilityReason.EXCEEDS_PER_BOOKING_MAX
            result.message = (
                f'За общим столом {table.number} можно забронировать '
                f'не более {limit} мест на одну бронь'
            )
        elif party_size > allocation.available_seats:
            result.available = False
            result.reason = AvailabilityReason.INSUFFICIENT_SEATS
            result.message = (
                f'За общим столом {table.number} свободно только '
                f'{allocation.available_seats} мест'
            )
        if not result.available:
            logger.debug(result.message)
        return result

    @staticmethod
    def _ensure_shared(table: TableData) -> None:
        if not table.is_shared:
            raise ValueError(
                f'Стол {table.number} не общий, места не распределяются',
            )
