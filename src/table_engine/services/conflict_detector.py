from typing import AbstractSet, Iterable, Iterator, Optional
from uuid import UUID

from loguru import logger

from table_engine.core.config import settings
from table_engine.core.constants import (
    OCCUPYING_STATUSES,
    OCCUPYING_STATUSES_WITH_PENDING,
)
from table_engine.schemas.availability import Conflict, ConflictCheck
from table_engine.schemas.reservation import ReservationData
from table_engine.schemas.table import TableData
from table_engine.schemas.window import TimeWindow
from table_engine.utils.enums import ReservationStatus


def default_occupying_statuses() -> frozenset[ReservationStatus]:
    """Возвращает набор занимающих статусов согласно настройкам."""
    if settings.COUNT_PENDING_AS_OCCUPYING:
        return OCCUPYING_STATUSES_WITH_PENDING
    return OCCUPYING_STATUSES


def occupying_reservations(
    table_id: UUID,
    window: TimeWindow,
    reservations: Iterable[ReservationData],
    occupying_statuses: AbstractSet[ReservationStatus],
    exclude_reservation_id: Optional[UUID] = None,
) -> Iterator[ReservationData]:
    """Перебирает занимающие брони стола, пересекающиеся с интервалом."""
    for reservation in reservations:
        if reservation.id == exclude_reservation_id:
            continue
        if table_id not in reservation.table_ids:
            continue
        if reservation.status not in occupying_statuses:
            continue
        if reservation.window.overlaps(window):
            yield reservation


class ConflictDetector:
    """Проверка исключительной занятости обычных столов."""

    def __init__(
        self,
        occupying_statuses: Optional[AbstractSet[ReservationStatus]] = None,
    ) -> None:
        """Инициализация детектора с набором занимающих статусов."""
        self.occupying_statuses = frozenset(
            occupying_statuses
            if occupying_statuses is not None
            else default_occupying_statuses(),
        )

    def find_conflicts(
        self,
        table: TableData,
        window: TimeWindow,
        reservations: Iterable[ReservationData],
        exclude_reservation_id: Optional[UUID] = None,
    ) -> list[Conflict]:
        """Возвращает все брони, занимающие стол в запрошенный интервал.

        Args:
            table: Обычный (не общий) стол
            window: Запрошенный интервал
            reservations: Снимок броней ресторана
            exclude_reservation_id: Бронь, которую нужно пропустить
                                    (при пересадке существующей брони)

        Returns:
            list[Conflict]: Конфликты, упорядоченные по времени начала

        Raises:
            ValueError: Если передан общий стол

        """
        if table.is_shared:
            raise ValueError(
                f'Стол {table.number} общий, его места проверяются '
                'через распределение мест',
            )
        conflicts = [
            Conflict(
                reservation_id=reservation.id,
                table_id=table.id,
                table_number=table.number,
                guest_name=reservation.guest_name,
                party_size=reservation.party_size,
                start_time=reservation.start_time,
                end_time=reservation.end_time,
                status=reservation.status,
            )
            for reservation in occupying_reservations(
                table.id,
                window,
                reservations,
                self.occupying_statuses,
                exclude_reservation_id,
            )
        ]
        conflicts.sort(key=lambda conflict: conflict.start_time)
        if conflicts:
            logger.debug(
                f'Стол {table.number} занят в интервале '
                f'{window.start:%H:%M}-{window.end:%H:%M}: '
                f'{len(conflicts)} конфликт(ов)',
            )
        return conflicts

    def has_conflict(
        self,
        table: TableData,
        window: TimeWindow,
        reservations: Iterable[ReservationData],
        exclude_reservation_id: Optional[UUID] = None,
    ) -> ConflictCheck:
        """Проверяет, занят ли стол в запрошенный интервал."""
        conflicts = self.find_conflicts(
            table,
            window,
            reservations,
            exclude_reservation_id,
        )
        return ConflictCheck(
            table_id=table.id,
            has_conflict=bool(conflicts),
            conflicts=conflicts,
        )

    def is_free(
        self,
        table: TableData,
        window: TimeWindow,
        reservations: Iterable[ReservationData],
        exclude_reservation_id: Optional[UUID] = None,
    ) -> bool:
        """Свободен ли стол в запрошенный интервал."""
        return next(
            occupying_reservations(
                table.id,
                window,
                reservations,
                self.occupying_statuses,
                exclude_reservation_id,
            ),
            None,
        ) is None
