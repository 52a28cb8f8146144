from datetime import datetime, timedelta
from typing import AbstractSet, Iterable, Optional, Sequence
from uuid import UUID

from loguru import logger

from table_engine.core.exceptions import (
    InvalidPartySizeError,
    InvalidWindowError,
    UnknownTableError,
)
from table_engine.schemas.availability import (
    AvailabilityResult,
    CapacityCheck,
    SeatAvailability,
    SlotOptions,
)
from table_engine.schemas.reservation import ReservationData
from table_engine.schemas.table import TableData
from table_engine.schemas.window import TimeWindow, as_utc
from table_engine.services.assignment_selector import OptimalAssignmentSelector
from table_engine.services.capacity_validator import (
    CapacityValidator,
    check_party_size,
)
from table_engine.services.combination_search import CombinationSearch
from table_engine.services.conflict_detector import (
    ConflictDetector,
    default_occupying_statuses,
)
from table_engine.services.shared_table_allocator import (
    SharedTableSeatAllocator,
)
from table_engine.utils.enums import AvailabilityReason, ReservationStatus


def closed_message(
    window: TimeWindow,
    opening_hours: Optional[TimeWindow],
) -> Optional[str]:
    """Объясняет, почему интервал не укладывается в часы работы.

    Возвращает None, если часы работы не заданы или бронь начинается и
    заканчивается, пока ресторан открыт.
    """
    if opening_hours is None or opening_hours.contains(window):
        return None
    if not opening_hours.start <= window.start < opening_hours.end:
        return 'Ресторан закрыт в выбранное время'
    return (
        f'Ресторан закрывается в {opening_hours.end:%H:%M}, '
        f'бронь закончится в {window.end:%H:%M}'
    )


class AvailabilityQueryService:
    """Сервис для проверки доступности столов и подбора рассадки.

    Не хранит состояния между вызовами и не выполняет ввод-вывод: каждый
    ответ вычисляется заново по переданному снимку столов и броней и
    верен только на момент вызова.
    """

    def __init__(
        self,
        occupying_statuses: Optional[AbstractSet[ReservationStatus]] = None,
        max_combination_size: Optional[int] = None,
        max_results: Optional[int] = None,
    ) -> None:
        """Собирает движок из детектора, поиска, выбора и распределения."""
        statuses = (
            occupying_statuses
            if occupying_statuses is not None
            else default_occupying_statuses()
        )
        self.detector = ConflictDetector(statuses)
        self.capacity_validator = CapacityValidator()
        self.search = CombinationSearch(
            self.detector,
            max_combination_size=max_combination_size,
            max_results=max_results,
        )
        self.selector = OptimalAssignmentSelector()
        self.allocator = SharedTableSeatAllocator(statuses)

    def check_availability(
        self,
        tables: Iterable[TableData],
        table_ids: Sequence[UUID],
        window: TimeWindow,
        reservations: Iterable[ReservationData],
        party_size: Optional[int] = None,
        exclude_reservation_id: Optional[UUID] = None,
        opening_hours: Optional[TimeWindow] = None,
    ) -> AvailabilityResult:
        """Проверяет, свободны ли конкретные столы в интервале.

        Обычные столы проверяются на пересечение с занимающими бронями,
        общие столы на наличие свободных мест (для них нужен размер
        компании). Набор доступен, только если проходят все столы и
        бронь укладывается в часы работы, если они переданы.

        Args:
            tables: Все столы ресторана
            table_ids: Столы, которые выбрал сотрудник
            window: Запрошенный интервал
            reservations: Снимок броней ресторана
            party_size: Количество гостей (обязательно для общих столов)
            exclude_reservation_id: Бронь, которую нужно пропустить
                                    (при пересадке)
            opening_hours: Часы работы ресторана в день брони

        Returns:
            AvailabilityResult: Доступность и найденные конфликты

        Raises:
            UnknownTableError: Если среди столов нет запрошенного
            InvalidPartySizeError: Если для общего стола не передан размер
                                   компании

        """
        selected = self._resolve_tables(tables, table_ids)
        message = closed_message(window, opening_hours)
        if message is not None:
            logger.debug(f'Проверка столов отклонена: {message}')
            return AvailabilityResult(
                available=False,
                reason=AvailabilityReason.RESTAURANT_CLOSED,
                message=message,
            )
        snapshot = list(reservations)
        result = AvailabilityResult(available=True)

        for table in selected:
            if not table.is_active:
                result.inactive_table_ids.append(table.id)
                continue
            if table.is_shared:
                if party_size is None:
                    raise InvalidPartySizeError(
                        f'Для общего стола {table.number} нужен размер '
                        'компании',
                    )
                result.seat_checks.append(
                    self.allocator.check_seat_availability(
                        table,
                        window,
                        party_size,
                        snapshot,
                        exclude_reservation_id,
                    ),
                )
                continue
            result.conflicts.extend(
                self.detector.find_conflicts(
                    table,
                    window,
                    snapshot,
                    exclude_reservation_id,
                ),
            )

        failed_seats = [
            check for check in result.seat_checks if not check.available
        ]
        if result.inactive_table_ids:
            result.reason = AvailabilityReason.TABLE_INACTIVE
        elif result.conflicts:
            result.reason = AvailabilityReason.TABLE_CONFLICT
        elif failed_seats:
            result.reason = failed_seats[0].reason
        result.available = result.reason is None
        logger.debug(
            f'Проверка столов {len(selected)} шт. '
            f'{window.start:%Y-%m-%d %H:%M}-{window.end:%H:%M}: '
            f'{"свободны" if result.available else result.reason.value}',
        )
        return result

    def validate_capacity(
        self,
        tables: Iterable[TableData],
        table_ids: Sequence[UUID],
        party_size: int,
        allow_minimum_override: bool = False,
    ) -> CapacityCheck:
        """Проверяет вместимость выбранных столов по их идентификаторам."""
        return self.capacity_validator.validate_capacity(
            self._resolve_tables(tables, table_ids),
            party_size,
            allow_minimum_override,
        )

    def get_options_for_slot(
        self,
        tables: Iterable[TableData],
        window: TimeWindow,
        party_size: int,
        reservations: Iterable[ReservationData],
        preferred_features: Iterable[str] = (),
        opening_hours: Optional[TimeWindow] = None,
    ) -> SlotOptions:
        """Подбирает варианты рассадки компании и лучший из них.

        Отсутствие вариантов не ошибка: optimal будет None, а reason
        укажет, что ресторан закрыт (RESTAURANT_CLOSED), что подходящих
        по типу столов нет вовсе (NO_ACTIVE_TABLES) или что ни один стол
        и ни одно объединение не подходят (NOT_FOUND).
        """
        all_tables = list(tables)
        options = SlotOptions(window=window, party_size=party_size)
        message = closed_message(window, opening_hours)
        if message is not None:
            check_party_size(party_size)
            options.reason = AvailabilityReason.RESTAURANT_CLOSED
            options.message = message
            logger.info(f'Подбор рассадки отклонен: {message}')
            return options
        if not any(
            table.is_active and not table.is_shared for table in all_tables
        ):
            check_party_size(party_size)
            options.reason = AvailabilityReason.NO_ACTIVE_TABLES
            logger.info('В ресторане нет активных столов')
            return options

        candidates = self.search.find_candidates(
            all_tables,
            window,
            party_size,
            reservations,
            preferred_features,
        )
        options.single_tables = candidates.single_tables
        options.combinations = candidates.combinations
        options.optimal = self.selector.select_optimal(candidates)
        if options.optimal is None:
            options.reason = AvailabilityReason.NOT_FOUND
        return options

    def check_seat_availability(
        self,
        table: TableData,
        window: TimeWindow,
        party_size: int,
        reservations: Iterable[ReservationData],
        exclude_reservation_id: Optional[UUID] = None,
    ) -> SeatAvailability:
        """Проверяет свободные места за общим столом."""
        return self.allocator.check_seat_availability(
            table,
            window,
            party_size,
            reservations,
            exclude_reservation_id,
        )

    def get_table_time_slots(
        self,
        tables: Iterable[TableData],
        table_ids: Sequence[UUID],
        day_start: datetime,
        day_end: datetime,
        slot_minutes: int,
        duration_minutes: int,
        reservations: Iterable[ReservationData],
        party_size: Optional[int] = None,
    ) -> list[TimeWindow]:
        """Находит слоты дня, в которые все выбранные столы свободны.

        Слоты идут от day_start с шагом slot_minutes. Бронь в слоте
        длится duration_minutes и должна закончиться не позже day_end.
        Если среди столов есть выключенный, свободных слотов нет.

        Args:
            tables: Все столы ресторана
            table_ids: Столы, для которых ищутся слоты
            day_start: Открытие ресторана
            day_end: Закрытие ресторана
            slot_minutes: Шаг между началами слотов
            duration_minutes: Время посадки
            reservations: Снимок броней ресторана за день
            party_size: Количество гостей (обязательно для общих столов)

        Returns:
            list[TimeWindow]: Свободные слоты в порядке времени

        Raises:
            InvalidWindowError: Если часы работы, шаг или длительность
                                некорректны
            UnknownTableError: Если среди столов нет запрошенного
            InvalidPartySizeError: Если для общего стола не передан размер
                                   компании

        """
        day_start, day_end = as_utc(day_start), as_utc(day_end)
        if day_end <= day_start:
            raise InvalidWindowError(
                'Время закрытия должно быть позже времени открытия',
            )
        if slot_minutes <= 0:
            raise InvalidWindowError(
                'Шаг слотов должен быть положительным, '
                f'получено {slot_minutes} мин.',
            )
        hours = TimeWindow(start=day_start, end=day_end)
        slot = TimeWindow.from_duration(hours.start, duration_minutes)
        selected = self._resolve_tables(tables, table_ids)
        shared = [table for table in selected if table.is_shared]
        if shared and party_size is None:
            raise InvalidPartySizeError(
                f'Для общего стола {shared[0].number} нужен размер компании',
            )
        if not all(table.is_active for table in selected):
            logger.debug('Среди столов есть выключенные, слотов нет')
            return []

        snapshot = list(reservations)
        step = timedelta(minutes=slot_minutes)
        slots = []
        while hours.contains(slot):
            if all(
                self._is_free_in_slot(table, slot, party_size, snapshot)
                for table in selected
            ):
                slots.append(slot)
            slot = TimeWindow(start=slot.start + step, end=slot.end + step)
        logger.debug(
            f'Свободных слотов для столов {len(selected)} шт. '
            f'{hours.start:%Y-%m-%d %H:%M}-{hours.end:%H:%M}: {len(slots)}',
        )
        return slots

    def _is_free_in_slot(
        self,
        table: TableData,
        window: TimeWindow,
        party_size: Optional[int],
        reservations: list[ReservationData],
    ) -> bool:
        if table.is_shared:
            return self.allocator.check_seat_availability(
                table,
                window,
                party_size,
                reservations,
            ).available
        return self.detector.is_free(table, window, reservations)

    @staticmethod
    def _resolve_tables(
        tables: Iterable[TableData],
        table_ids: Sequence[UUID],
    ) -> list[TableData]:
        """Находит столы по идентификаторам в порядке запроса."""
        by_id = {table.id: table for table in tables}
        missing = [table_id for table_id in table_ids if table_id not in by_id]
        if missing:
            raise UnknownTableError(missing)
        return [by_id[table_id] for table_id in dict.fromkeys(table_ids)]


availability_service = AvailabilityQueryService()
