from typing import TYPE_CHECKING, Optional, Sequence
from uuid import UUID

from table_engine.utils.enums import AvailabilityReason

if TYPE_CHECKING:
    from table_engine.schemas.availability import (
        CapacityCheck,
        Conflict,
        SeatAvailability,
    )


class AvailabilityError(ValueError):
    """Базовая ошибка движка доступности столов."""

    reason: Optional[AvailabilityReason] = None


class InvalidWindowError(AvailabilityError):
    """Некорректный интервал: длительность <= 0 или конец <= начала."""

    reason = AvailabilityReason.INVALID_WINDOW


class InvalidPartySizeError(AvailabilityError):
    """Некорректный размер компании."""


class UnknownTableError(AvailabilityError):
    """Запрошен стол, которого нет среди переданных столов ресторана."""

    def __init__(self, table_ids: Sequence[UUID]) -> None:
        """Сохраняет список неизвестных идентификаторов столов."""
        self.table_ids = list(table_ids)
        super().__init__(
            'Столы не найдены: '
            + ', '.join(str(table_id) for table_id in self.table_ids),
        )


class TableInactiveError(AvailabilityError):
    """Запрошенный стол выключен из рассадки."""

    reason = AvailabilityReason.TABLE_INACTIVE


class CapacityViolationError(AvailabilityError):
    """Выбранные столы не подходят по вместимости."""

    def __init__(self, check: 'CapacityCheck') -> None:
        """Сохраняет результат проверки вместимости."""
        self.check = check
        self.reason = check.reason
        super().__init__(check.message or 'Недопустимая вместимость столов')


class TableConflictError(AvailabilityError):
    """Стол занят другой бронью в запрошенный интервал."""

    reason = AvailabilityReason.TABLE_CONFLICT

    def __init__(self, conflicts: Sequence['Conflict']) -> None:
        """Сохраняет конфликтующие брони для отображения."""
        self.conflicts = list(conflicts)
        numbers = sorted({c.table_number for c in self.conflicts})
        super().__init__(
            'Столы заняты в выбранное время: ' + ', '.join(numbers),
        )


class SeatsUnavailableError(AvailabilityError):
    """На общем столе недостаточно мест для брони."""

    def __init__(self, seats: 'SeatAvailability') -> None:
        """Сохраняет результат проверки мест общего стола."""
        self.seats = seats
        self.reason = seats.reason
        super().__init__(seats.message or 'Недостаточно мест за общим столом')


class RestaurantClosedError(AvailabilityError):
    """Бронь не укладывается в часы работы ресторана."""

    reason = AvailabilityReason.RESTAURANT_CLOSED


class ReservationConflictError(AvailabilityError):
    """Запись брони отклонена хранилищем, нужно перепроверить доступность."""

    reason = AvailabilityReason.TABLE_CONFLICT


class ConfirmationCodeExhaustedError(RuntimeError):
    """Не удалось подобрать уникальный код подтверждения."""
