from typing import Sequence

from loguru import logger

from table_engine.core.exceptions import InvalidPartySizeError
from table_engine.schemas.availability import (
    CapacityCheck,
    MinimumCapacityViolation,
)
from table_engine.schemas.table import TableData
from table_engine.utils.enums import AvailabilityReason


def check_party_size(party_size: int) -> None:
    """Проверяет, что размер компании положительный."""
    if party_size < 1:
        raise InvalidPartySizeError(
            'Размер компании должен быть положительным, '
            f'получено {party_size}',
        )


class CapacityValidator:
    """Проверка вместимости выбранного набора столов."""

    @staticmethod
    def validate_capacity(
        tables: Sequence[TableData],
        party_size: int,
        allow_minimum_override: bool = False,
    ) -> CapacityCheck:
        """Проверяет, что набор столов подходит для компании.

        Максимум набора равен сумме вместимостей столов, минимум равен сумме
        минимальных вместимостей (каждый стол сохраняет свой минимум и
        в объединении). Превышение максимума дает жесткий отказ, нарушение
        минимума можно подтвердить вручную.

        Args:
            tables: Столы, выбранные для брони
            party_size: Количество гостей
            allow_minimum_override: Подтверждение посадки компании меньше
                                    минимума столов

        Returns:
            CapacityCheck: Результат проверки с деталями нарушений

        Raises:
            InvalidPartySizeError: Если размер компании не положительный

        """
        check_party_size(party_size)
        total_capacity = sum(table.capacity for table in tables)
        total_min_capacity = sum(table.min_capacity for table in tables)

        if party_size > total_capacity:
            logger.debug(
                f'Недостаточно мест: требуется {party_size}, '
                f'доступно {total_capacity}',
            )
            return CapacityCheck(
                valid=False,
                party_size=party_size,
                total_capacity=total_capacity,
                total_min_capacity=total_min_capacity,
                reason=AvailabilityReason.CAPACITY_TOO_SMALL,
                shortfall=party_size - total_capacity,
                message=(
                    f'Недостаточно мест: требуется {party_size}, '
                    f'доступно {total_capacity}'
                ),
            )

        if party_size < total_min_capacity:
            violations = [
                MinimumCapacityViolation(
                    table_id=table.id,
                    table_number=table.number,
                    min_capacity=table.min_capacity,
                    shortfall=table.min_capacity - party_size,
                )
                for table in tables
                if table.min_capacity > party_size
            ]
            numbers = ', '.join(table.number for table in tables)
            message = (
                f'Компания из {party_size} гостей меньше минимума '
                f'столов {numbers} ({total_min_capacity})'
            )
            if allow_minimum_override:
                logger.info(f'{message}; подтверждено вручную')
            return CapacityCheck(
                valid=allow_minimum_override,
                party_size=party_size,
                total_capacity=total_capacity,
                total_min_capacity=total_min_capacity,
                reason=AvailabilityReason.MINIMUM_CAPACITY_VIOLATION,
                violating_tables=violations,
                shortfall=total_min_capacity - party_size,
                overridable=True,
                overridden=allow_minimum_override,
                message=message,
            )

        return CapacityCheck(
            valid=True,
            party_size=party_size,
            total_capacity=total_capacity,
            total_min_capacity=total_min_capacity,
        )
