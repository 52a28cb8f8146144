from typing import Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from table_engine.core.exceptions import (
    AvailabilityError,
    CapacityViolationError,
    ReservationConflictError,
    RestaurantClosedError,
    SeatsUnavailableError,
    TableConflictError,
    TableInactiveError,
    UnknownTableError,
)
from table_engine.models import Reservation
from table_engine.repositories.reservation import reservation_repository
from table_engine.repositories.table import table_repository
from table_engine.schemas.reservation import ReservationCreate
from table_engine.schemas.table import TableData
from table_engine.services.availability_service import (
    AvailabilityQueryService,
    availability_service,
)
from table_engine.services.confirmation_code import generate_confirmation_code
from table_engine.utils.enums import AvailabilityReason


class ReservationService:
    """Атомарная проверка доступности и запись брони.

    Ответ движка верен только на момент вызова, поэтому проверка и запись
    выполняются в одной транзакции: строки выбранных столов блокируются,
    снимок броней читается уже под блокировкой, а нарушение ограничений
    хранилища откатывает транзакцию и требует повторной проверки.
    """

    def __init__(
        self,
        engine: Optional[AvailabilityQueryService] = None,
    ) -> None:
        """Инициализация сервиса с движком доступности."""
        self.engine = engine or availability_service

    async def create_reservation(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        obj_in: ReservationCreate,
    ) -> Reservation:
        """Создает бронь, если выбранные столы свободны.

        Args:
            session: Асинхронная сессия базы данных
            restaurant_id: UUID ресторана
            obj_in: Данные новой брони

        Returns:
            Reservation: Сохраненная бронь

        Raises:
            UnknownTableError: Если столы не найдены в ресторане
            TableInactiveError: Если среди столов есть неактивные
            CapacityViolationError: Если столы не подходят по вместимости
            RestaurantClosedError: Если бронь не укладывается в часы работы
            TableConflictError: Если столы заняты в выбранное время
            SeatsUnavailableError: Если за общим столом не хватает мест
            ReservationConflictError: Если запись отклонена хранилищем
            ConfirmationCodeExhaustedError: Если не удалось подобрать код

        """
        window = obj_in.window
        try:
            tables = await table_repository.lock_tables(
                session,
                restaurant_id,
                obj_in.table_ids,
            )
            self._validate_tables(tables, obj_in)
            reservations = (
                await reservation_repository.fetch_occupying_reservations(
                    session,
                    restaurant_id,
                    window,
                    self.engine.detector.occupying_statuses,
                )
            )
            availability = self.engine.check_availability(
                tables,
                obj_in.table_ids,
                window,
                reservations,
                party_size=obj_in.party_size,
                opening_hours=obj_in.opening_hours,
            )
            if availability.reason == AvailabilityReason.RESTAURANT_CLOSED:
                raise RestaurantClosedError(availability.message)
            if availability.conflicts:
                raise TableConflictError(availability.conflicts)
            failed_seats = [
                check for check in availability.seat_checks
                if not check.available
            ]
            if failed_seats:
                raise SeatsUnavailableError(failed_seats[0])

            async def code_exists(code: str) -> bool:
                return await reservation_repository.confirmation_code_exists(
                    session,
                    restaurant_id,
                    code,
                )

            code = await generate_confirmation_code(code_exists)
            reservation = reservation_repository.build(
                restaurant_id,
                obj_in,
                code,
            )
            session.add(reservation)
            await session.commit()
        except AvailabilityError as e:
            await session.rollback()
            logger.warning(f'Бронь отклонена: {str(e)}')
            raise
        except IntegrityError as e:
            await session.rollback()
            logger.warning(
                f'Хранилище отклонило запись брони: {str(e.orig)}',
            )
            raise ReservationConflictError(
                'Столы только что заняты другой бронью, '
                'проверьте доступность еще раз',
            ) from e
        except Exception:
            await session.rollback()
            raise
        logger.info(
            f'Создана бронь {reservation.confirmation_code} на столы '
            f'{", ".join(str(t) for t in obj_in.table_ids)} '
            f'({obj_in.party_size} гостей, '
            f'{window.start:%Y-%m-%d %H:%M}-{window.end:%H:%M})',
        )
        return reservation

    def _validate_tables(
        self,
        tables: list[TableData],
        obj_in: ReservationCreate,
    ) -> None:
        """Проверяет наличие, активность и вместимость выбранных столов."""
        found = {table.id for table in tables}
        missing = [
            table_id for table_id in obj_in.table_ids if table_id not in found
        ]
        if missing:
            raise UnknownTableError(missing)
        inactive = [table for table in tables if not table.is_active]
        if inactive:
            raise TableInactiveError(
                'Столы выключены из рассадки: '
                + ', '.join(table.number for table in inactive),
            )
        if any(table.is_shared for table in tables):
            if len(tables) != 1:
                raise AvailabilityError(
                    'Общий стол нельзя объединять с другими столами',
                )
            return
        capacity = self.engine.capacity_validator.validate_capacity(
            tables,
            obj_in.party_size,
            obj_in.allow_minimum_override,
        )
        if not capacity.valid:
            raise CapacityViolationError(capacity)


reservation_service = ReservationService()
