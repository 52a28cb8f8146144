from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from table_engine.core.db import DbSession
from table_engine.core.exceptions import AvailabilityError
from table_engine.repositories.reservation import reservation_repository
from table_engine.repositories.table import table_repository
from table_engine.schemas.availability import (
    AvailabilityCheckRequest,
    AvailabilityResult,
    SeatAvailability,
    SeatAvailabilityRequest,
    SlotOptions,
    SlotOptionsRequest,
    TableTimeSlots,
    TimeSlotsRequest,
)
from table_engine.schemas.common import ErrorResponse
from table_engine.schemas.reservation import ReservationData
from table_engine.schemas.window import TimeWindow
from table_engine.services.availability_service import availability_service
from table_engine.utils.http import availability_http_error, build_error

router = APIRouter(
    prefix='/restaurants/{restaurant_id}/availability',
    tags=['Доступность столов'],
)


async def _reservation_snapshot(
    session: AsyncSession,
    restaurant_id: UUID,
    window: TimeWindow,
) -> list[ReservationData]:
    """Читает брони ресторана, пересекающиеся с интервалом."""
    return await reservation_repository.fetch_occupying_reservations(
        session,
        restaurant_id,
        window,
        availability_service.detector.occupying_statuses,
    )


def _internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=build_error(
            'Внутренняя ошибка сервера',
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
    )


@router.post(
    '/check',
    response_model=AvailabilityResult,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def check_availability(
    restaurant_id: UUID,
    request_data: AvailabilityCheckRequest,
    session: DbSession,
) -> AvailabilityResult:
    """Проверяет, свободны ли выбранные столы в интервале.

    Args:
        restaurant_id: UUID ресторана
        request_data: Столы, время начала, длительность и размер компании
        session: Асинхронная сессия базы данных
    Returns:
        AvailabilityResult: Доступность столов и найденные конфликты
    Raises:
        HTTPException: 404 если столы не найдены в ресторане
        HTTPException: 400 если для общего стола не передан размер компании

    """
    window = request_data.window
    try:
        tables = await table_repository.fetch_tables(session, restaurant_id)
        reservations = await _reservation_snapshot(
            session,
            restaurant_id,
            window,
        )
        return availability_service.check_availability(
            tables,
            request_data.table_ids,
            window,
            reservations,
            party_size=request_data.party_size,
            exclude_reservation_id=request_data.exclude_reservation_id,
            opening_hours=request_data.opening_hours,
        )
    except AvailabilityError as e:
        logger.warning(f'Проверка доступности отклонена: {str(e)}')
        raise availability_http_error(e)
    except Exception as e:
        logger.error(
            f'Ошибка при проверке доступности в ресторане '
            f'{restaurant_id}: {str(e)}',
        )
        raise _internal_error()


@router.post(
    '/options',
    response_model=SlotOptions,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_slot_options(
    restaurant_id: UUID,
    request_data: SlotOptionsRequest,
    session: DbSession,
) -> SlotOptions:
    """Подбирает столы и объединения столов для компании.

    Отсутствие подходящих вариантов возвращается как обычный ответ с
    пустым optimal и причиной в поле reason.
    """
    window = request_data.window
    try:
        tables = await table_repository.fetch_tables(
            session,
            restaurant_id,
            active_only=True,
        )
        reservations = await _reservation_snapshot(
            session,
            restaurant_id,
            window,
        )
        return availability_service.get_options_for_slot(
            tables,
            window,
            request_data.party_size,
            reservations,
            request_data.preferred_features,
            opening_hours=request_data.opening_hours,
        )
    except AvailabilityError as e:
        logger.warning(f'Подбор рассадки отклонен: {str(e)}')
        raise availability_http_error(e)
    except Exception as e:
        logger.error(
            f'Ошибка при подборе рассадки в ресторане '
            f'{restaurant_id}: {str(e)}',
        )
        raise _internal_error()


@router.post(
    '/slots',
    response_model=TableTimeSlots,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_time_slots(
    restaurant_id: UUID,
    request_data: TimeSlotsRequest,
    session: DbSession,
) -> TableTimeSlots:
    """Возвращает слоты дня, в которые выбранные столы свободны.

    Args:
        restaurant_id: UUID ресторана
        request_data: Столы, часы работы, шаг слотов и время посадки
        session: Асинхронная сессия базы данных
    Returns:
        TableTimeSlots: Свободные слоты в порядке времени
    Raises:
        HTTPException: 404 если столы не найдены в ресторане
        HTTPException: 400 если часы работы некорректны или для общего
                       стола не передан размер компании

    """
    try:
        hours = request_data.hours
        tables = await table_repository.fetch_tables(session, restaurant_id)
        reservations = await _reservation_snapshot(
            session,
            restaurant_id,
            hours,
        )
        slots = availability_service.get_table_time_slots(
            tables,
            request_data.table_ids,
            hours.start,
            hours.end,
            request_data.slot_minutes,
            request_data.duration_minutes,
            reservations,
            party_size=request_data.party_size,
        )
    except AvailabilityError as e:
        logger.warning(f'Поиск слотов отклонен: {str(e)}')
        raise availability_http_error(e)
    except Exception as e:
        logger.error(
            f'Ошибка при поиске слотов в ресторане '
            f'{restaurant_id}: {str(e)}',
        )
        raise _internal_error()
    return TableTimeSlots(
        table_ids=request_data.table_ids,
        slot_minutes=request_data.slot_minutes,
        duration_minutes=request_data.duration_minutes,
        slots=slots,
    )


@router.post(
    '/shared/{table_id}',
    response_model=SeatAvailability,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def check_shared_seats(
    restaurant_id: UUID,
    table_id: UUID,
    request_data: SeatAvailabilityRequest,
    session: DbSession,
) -> SeatAvailability:
    """Проверяет, хватает ли мест за общим столом.

    Args:
        restaurant_id: UUID ресторана
        table_id: UUID общего стола
        request_data: Время начала, длительность и размер компании
        session: Асинхронная сессия базы данных
    Returns:
        SeatAvailability: Занятые и свободные места за столом
    Raises:
        HTTPException: 404 если стол не найден
        HTTPException: 400 если стол не общий

    """
    window = request_data.window
    try:
        table = await table_repository.get_table_data(
            session,
            restaurant_id,
            table_id,
        )
        if table is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=build_error(
                    'Стол не найден',
                    status.HTTP_404_NOT_FOUND,
                ),
            )
        reservations = await _reservation_snapshot(
            session,
            restaurant_id,
            window,
        )
        return availability_service.check_seat_availability(
            table,
            window,
            request_data.party_size,
            reservations,
            request_data.exclude_reservation_id,
        )
    except HTTPException:
        raise
    except AvailabilityError as e:
        logger.warning(f'Проверка мест отклонена: {str(e)}')
        raise availability_http_error(e)
    except ValueError as e:
        logger.warning(f'Проверка мест отклонена: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(str(e), status.HTTP_400_BAD_REQUEST),
        )
    except Exception as e:
        logger.error(f'Ошибка при проверке мест стола {table_id}: {str(e)}')
        raise _internal_error()
