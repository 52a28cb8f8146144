from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from loguru import logger

from table_engine.core.db import DbSession
from table_engine.core.exceptions import AvailabilityError
from table_engine.schemas.common import ErrorResponse
from table_engine.schemas.reservation import ReservationCreate, ReservationInfo
from table_engine.services.reservation_service import reservation_service
from table_engine.utils.http import availability_http_error, build_error
from table_engine.utils.logging_decorator import event_logger

router = APIRouter(
    prefix='/restaurants/{restaurant_id}/reservations',
    tags=['Бронирования'],
)


@router.post(
    '/',
    response_model=ReservationInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_409_CONFLICT: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создание', 'Reservation')
async def create_reservation(
    restaurant_id: UUID,
    reservation_data: ReservationCreate,
    session: DbSession,
) -> ReservationInfo:
    """Создает бронь на выбранные столы.

    Проверка доступности повторяется внутри транзакции записи, поэтому
    ответ эндпоинтов доступности не гарантирует успешного создания.

    Args:
        restaurant_id: UUID ресторана
        reservation_data: Данные для создания брони
        session: Асинхронная сессия базы данных
    Returns:
        ReservationInfo: Созданная бронь с кодом подтверждения
    Raises:
        HTTPException: 404 если столы не найдены в ресторане
        HTTPException: 400 если столы выключены или не подходят по
            вместимости
        HTTPException: 409 если столы заняты или не хватает мест

    """
    try:
        return await reservation_service.create_reservation(
            session,
            restaurant_id,
            reservation_data,
        )
    except AvailabilityError as e:
        raise availability_http_error(e)
    except Exception as e:
        logger.error(f'Неожиданная ошибка при создании брони: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при создании брони',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
