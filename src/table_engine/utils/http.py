from typing import Any

from fastapi import HTTPException, status

from table_engine.core.exceptions import (
    AvailabilityError,
    ReservationConflictError,
    SeatsUnavailableError,
    TableConflictError,
    UnknownTableError,
)

CONFLICT_ERRORS = (
    TableConflictError,
    SeatsUnavailableError,
    ReservationConflictError,
)


def build_error(detail: Any, code: int) -> dict[str, Any]:
    """Формирует унифицированный ответ об ошибке для API."""
    return {'code': code, 'detail': str(detail) if detail is not None else ''}


def availability_error_status(exc: AvailabilityError) -> int:
    """Подбирает HTTP-статус для ошибки движка доступности."""
    if isinstance(exc, CONFLICT_ERRORS):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, UnknownTableError):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


def availability_http_error(exc: AvailabilityError) -> HTTPException:
    """Превращает ошибку движка доступности в HTTPException."""
    status_code = availability_error_status(exc)
    return HTTPException(
        status_code=status_code,
        detail=build_error(str(exc), status_code),
    )
