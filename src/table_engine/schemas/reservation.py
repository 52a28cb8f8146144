from datetime import datetime, timedelta
from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from table_engine.core.config import settings
from table_engine.core.constants import MAX_PARTY_SIZE, MIN_PARTY_SIZE
from table_engine.schemas.window import TimeWindow, UtcDatetime
from table_engine.utils.enums import ReservationStatus

PartySize = Field(ge=MIN_PARTY_SIZE, le=MAX_PARTY_SIZE)
TurnTime = Field(gt=0)


def default_turn_time() -> int:
    return settings.DEFAULT_TURN_TIME_MINUTES


def _check_unique_tables(table_ids: tuple[UUID, ...] | list[UUID]) -> None:
    if len(table_ids) != len(set(table_ids)):
        raise ValueError('Список столов не должен содержать дубликаты')


class ReservationData(BaseModel):
    """Снимок брони, переданный движку только для чтения."""

    id: UUID
    table_ids: tuple[UUID, ...] = Field(min_length=1)
    start_time: UtcDatetime
    duration_minutes: Annotated[int, TurnTime] = Field(
        default_factory=default_turn_time,
    )
    party_size: Annotated[int, PartySize]
    status: ReservationStatus
    guest_name: Optional[str] = None
    confirmation_code: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @model_validator(mode='after')
    def validate_tables(self) -> 'ReservationData':
        """Проверяет уникальность столов брони."""
        _check_unique_tables(self.table_ids)
        return self

    @property
    def end_time(self) -> datetime:
        """Время освобождения стола (начало + время посадки)."""
        return self.start_time + timedelta(minutes=self.duration_minutes)

    @property
    def window(self) -> TimeWindow:
        """Интервал, в течение которого бронь занимает столы."""
        return TimeWindow.from_duration(self.start_time, self.duration_minutes)


class ReservationCreate(BaseModel):
    """Схема для создания новой брони."""

    table_ids: list[UUID] = Field(min_length=1)
    start_time: UtcDatetime
    duration_minutes: Annotated[int, TurnTime] = Field(
        default_factory=default_turn_time,
    )
    party_size: Annotated[int, PartySize]
    status: ReservationStatus = ReservationStatus.CONFIRMED
    guest_name: Optional[str] = None
    allow_minimum_override: bool = False
    opening_hours: Optional[TimeWindow] = None

    @field_validator('guest_name', mode='before')
    @classmethod
    def normalize_guest_name(cls, value: Optional[str]) -> Optional[str]:
        """Очищает имя гостя от лишних пробелов."""
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError('Имя гостя должно быть строкой')
        cleaned = value.strip()
        return cleaned or None

    @model_validator(mode='after')
    def validate_tables(self) -> 'ReservationCreate':
        """Проверяет уникальность выбранных столов."""
        _check_unique_tables(self.table_ids)
        return self

    @property
    def window(self) -> TimeWindow:
        """Интервал, который займет новая бронь."""
        return TimeWindow.from_duration(self.start_time, self.duration_minutes)


class ReservationInfo(BaseModel):
    """Полная схема брони для ответа API."""

    id: UUID
    restaurant_id: UUID
    table_ids: list[UUID]
    start_time: UtcDatetime
    end_time: UtcDatetime
    duration_minutes: int
    party_size: int
    status: ReservationStatus
    guest_name: Optional[str] = None
    confirmation_code: str

    model_config = ConfigDict(from_attributes=True)
