from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from table_engine.core.constants import DEFAULT_SLOT_MINUTES
from table_engine.core.exceptions import InvalidWindowError
from table_engine.schemas.reservation import (
    PartySize,
    TurnTime,
    default_turn_time,
)
from table_engine.schemas.table import TableData
from table_engine.schemas.window import TimeWindow, UtcDatetime
from table_engine.utils.enums import AvailabilityReason, ReservationStatus


class Conflict(BaseModel):
    """Бронь, занимающая стол в запрошенный интервал."""

    reservation_id: UUID
    table_id: UUID
    table_number: str
    guest_name: Optional[str] = None
    party_size: int
    start_time: UtcDatetime
    end_time: UtcDatetime
    status: ReservationStatus


class ConflictCheck(BaseModel):
    """Результат проверки конфликтов для одного стола."""

    table_id: UUID
    has_conflict: bool
    conflicts: list[Conflict] = []

    @property
    def first_conflict(self) -> Optional[Conflict]:
        """Первая найденная конфликтующая бронь."""
        return self.conflicts[0] if self.conflicts else None


class MinimumCapacityViolation(BaseModel):
    """Стол, чей минимум гостей больше размера компании."""

    table_id: UUID
    table_number: str
    min_capacity: int
    shortfall: int


class CapacityCheck(BaseModel):
    """Результат проверки вместимости набора столов."""

    valid: bool
    party_size: int
    total_capacity: int
    total_min_capacity: int
    reason: Optional[AvailabilityReason] = None
    violating_tables: list[MinimumCapacityViolation] = []
    shortfall: int = 0
    overridable: bool = False
    overridden: bool = False
    message: Optional[str] = None


class TableCombination(BaseModel):
    """Набор из нескольких обычных столов для одной компании."""

    table_ids: tuple[UUID, ...]
    table_numbers: tuple[str, ...]
    total_capacity: int
    total_min_capacity: int
    overshoot: int
    priority_score: int = 0
    feature_matches: int = 0


class CandidateSet(BaseModel):
    """Кандидаты для рассадки компании в заданный интервал."""

    party_size: int
    single_tables: list[TableData] = []
    combinations: list[TableCombination] = []

    @property
    def is_empty(self) -> bool:
        """Нет ни одного подходящего стола или объединения."""
        return not self.single_tables and not self.combinations


class OptimalAssignment(BaseModel):
    """Лучший вариант рассадки."""

    table_ids: list[UUID]
    table_numbers: list[str]
    requires_combination: bool
    total_capacity: int


class SlotOptions(BaseModel):
    """Варианты рассадки компании на слот."""

    window: TimeWindow
    party_size: int
    single_tables: list[TableData] = []
    combinations: list[TableCombination] = []
    optimal: Optional[OptimalAssignment] = None
    reason: Optional[AvailabilityReason] = None
    message: Optional[str] = None


class SeatAvailability(BaseModel):
    """Результат проверки свободных мест за общим столом."""

    table_id: UUID
    capacity: int
    occupied_seats: int
    available_seats: int
    available: bool
    reason: Optional[AvailabilityReason] = None
    message: Optional[str] = None


class SeatAllocation(BaseModel):
    """Распределение мест общего стола в интервале."""

    table_id: UUID
    window: TimeWindow
    capacity: int
    occupied_seats: int
    available_seats: int
    reservation_ids: list[UUID] = []

    @property
    def occupancy_rate(self) -> float:
        """Доля занятых мест, в процентах."""
        if not self.capacity:
            return 0.0
        return min(self.occupied_seats, self.capacity) / self.capacity * 100


class AvailabilityResult(BaseModel):
    """Результат проверки доступности конкретного набора столов."""

    available: bool
    conflicts: list[Conflict] = []
    inactive_table_ids: list[UUID] = []
    seat_checks: list[SeatAvailability] = []
    reason: Optional[AvailabilityReason] = None
    message: Optional[str] = None


class WindowRequest(BaseModel):
    """Базовая схема запроса с временем начала и длительностью."""

    start_time: UtcDatetime
    duration_minutes: Annotated[int, TurnTime] = Field(
        default_factory=default_turn_time,
    )
    opening_hours: Optional[TimeWindow] = None

    @property
    def window(self) -> TimeWindow:
        """Запрошенный интервал."""
        return TimeWindow.from_duration(self.start_time, self.duration_minutes)


class AvailabilityCheckRequest(WindowRequest):
    """Запрос на проверку доступности выбранных столов."""

    table_ids: list[UUID] = Field(min_length=1)
    party_size: Optional[Annotated[int, PartySize]] = None
    exclude_reservation_id: Optional[UUID] = None


class SlotOptionsRequest(WindowRequest):
    """Запрос вариантов рассадки компании."""

    party_size: Annotated[int, PartySize]
    preferred_features: list[str] = []


class SeatAvailabilityRequest(WindowRequest):
    """Запрос свободных мест за общим столом."""

    party_size: Annotated[int, PartySize]
    exclude_reservation_id: Optional[UUID] = None


class TimeSlotsRequest(BaseModel):
    """Запрос свободных слотов выбранных столов на день.

    Слоты начинаются с day_start с шагом slot_minutes, и каждая бронь
    должна закончиться не позже day_end (часы работы ресторана).
    """

    table_ids: list[UUID] = Field(min_length=1)
    day_start: UtcDatetime
    day_end: UtcDatetime
    slot_minutes: int = Field(default=DEFAULT_SLOT_MINUTES, gt=0)
    duration_minutes: Annotated[int, TurnTime] = Field(
        default_factory=default_turn_time,
    )
    party_size: Optional[Annotated[int, PartySize]] = None

    @model_validator(mode='after')
    def check_hours(self) -> 'TimeSlotsRequest':
        """Проверяет, что ресторан закрывается позже, чем открывается."""
        if self.day_end <= self.day_start:
            raise InvalidWindowError(
                'Время закрытия должно быть позже времени открытия',
            )
        return self

    @property
    def hours(self) -> TimeWindow:
        """Часы работы, внутри которых ищутся слоты."""
        return TimeWindow(start=self.day_start, end=self.day_end)


class TableTimeSlots(BaseModel):
    """Свободные слоты выбранных столов."""

    table_ids: list[UUID]
    slot_minutes: int
    duration_minutes: int
    slots: list[TimeWindow] = []
