"""Модуль схем Pydantic для валидации и сериализации данных.

Содержит схемы движка доступности:
- Временной интервал (TimeWindow)
- Столы (Table)
- Брони (Reservation)
- Результаты проверок и подбора рассадки (Availability)

Снимки столов и броней неизменяемы и собираются из моделей ORM
через from_attributes.
"""

from .availability import (
    AvailabilityCheckRequest,
    AvailabilityResult,
    CandidateSet,
    CapacityCheck,
    Conflict,
    ConflictCheck,
    MinimumCapacityViolation,
    OptimalAssignment,
    SeatAllocation,
    SeatAvailability,
    SeatAvailabilityRequest,
    SlotOptions,
    SlotOptionsRequest,
    TableCombination,
    TableTimeSlots,
    TimeSlotsRequest,
)
from .common import ErrorResponse
from .reservation import ReservationCreate, ReservationData, ReservationInfo
from .table import TableCreate, TableData
from .window import TimeWindow, UtcDatetime, as_utc

__all__ = [
    'TimeWindow',
    'UtcDatetime',
    'as_utc',
    'TableCreate',
    'TableData',
    'ReservationCreate',
    'ReservationData',
    'ReservationInfo',
    'Conflict',
    'ConflictCheck',
    'MinimumCapacityViolation',
    'CapacityCheck',
    'TableCombination',
    'CandidateSet',
    'OptimalAssignment',
    'SlotOptions',
    'SeatAvailability',
    'SeatAllocation',
    'AvailabilityResult',
    'AvailabilityCheckRequest',
    'SlotOptionsRequest',
    'SeatAvailabilityRequest',
    'TimeSlotsRequest',
    'TableTimeSlots',
    'ErrorResponse',
]
