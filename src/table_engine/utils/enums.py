from enum import Enum


class TableType(str, Enum):
    """Enum класс для типов столов."""

    STANDARD = 'STANDARD'
    BOOTH = 'BOOTH'
    WINDOW = 'WINDOW'
    PATIO = 'PATIO'
    BAR = 'BAR'
    PRIVATE = 'PRIVATE'
    SHARED = 'SHARED'


class ReservationStatus(str, Enum):
    """Enum класс для статусов бронирований."""

    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    ARRIVED = 'ARRIVED'
    SEATED = 'SEATED'
    ORDERED = 'ORDERED'
    APPETIZERS = 'APPETIZERS'
    MAIN_COURSE = 'MAIN_COURSE'
    DESSERT = 'DESSERT'
    PAYMENT = 'PAYMENT'
    COMPLETED = 'COMPLETED'
    NO_SHOW = 'NO_SHOW'
    CANCELLED_BY_USER = 'CANCELLED_BY_USER'
    CANCELLED_BY_RESTAURANT = 'CANCELLED_BY_RESTAURANT'
    DECLINED_BY_RESTAURANT = 'DECLINED_BY_RESTAURANT'


class AvailabilityReason(str, Enum):
    """Enum класс для причин отказа в доступности."""

    INVALID_WINDOW = 'INVALID_WINDOW'
    NO_ACTIVE_TABLES = 'NO_ACTIVE_TABLES'
    CAPACITY_TOO_SMALL = 'CAPACITY_TOO_SMALL'
    MINIMUM_CAPACITY_VIOLATION = 'MINIMUM_CAPACITY_VIOLATION'
    TABLE_CONFLICT = 'TABLE_CONFLICT'
    TABLE_INACTIVE = 'TABLE_INACTIVE'
    INSUFFICIENT_SEATS = 'INSUFFICIENT_SEATS'
    EXCEEDS_PER_BOOKING_MAX = 'EXCEEDS_PER_BOOKING_MAX'
    NOT_FOUND = 'NOT_FOUND'
    RESTAURANT_CLOSED = 'RESTAURANT_CLOSED'
