from .reservation import Reservation
from .reservation_table import ReservationTable
from .table import Table

__all__ = [
    'Table',
    'Reservation',
    'ReservationTable',
]
