from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from table_engine.core.exceptions import (
    InvalidPartySizeError,
    InvalidWindowError,
    UnknownTableError,
)
from table_engine.schemas.window import TimeWindow
from table_engine.services.availability_service import AvailabilityQueryService
from table_engine.utils.enums import AvailabilityReason, ReservationStatus

from factories import (
    at,
    make_reservation,
    make_shared_table,
    make_table,
    window,
)


@pytest.fixture
def service():
    return AvailabilityQueryService(max_combination_size=3, max_results=10)


def test_free_table_is_available(service):
    table = make_table('T1', 4, min_capacity=2)

    result = service.check_availability(
        [table],
        [table.id],
        window(at(18)),
        [],
    )

    assert result.available is True
    assert result.conflicts == []
    assert result.reason is None


def test_overlapping_reservation_makes_table_unavailable(service):
    table = make_table('T1', 4, min_capacity=2)
    booked = make_reservation([table], start=at(18), duration_minutes=120)

    result = service.check_availability(
        [table],
        [table.id],
        window(at(19)),
        [booked],
    )

    assert result.available is False
    assert result.reason == AvailabilityReason.TABLE_CONFLICT
    assert [c.reservation_id for c in result.conflicts] == [booked.id]


def test_set_is_available_only_if_every_table_is(service):
    free = make_table('T1', 4)
    busy = make_table('T2', 4)
    booked = make_reservation([busy], start=at(18))

    result = service.check_availability(
        [free, busy],
        [free.id, busy.id],
        window(at(18)),
        [booked],
    )

    assert result.available is False
    assert {c.table_id for c in result.conflicts} == {busy.id}


def test_inactive_table_is_reported(service):
    table = make_table('T1', 4, is_active=False)

    result = service.check_availability(
        [table],
        [table.id],
        window(at(18)),
        [],
    )

    assert result.available is False
    assert result.reason == AvailabilityReason.TABLE_INACTIVE
    assert result.inactive_table_ids == [table.id]


def test_unknown_table_is_rejected(service):
    with pytest.raises(UnknownTableError):
        service.check_availability(
            [make_table('T1', 4)],
            [uuid4()],
            window(at(18)),
            [],
        )


def test_shared_table_uses_seat_allocation(service):
    shared = make_shared_table('T5', 10, max_party_size_per_booking=6)
    booked = [
        make_reservation([shared], start=at(18), party_size=4),
        make_reservation([shared], start=at(18), party_size=4),
    ]

    rejected = service.check_availability(
        [shared],
        [shared.id],
        window(at(18)),
        booked,
        party_size=3,
    )
    accepted = service.check_availability(
        [shared],
        [shared.id],
        window(at(18)),
        booked,
        party_size=2,
    )

    assert rejected.available is False
    assert rejected.reason == AvailabilityReason.INSUFFICIENT_SEATS
    assert rejected.conflicts == []
    assert accepted.available is True
    assert accepted.seat_checks[0].available_seats == 2


def test_shared_table_requires_party_size(service):
    shared = make_shared_table('T5', 10)

    with pytest.raises(InvalidPartySizeError):
        service.check_availability(
            [shared],
            [shared.id],
            window(at(18)),
            [],
        )


def test_check_is_idempotent(service):
    table = make_table('T1', 4)
    snapshot = [make_reservation([table], start=at(17))]

    first = service.check_availability(
        [table],
        [table.id],
        window(at(18)),
        snapshot,
    )
    second = service.check_availability(
        [table],
        [table.id],
        window(at(18)),
        snapshot,
    )

    assert first == second


def test_options_offer_pair_for_large_party(service):
    first = make_table('T1', 4)
    second = make_table('T2', 4)

    options = service.get_options_for_slot(
        [first, second],
        window(at(18)),
        6,
        [],
    )

    assert options.single_tables == []
    assert [c.table_ids for c in options.combinations] == [
        (first.id, second.id),
    ]
    assert options.optimal.table_ids == [first.id, second.id]
    assert options.optimal.requires_combination is True
    assert options.reason is None


def test_single_table_preferred_over_available_pair(service):
    tables = [make_table('T1', 4), make_table('T2', 4), make_table('T6', 6)]

    options = service.get_options_for_slot(tables, window(at(18)), 6, [])

    assert options.optimal.table_numbers == ['T6']
    assert options.optimal.requires_combination is False
    assert options.combinations


def test_minimum_violation_is_overridable(service):
    big = make_table('T3', 6, min_capacity=4)

    check = service.validate_capacity([big], [big.id], 1)

    assert check.reason == AvailabilityReason.MINIMUM_CAPACITY_VIOLATION
    assert check.overridable
    assert check.violating_tables[0].table_id == big.id
    assert check.violating_tables[0].shortfall == 3


def test_no_active_tables_returns_empty_options(service):
    tables = [make_table('T1', 4, is_active=False)]

    options = service.get_options_for_slot(tables, window(at(18)), 2, [])

    assert options.single_tables == []
    assert options.combinations == []
    assert options.optimal is None
    assert options.reason == AvailabilityReason.NO_ACTIVE_TABLES


def test_nothing_fits_is_not_found(service):
    table = make_table('T1', 2)

    options = service.get_options_for_slot([table], window(at(18)), 9, [])

    assert options.optimal is None
    assert options.reason == AvailabilityReason.NOT_FOUND


def test_pending_reservations_count_when_configured():
    table = make_table('T1', 4)
    pending = make_reservation(
        [table],
        start=at(18),
        status=ReservationStatus.PENDING,
    )
    service = AvailabilityQueryService(
        occupying_statuses={
            ReservationStatus.CONFIRMED,
            ReservationStatus.PENDING,
        },
    )

    result = service.check_availability(
        [table],
        [table.id],
        window(at(18)),
        [pending],
    )

    assert result.available is False


OPENING_HOURS = TimeWindow(start=at(12), end=at(23))
MOSCOW = timezone(timedelta(hours=3))


def test_aware_reservation_conflicts_with_naive_window(service):
    table = make_table('T1', 4)
    booked = make_reservation(
        [table],
        start=datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc),
    )

    result = service.check_availability(
        [table],
        [table.id],
        TimeWindow.from_duration(datetime(2026, 5, 1, 19, 0), 120),
        [booked],
    )

    assert result.available is False
    assert result.reason == AvailabilityReason.TABLE_CONFLICT


def test_naive_reservation_is_compared_with_offset_window_in_utc(service):
    table = make_table('T1', 4)
    booked = make_reservation([table], start=datetime(2026, 5, 1, 18, 0))

    busy = service.check_availability(
        [table],
        [table.id],
        TimeWindow.from_duration(
            datetime(2026, 5, 1, 22, 0, tzinfo=MOSCOW),
            60,
        ),
        [booked],
    )
    free = service.check_availability(
        [table],
        [table.id],
        TimeWindow.from_duration(
            datetime(2026, 5, 1, 23, 0, tzinfo=MOSCOW),
            60,
        ),
        [booked],
    )

    assert busy.reason == AvailabilityReason.TABLE_CONFLICT
    assert free.available is True


def test_window_before_opening_is_closed(service):
    table = make_table('T1', 4)

    result = service.check_availability(
        [table],
        [table.id],
        window(at(10)),
        [],
        opening_hours=OPENING_HOURS,
    )

    assert result.available is False
    assert result.reason == AvailabilityReason.RESTAURANT_CLOSED
    assert result.message == 'Ресторан закрыт в выбранное время'


def test_booking_must_end_before_closing(service):
    table = make_table('T1', 4)

    result = service.check_availability(
        [table],
        [table.id],
        window(at(22)),
        [],
        opening_hours=OPENING_HOURS,
    )

    assert result.reason == AvailabilityReason.RESTAURANT_CLOSED
    assert result.message == (
        'Ресторан закрывается в 23:00, бронь закончится в 00:00'
    )


def test_booking_ending_at_closing_is_available(service):
    table = make_table('T1', 4)

    result = service.check_availability(
        [table],
        [table.id],
        window(at(21)),
        [],
        opening_hours=OPENING_HOURS,
    )

    assert result.available is True


def test_options_report_restaurant_closed(service):
    tables = [make_table('T1', 4), make_table('T2', 6)]

    options = service.get_options_for_slot(
        tables,
        window(at(22)),
        2,
        [],
        opening_hours=OPENING_HOURS,
    )

    assert options.single_tables == []
    assert options.optimal is None
    assert options.reason == AvailabilityReason.RESTAURANT_CLOSED
    assert options.message.startswith('Ресторан закрывается в 23:00')


def test_only_shared_tables_means_no_active_tables(service):
    tables = [
        make_shared_table('S1', 10),
        make_table('T1', 4, is_active=False),
    ]

    options = service.get_options_for_slot(tables, window(at(18)), 2, [])

    assert options.optimal is None
    assert options.reason == AvailabilityReason.NO_ACTIVE_TABLES


def test_time_slots_skip_booked_period(service):
    table = make_table('T1', 4)
    booked = make_reservation([table], start=at(18), duration_minutes=120)

    slots = service.get_table_time_slots(
        [table],
        [table.id],
        at(16),
        at(22),
        60,
        60,
        [booked],
    )

    assert [slot.start for slot in slots] == [at(16), at(17), at(20), at(21)]
    assert all(slot.duration_minutes == 60 for slot in slots)


def test_time_slots_require_every_table_free(service):
    t1 = make_table('T1', 4)
    t2 = make_table('T2', 4)
    booked = make_reservation([t2], start=at(19), duration_minutes=60)

    slots = service.get_table_time_slots(
        [t1, t2],
        [t1.id, t2.id],
        at(18),
        at(21),
        30,
        60,
        [booked],
    )

    assert [slot.start for slot in slots] == [at(18), at(20)]


def test_time_slots_ignore_cancelled_reservations(service):
    table = make_table('T1', 4)
    cancelled = make_reservation(
        [table],
        start=at(18),
        status=ReservationStatus.CANCELLED_BY_USER,
    )

    slots = service.get_table_time_slots(
        [table],
        [table.id],
        at(18),
        at(20),
        60,
        60,
        [cancelled],
    )

    assert [slot.start for slot in slots] == [at(18), at(19)]


def test_time_slots_for_shared_table_count_seats(service):
    shared = make_shared_table('S1', 6)
    booked = make_reservation([shared], start=at(18), party_size=4)

    fits = service.get_table_time_slots(
        [shared],
        [shared.id],
        at(18),
        at(20),
        60,
        60,
        [booked],
        party_size=2,
    )
    too_many = service.get_table_time_slots(
        [shared],
        [shared.id],
        at(18),
        at(20),
        60,
        60,
        [booked],
        party_size=3,
    )

    assert [slot.start for slot in fits] == [at(18), at(19)]
    assert too_many == []


def test_time_slots_for_shared_table_need_party_size(service):
    shared = make_shared_table('S1', 6)

    with pytest.raises(InvalidPartySizeError):
        service.get_table_time_slots(
            [shared],
            [shared.id],
            at(18),
            at(20),
            60,
            60,
            [],
        )


def test_inactive_table_has_no_time_slots(service):
    table = make_table('T1', 4, is_active=False)

    slots = service.get_table_time_slots(
        [table],
        [table.id],
        at(12),
        at(23),
        30,
        120,
        [],
    )

    assert slots == []


@pytest.mark.parametrize(
    'day_start, day_end, slot_minutes, duration_minutes',
    [
        (at(23), at(12), 30, 120),
        (at(12), at(12), 30, 120),
        (at(12), at(23), 0, 120),
        (at(12), at(23), 30, 0),
    ],
)
def test_time_slots_reject_invalid_grid(
    service,
    day_start,
    day_end,
    slot_minutes,
    duration_minutes,
):
    table = make_table('T1', 4)

    with pytest.raises(InvalidWindowError):
        service.get_table_time_slots(
            [table],
            [table.id],
            day_start,
            day_end,
            slot_minutes,
            duration_minutes,
            [],
        )
