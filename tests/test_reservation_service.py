from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

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
from table_engine.repositories.reservation import reservation_repository
from table_engine.schemas.reservation import ReservationCreate
from table_engine.schemas.window import TimeWindow
from table_engine.services.reservation_service import reservation_service
from table_engine.utils.enums import AvailabilityReason, ReservationStatus

from factories import at, window


def _booking(tables, start=None, party_size=2, **kwargs):
    return ReservationCreate(
        table_ids=[table.id for table in tables],
        start_time=start or at(18),
        party_size=party_size,
        **kwargs,
    )


async def test_reservation_is_created_with_code(
    session,
    restaurant_id,
    dining_room,
):
    t1 = dining_room['T1']

    reservation = await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t1], guest_name='  Петров  '),
    )

    assert reservation.table_ids == [t1.id]
    assert reservation.end_time - reservation.start_time == timedelta(
        minutes=120,
    )
    assert reservation.guest_name == 'Петров'
    assert reservation.status == ReservationStatus.CONFIRMED
    assert len(reservation.confirmation_code) == 6


async def test_overlapping_booking_is_rejected(
    session,
    restaurant_id,
    dining_room,
):
    t1 = dining_room['T1']
    first = await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t1]),
    )
    first_id = first.id

    with pytest.raises(TableConflictError) as exc_info:
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking([t1], start=at(19)),
        )

    assert exc_info.value.conflicts[0].reservation_id == first_id


async def test_back_to_back_bookings_are_accepted(
    session,
    restaurant_id,
    dining_room,
):
    t1 = dining_room['T1']
    await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t1], start=at(16)),
    )

    later = await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t1], start=at(18)),
    )

    assert later.start_time == at(18)


async def test_accepted_bookings_never_overlap(
    session,
    restaurant_id,
    dining_room,
):
    t2 = dining_room['T2']
    starts = [at(17), at(18), at(18, 30), at(19), at(20), at(21, 30)]
    for start in starts:
        try:
            await reservation_service.create_reservation(
                session,
                restaurant_id,
                _booking([t2], start=start),
            )
        except TableConflictError:
            pass

    accepted = await reservation_repository.fetch_occupying_reservations(
        session,
        restaurant_id,
        window(at(0), 24 * 60),
        {ReservationStatus.CONFIRMED},
    )

    assert [r.start_time for r in accepted] == [at(17), at(19), at(21, 30)]
    for first, second in zip(accepted, accepted[1:]):
        assert not first.window.overlaps(second.window)


async def test_cancelled_booking_frees_table(
    session,
    restaurant_id,
    dining_room,
):
    t1 = dining_room['T1']
    await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t1], status=ReservationStatus.CANCELLED_BY_USER),
    )

    reservation = await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t1]),
    )

    assert reservation.status == ReservationStatus.CONFIRMED


async def test_combined_booking_blocks_member_tables(
    session,
    restaurant_id,
    dining_room,
):
    t1, t2 = dining_room['T1'], dining_room['T2']
    await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t1, t2], party_size=7),
    )

    with pytest.raises(TableConflictError):
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking([t2], start=at(19)),
        )


async def test_party_too_large_is_hard_failure(
    session,
    restaurant_id,
    dining_room,
):
    with pytest.raises(CapacityViolationError) as exc_info:
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking(
                [dining_room['T1']],
                party_size=5,
                allow_minimum_override=True,
            ),
        )

    assert exc_info.value.reason == AvailabilityReason.CAPACITY_TOO_SMALL


async def test_minimum_violation_needs_confirmation(
    session,
    restaurant_id,
    dining_room,
):
    t3 = dining_room['T3']
    with pytest.raises(CapacityViolationError) as exc_info:
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking([t3], party_size=1),
        )
    assert exc_info.value.check.violating_tables[0].shortfall == 3

    reservation = await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t3], party_size=1, allow_minimum_override=True),
    )

    assert reservation.party_size == 1


async def test_shared_table_accepts_parties_until_full(
    session,
    restaurant_id,
    dining_room,
):
    t5 = dining_room['T5']
    for _ in range(2):
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking([t5], party_size=4),
        )

    with pytest.raises(SeatsUnavailableError) as exc_info:
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking([t5], party_size=3),
        )
    assert exc_info.value.seats.available_seats == 2

    reservation = await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t5], party_size=2),
    )
    assert reservation.party_size == 2


async def test_shared_table_cannot_be_combined(
    session,
    restaurant_id,
    dining_room,
):
    with pytest.raises(AvailabilityError):
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking([dining_room['T5'], dining_room['T1']], party_size=4),
        )


async def test_unknown_and_foreign_tables_are_rejected(
    session,
    dining_room,
):
    with pytest.raises(UnknownTableError):
        await reservation_service.create_reservation(
            session,
            uuid4(),
            _booking([dining_room['T1']]),
        )


async def test_inactive_table_is_rejected(
    session,
    restaurant_id,
    create_table,
):
    table = await create_table('T9', 4, is_active=False)

    with pytest.raises(TableInactiveError):
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking([table]),
        )


async def test_storage_rejection_becomes_conflict(
    session,
    restaurant_id,
    dining_room,
    monkeypatch,
):
    async def failing_commit():
        raise IntegrityError('INSERT', {}, Exception('duplicate'))

    monkeypatch.setattr(session, 'commit', failing_commit)

    with pytest.raises(ReservationConflictError):
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking([dining_room['T2']]),
        )


async def test_same_offset_start_twice_is_conflict(
    session,
    restaurant_id,
    dining_room,
):
    t1 = dining_room['T1']
    start = datetime(2026, 5, 1, 21, 0, tzinfo=timezone(timedelta(hours=3)))
    first = await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t1], start=start),
    )
    first_id, first_start = first.id, first.start_time

    with pytest.raises(TableConflictError) as exc_info:
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking([t1], start=start),
        )

    assert first_start == at(18)
    assert exc_info.value.conflicts[0].reservation_id == first_id
    assert exc_info.value.conflicts[0].start_time == at(18)


async def test_naive_and_aware_starts_share_one_timeline(
    session,
    restaurant_id,
    dining_room,
):
    t1 = dining_room['T1']
    await reservation_service.create_reservation(
        session,
        restaurant_id,
        _booking([t1], start=datetime(2026, 5, 1, 18, 0)),
    )

    with pytest.raises(TableConflictError):
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking(
                [t1],
                start=datetime(2026, 5, 1, 19, 0, tzinfo=timezone.utc),
            ),
        )


async def test_booking_after_closing_is_rejected(
    session,
    restaurant_id,
    dining_room,
):
    with pytest.raises(RestaurantClosedError) as exc_info:
        await reservation_service.create_reservation(
            session,
            restaurant_id,
            _booking(
                [dining_room['T1']],
                start=at(22),
                opening_hours=TimeWindow(start=at(12), end=at(23)),
            ),
        )

    assert exc_info.value.reason == AvailabilityReason.RESTAURANT_CLOSED
    accepted = await reservation_repository.fetch_occupying_reservations(
        session,
        restaurant_id,
        window(at(0), 24 * 60),
        {ReservationStatus.CONFIRMED},
    )
    assert accepted == []
