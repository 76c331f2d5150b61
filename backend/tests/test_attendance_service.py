"""
Attendance clock-in/out tests.

Covers session opening/closing, worked-hours rounding, the end-of-day
closer, and the weekly aggregates.
"""

from datetime import date, time
from decimal import Decimal

import pytest

from backoffice.errors import NotFoundError, ValidationError
from backoffice.models import Attendance
from backoffice.models.attendance import compute_total_hours
from backoffice.services import attendance_service
from backoffice.services.attendance_service import AttendanceError


DAY = date(2024, 1, 15)  # Monday


def test_total_hours_is_set_only_by_close():
    entry = Attendance(attendance_date=DAY, time_in=time(9, 0))
    assert entry.total_hours is None
    assert entry.is_open

    entry.close(time(12, 20))
    assert entry.total_hours == Decimal("3.33")

    entry.time_in = time(8, 0)
    assert entry.total_hours == Decimal("3.33")


def test_full_day_rounds_to_two_places(db_session, cashier):
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(9, 0))
    entry = attendance_service.mark_time_out(user_id=cashier.id, attendance_date=DAY, time_out=time(17, 30))

    assert entry.time_out == time(17, 30)
    assert entry.total_hours == Decimal("8.50")
    assert entry.status == "CLOSED"


@pytest.mark.parametrize(
    "time_in, time_out, expected",
    [
        (time(9, 0), time(9, 20), Decimal("0.33")),
        (time(9, 0), time(9, 40), Decimal("0.67")),
        (time(8, 0), time(8, 0), Decimal("0.00")),
        (time(9, 0), time(9, 0, 59), Decimal("0.00")),
    ],
)
def test_compute_total_hours_half_up(time_in, time_out, expected):
    assert compute_total_hours(time_in, time_out) == expected


def test_compute_total_hours_open_session_is_none():
    assert compute_total_hours(time(9, 0), None) is None


def test_time_in_always_opens_new_session(db_session, cashier):
    first = attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(8, 0))
    second = attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(13, 0))

    assert first.id != second.id
    assert first.is_open and second.is_open
    assert db_session.query(Attendance).filter_by(user_id=cashier.id).count() == 2


def test_time_in_unknown_user(db_session):
    with pytest.raises(NotFoundError):
        attendance_service.mark_time_in(user_id=999, attendance_date=DAY, time_in=time(9, 0))


def test_time_out_closes_latest_open_session(db_session, cashier):
    morning = attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(8, 0))
    afternoon = attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(13, 0))

    closed = attendance_service.mark_time_out(user_id=cashier.id, attendance_date=DAY, time_out=time(15, 0))

    assert closed.id == afternoon.id
    assert closed.total_hours == Decimal("2.00")
    db_session.refresh(morning)
    assert morning.is_open


def test_time_out_without_open_session(db_session, cashier):
    with pytest.raises(AttendanceError) as exc:
        attendance_service.mark_time_out(user_id=cashier.id, attendance_date=DAY, time_out=time(17, 0))
    assert "No open time-in" in str(exc.value)


def test_time_out_after_session_already_closed(db_session, cashier):
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(9, 0))
    attendance_service.mark_time_out(user_id=cashier.id, attendance_date=DAY, time_out=time(12, 0))

    with pytest.raises(AttendanceError):
        attendance_service.mark_time_out(user_id=cashier.id, attendance_date=DAY, time_out=time(13, 0))


def test_time_out_before_time_in_is_rejected(db_session, cashier):
    entry = attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(9, 0))

    with pytest.raises(ValidationError):
        attendance_service.mark_time_out(user_id=cashier.id, attendance_date=DAY, time_out=time(8, 59))

    db_session.refresh(entry)
    assert entry.is_open
    assert entry.total_hours is None


def test_time_out_for_other_date_does_not_match(db_session, cashier):
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(9, 0))

    with pytest.raises(AttendanceError):
        attendance_service.mark_time_out(user_id=cashier.id, attendance_date=date(2024, 1, 16), time_out=time(17, 0))


def test_auto_time_out_closes_all_open_rows_for_the_day(db_session, cashier, make_user):
    other = make_user("stocker")
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(9, 0))
    done = attendance_service.mark_time_in(user_id=other.id, attendance_date=DAY, time_in=time(7, 0))
    attendance_service.mark_time_out(user_id=other.id, attendance_date=DAY, time_out=time(8, 0))
    attendance_service.mark_time_in(user_id=other.id, attendance_date=DAY, time_in=time(14, 0))
    yesterday = attendance_service.mark_time_in(
        user_id=cashier.id, attendance_date=date(2024, 1, 14), time_in=time(10, 0)
    )

    closed = attendance_service.auto_time_out_at_end_of_day(DAY)

    assert closed == 2
    rows = db_session.query(Attendance).filter_by(attendance_date=DAY).all()
    assert all(row.time_out is not None for row in rows)
    auto_closed = [row for row in rows if row.id != done.id]
    assert all(row.time_out == time(23, 59) for row in auto_closed)
    assert {row.total_hours for row in auto_closed} == {Decimal("14.98"), Decimal("9.98")}

    db_session.refresh(done)
    assert done.time_out == time(8, 0)
    assert done.total_hours == Decimal("1.00")

    db_session.refresh(yesterday)
    assert yesterday.is_open


def test_auto_time_out_with_nothing_open(db_session):
    assert attendance_service.auto_time_out_at_end_of_day(DAY) == 0


def test_auto_time_out_session_opened_in_final_minute(db_session, cashier):
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(23, 59, 30))

    attendance_service.auto_time_out_at_end_of_day(DAY)

    entry = db_session.query(Attendance).filter_by(user_id=cashier.id).one()
    assert entry.time_out == time(23, 59, 30)
    assert entry.total_hours == Decimal("0.00")


def test_weekly_total_is_zero_without_rows(db_session, cashier):
    total = attendance_service.get_weekly_total_hours(cashier.id, DAY)
    assert total == Decimal("0")
    assert total is not None


def test_weekly_total_covers_seven_days(db_session, cashier):
    for day, start, end in [
        (date(2024, 1, 15), time(9, 0), time(17, 0)),
        (date(2024, 1, 21), time(10, 0), time(12, 30)),
        (date(2024, 1, 22), time(9, 0), time(17, 0)),  # next week
    ]:
        attendance_service.mark_time_in(user_id=cashier.id, attendance_date=day, time_in=start)
        attendance_service.mark_time_out(user_id=cashier.id, attendance_date=day, time_out=end)

    assert attendance_service.get_weekly_total_hours(cashier.id, DAY) == Decimal("10.50")


def test_all_users_weekly_report_ordered_by_name(db_session, make_user):
    zoe = make_user("zoe", full_name="Zoe Zielinska")
    adam = make_user("adam", full_name="Adam Adamski")
    for user, hours_out in [(zoe, time(12, 0)), (adam, time(11, 0))]:
        attendance_service.mark_time_in(user_id=user.id, attendance_date=DAY, time_in=time(9, 0))
        attendance_service.mark_time_out(user_id=user.id, attendance_date=DAY, time_out=hours_out)

    report = attendance_service.get_all_users_weekly_report(DAY)

    assert [row["fullName"] for row in report] == ["Adam Adamski", "Zoe Zielinska"]
    assert report[0] == {"userId": adam.id, "fullName": "Adam Adamski", "totalHours": Decimal("2.00")}
    assert report[1]["totalHours"] == Decimal("3.00")


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2024, 1, 15), date(2024, 1, 15)),
        (date(2024, 1, 17), date(2024, 1, 15)),
        (date(2024, 1, 21), date(2024, 1, 15)),
        (date(2024, 1, 22), date(2024, 1, 22)),
    ],
)
def test_get_week_start_is_monday(day, expected):
    assert attendance_service.get_week_start(day) == expected


def test_listing_by_user_and_range(db_session, cashier, make_user):
    other = make_user("other")
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(13, 0))
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=DAY, time_in=time(8, 0))
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=date(2024, 1, 17), time_in=time(8, 0))
    attendance_service.mark_time_in(user_id=other.id, attendance_date=DAY, time_in=time(8, 0))

    same_day = attendance_service.get_attendances_by_user_and_date(cashier.id, DAY)
    assert [row.time_in for row in same_day] == [time(8, 0), time(13, 0)]

    ranged = attendance_service.get_attendances_by_user_and_range(cashier.id, DAY, date(2024, 1, 21))
    assert len(ranged) == 3
    assert ranged[0].attendance_date == date(2024, 1, 17)

    assert len(attendance_service.get_attendances_by_date(DAY)) == 3
    assert len(attendance_service.get_attendances_by_range(DAY, date(2024, 1, 16))) == 3
