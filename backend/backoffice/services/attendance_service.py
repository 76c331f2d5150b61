# Overview: Service-layer operations for attendance; encapsulates business logic.

"""
Attendance Service (Session-Based)

WHY: Staff clock in and out against a calendar date. Every clock-in opens a
new session row; several sessions per day are allowed. A session is OPEN
while time_out is null and CLOSED once clock-out (or the end-of-day closer)
sets it. Closed sessions never reopen.
"""

from __future__ import annotations

import logging
from datetime import date, time, timedelta
from decimal import Decimal

from sqlalchemy import func

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Attendance, User
from ..money import quantize
from backoffice.time_utils import END_OF_DAY, local_today, week_bounds


logger = logging.getLogger(__name__)


class AttendanceError(ConflictError):
    """Raised when a clock-in/out transition is not allowed."""
    pass


def _get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError(f"User not found with ID: {user_id}")
    return user


def _get_latest_open_entry(user_id: int, attendance_date: date) -> Attendance | None:
    return (
        db.session.query(Attendance)
        .filter(
            Attendance.user_id == user_id,
            Attendance.attendance_date == attendance_date,
            Attendance.time_out.is_(None),
        )
        .order_by(Attendance.time_in.desc(), Attendance.id.desc())
        .first()
    )


def mark_time_in(*, user_id: int, attendance_date: date, time_in: time) -> Attendance:
    """Open a new session. Never reuses or merges with an existing open row."""
    user = _get_user(user_id)

    entry = Attendance(
        user=user,
        attendance_date=attendance_date,
        time_in=time_in,
    )
    db.session.add(entry)
    db.session.commit()
    return entry


def mark_time_out(*, user_id: int, attendance_date: date, time_out: time) -> Attendance:
    """Close the most recent open session for (user, date)."""
    user = _get_user(user_id)

    entry = _get_latest_open_entry(user_id, attendance_date)
    if not entry:
        raise AttendanceError(
            f"No open time-in found for user {user.full_name} on {attendance_date.isoformat()}"
        )

    if time_out < entry.time_in:
        raise ValidationError("Time-out cannot be before time-in")

    entry.close(time_out)
    db.session.commit()
    return entry


def auto_time_out_at_end_of_day(today: date | None = None) -> int:
    """
    Close every open session dated today at 23:59:00.

    Runs as a single transaction: either every open row is closed or none is.
    Returns the number of sessions closed.
    """
    today = today or local_today()

    open_entries = (
        db.session.query(Attendance)
        .filter(
            Attendance.attendance_date == today,
            Attendance.time_out.is_(None),
        )
        .all()
    )

    try:
        for entry in open_entries:
            # A session opened during the final minute closes at its own start
            entry.close(max(END_OF_DAY, entry.time_in))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Auto time-out closed %d attendances on %s", len(open_entries), today.isoformat())
    return len(open_entries)


def get_attendances_by_user_and_date(user_id: int, attendance_date: date) -> list[Attendance]:
    return (
        db.session.query(Attendance)
        .filter_by(user_id=user_id, attendance_date=attendance_date)
        .order_by(Attendance.time_in.asc(), Attendance.id.asc())
        .all()
    )


def get_attendances_by_user_and_range(user_id: int, start: date, end: date) -> list[Attendance]:
    return (
        db.session.query(Attendance)
        .filter(
            Attendance.user_id == user_id,
            Attendance.attendance_date.between(start, end),
        )
        .order_by(Attendance.attendance_date.desc(), Attendance.time_in.desc())
        .all()
    )


def get_attendances_by_date(attendance_date: date) -> list[Attendance]:
    return (
        db.session.query(Attendance)
        .join(User, User.id == Attendance.user_id)
        .filter(Attendance.attendance_date == attendance_date)
        .order_by(User.full_name.asc(), Attendance.time_in.asc())
        .all()
    )


def get_attendances_by_range(start: date, end: date) -> list[Attendance]:
    return (
        db.session.query(Attendance)
        .join(User, User.id == Attendance.user_id)
        .filter(Attendance.attendance_date.between(start, end))
        .order_by(Attendance.attendance_date.desc(), User.full_name.asc())
        .all()
    )


def get_weekly_total_hours(user_id: int, week_start: date) -> Decimal:
    """Sum of closed-session hours for week_start..week_start+6; zero, never None."""
    start, end = week_bounds(week_start)
    total = (
        db.session.query(func.coalesce(func.sum(Attendance.total_hours), 0))
        .filter(
            Attendance.user_id == user_id,
            Attendance.attendance_date.between(start, end),
        )
        .scalar()
    )
    return quantize(total or 0)


def get_all_users_weekly_report(week_start: date) -> list[dict]:
    start, end = week_bounds(week_start)
    rows = (
        db.session.query(
            User.id.label("user_id"),
            User.full_name.label("full_name"),
            func.coalesce(func.sum(Attendance.total_hours), 0).label("total_hours"),
        )
        .join(Attendance, Attendance.user_id == User.id)
        .filter(Attendance.attendance_date.between(start, end))
        .group_by(User.id, User.full_name)
        .order_by(User.full_name.asc())
        .all()
    )
    return [
        {
            "userId": row.user_id,
            "fullName": row.full_name,
            "totalHours": quantize(row.total_hours or 0),
        }
        for row in rows
    ]


def get_week_start(day: date) -> date:
    """Monday on or before the given date."""
    return day - timedelta(days=day.weekday())
