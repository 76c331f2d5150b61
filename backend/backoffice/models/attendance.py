from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

from ..extensions import db
from ..money import as_json_number, quantize
from backoffice.time_utils import to_iso


def compute_total_hours(time_in: time | None, time_out: time | None) -> Decimal | None:
    """
    Hours between time_in and time_out, from whole minutes, rounded half-up
    to two places. None while either side is missing.
    """
    if time_in is None or time_out is None:
        return None
    anchor = date.min
    elapsed = datetime.combine(anchor, time_out) - datetime.combine(anchor, time_in)
    minutes = int(elapsed.total_seconds() // 60)
    return quantize(Decimal(minutes) / Decimal(60))


class Attendance(db.Model):
    """
    One clock-in session for a user on a calendar date.

    LIFECYCLE:
    - OPEN: time_out is null (currently clocked in)
    - CLOSED: time_out set by clock-out or by the end-of-day closer

    A closed row never reopens. A user may have several rows on one date.
    total_hours stays NULL while open and is set by close(); it is not
    recomputed if time_in or time_out is edited directly.
    """
    __tablename__ = "attendances"
    __table_args__ = (
        db.Index("ix_attendances_user_date", "user_id", "attendance_date"),
        db.Index("ix_attendances_date", "attendance_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    # Calendar date, no time zone conversion
    attendance_date = db.Column(db.Date, nullable=False)

    time_in = db.Column(db.Time, nullable=False)
    time_out = db.Column(db.Time, nullable=True)

    total_hours = db.Column(db.Numeric(5, 2), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    user = db.relationship("User", backref=db.backref("attendances", lazy=True))

    def __repr__(self) -> str:
        return f"<Attendance id={self.id} user_id={self.user_id} date={self.attendance_date} status={self.status}>"

    @property
    def status(self) -> str:
        return "OPEN" if self.time_out is None else "CLOSED"

    @property
    def is_open(self) -> bool:
        return self.time_out is None

    def close(self, time_out: time) -> None:
        self.time_out = time_out
        self.total_hours = compute_total_hours(self.time_in, self.time_out)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "username": self.user.username if self.user is not None else None,
            "fullName": self.user.full_name if self.user is not None else None,
            "attendanceDate": to_iso(self.attendance_date),
            "timeIn": to_iso(self.time_in),
            "timeOut": to_iso(self.time_out),
            "totalHours": as_json_number(self.total_hours),
            "status": self.status,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
