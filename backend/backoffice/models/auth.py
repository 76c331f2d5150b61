from __future__ import annotations

from ..extensions import db
from ..money import as_json_number
from backoffice.time_utils import to_iso


USER_ROLES = ("ADMIN", "USER")


class User(db.Model):
    """
    Back-office user account: cashiers, managers and administrators.

    WHY: Every sale and every attendance row is attributable to a person.
    Attendance and Sale hold the foreign key; the user does not own them.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False, unique=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    full_name = db.Column(db.String(255), nullable=False)

    # ADMIN | USER
    role = db.Column(db.String(16), nullable=False, default="USER")

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    # Hourly pay rate (display only, no payroll is computed here)
    hourly_rate = db.Column(db.Numeric(10, 2), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "fullName": self.full_name,
            "role": self.role,
            "isActive": self.is_active,
            "hourlyRate": as_json_number(self.hourly_rate),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
