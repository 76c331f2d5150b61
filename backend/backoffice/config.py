# backend/backoffice/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/backoffice.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///backoffice.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # End-of-day attendance closer (local time, HH:MM)
    ATTENDANCE_AUTO_CLOSE_ENABLED = _env_flag("ATTENDANCE_AUTO_CLOSE_ENABLED", True)
    ATTENDANCE_AUTO_CLOSE_TIME = os.environ.get("ATTENDANCE_AUTO_CLOSE_TIME", "23:59")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
