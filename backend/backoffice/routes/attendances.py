# Overview: Flask API routes for attendance clock-in/out; parses input and returns JSON responses.

# backend/backoffice/routes/attendances.py
"""Attendance API routes"""

from flask import Blueprint, request, jsonify, current_app

from ..errors import BackofficeError
from ..services import attendance_service
from ..validation import coerce_date, coerce_int, coerce_time, require_fields
from backoffice.time_utils import local_today


attendances_bp = Blueprint("attendances", __name__, url_prefix="/api/attendances")


def _range_args() -> tuple:
    require_fields(request.args, "startDate", "endDate")
    start = coerce_date(request.args.get("startDate"), "startDate")
    end = coerce_date(request.args.get("endDate"), "endDate")
    return start, end


@attendances_bp.post("/time-in")
def time_in_route():
    """
    Clock a user in. Always opens a new session row.

    Body: {userId, date, timeIn}
    """
    try:
        data = request.get_json(silent=True) or {}
        require_fields(data, "userId", "date", "timeIn")

        entry = attendance_service.mark_time_in(
            user_id=coerce_int(data.get("userId"), "userId"),
            attendance_date=coerce_date(data.get("date"), "date"),
            time_in=coerce_time(data.get("timeIn"), "timeIn"),
        )
        return jsonify(entry.to_dict()), 201

    except BackofficeError as e:
        return jsonify(e.to_dict()), 400
    except Exception:
        current_app.logger.exception("Failed to mark time-in")
        return jsonify({"error": "Internal server error"}), 500


@attendances_bp.post("/time-out")
def time_out_route():
    """
    Close the user's most recent open session for the date.

    Body: {userId, date, timeOut}
    """
    try:
        data = request.get_json(silent=True) or {}
        require_fields(data, "userId", "date", "timeOut")

        entry = attendance_service.mark_time_out(
            user_id=coerce_int(data.get("userId"), "userId"),
            attendance_date=coerce_date(data.get("date"), "date"),
            time_out=coerce_time(data.get("timeOut"), "timeOut"),
        )
        return jsonify(entry.to_dict()), 200

    except BackofficeError as e:
        return jsonify(e.to_dict()), 400
    except Exception:
        current_app.logger.exception("Failed to mark time-out")
        return jsonify({"error": "Internal server error"}), 500


@attendances_bp.post("/auto-time-out")
def auto_time_out_route():
    """Run the end-of-day closer for today on demand."""
    try:
        closed = attendance_service.auto_time_out_at_end_of_day()
        return jsonify({"closed": closed}), 200
    except Exception:
        current_app.logger.exception("Manual auto time-out failed")
        return jsonify({"error": "Internal server error"}), 500


@attendances_bp.get("/user/<int:user_id>/date/<attendance_date>")
def user_date_route(user_id: int, attendance_date: str):
    try:
        day = coerce_date(attendance_date, "date")
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    entries = attendance_service.get_attendances_by_user_and_date(user_id, day)
    return jsonify([entry.to_dict() for entry in entries]), 200


@attendances_bp.get("/user/<int:user_id>/date-range")
def user_range_route(user_id: int):
    try:
        start, end = _range_args()
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    entries = attendance_service.get_attendances_by_user_and_range(user_id, start, end)
    return jsonify([entry.to_dict() for entry in entries]), 200


@attendances_bp.get("/date/<attendance_date>")
def date_route(attendance_date: str):
    try:
        day = coerce_date(attendance_date, "date")
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    entries = attendance_service.get_attendances_by_date(day)
    return jsonify([entry.to_dict() for entry in entries]), 200


@attendances_bp.get("/date-range")
def range_route():
    try:
        start, end = _range_args()
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    entries = attendance_service.get_attendances_by_range(start, end)
    return jsonify([entry.to_dict() for entry in entries]), 200


@attendances_bp.get("/weekly-report")
def weekly_report_route():
    """List of {userId, fullName, totalHours} for weekStart..weekStart+6."""
    try:
        require_fields(request.args, "weekStart")
        week_start = coerce_date(request.args.get("weekStart"), "weekStart")
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    return jsonify(attendance_service.get_all_users_weekly_report(week_start)), 200


@attendances_bp.get("/weekly-report/user/<int:user_id>")
def user_weekly_report_route(user_id: int):
    try:
        require_fields(request.args, "weekStart")
        week_start = coerce_date(request.args.get("weekStart"), "weekStart")
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    return jsonify({
        "userId": user_id,
        "weekStart": week_start,
        "totalHours": attendance_service.get_weekly_total_hours(user_id, week_start),
    }), 200


@attendances_bp.get("/week-start")
def week_start_route():
    """Monday on or before ?date= (today when omitted)."""
    try:
        raw = request.args.get("date")
        day = coerce_date(raw, "date") if raw else local_today()
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    return jsonify({"weekStart": attendance_service.get_week_start(day)}), 200
