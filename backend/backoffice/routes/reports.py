from flask import Blueprint, jsonify, request

from backoffice.errors import BackofficeError
from backoffice.services import reporting_service
from backoffice.validation import coerce_date


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _report_range():
    """?startDate=&endDate=, or a single ?date= for one day."""
    single = request.args.get("date")
    if single:
        day = coerce_date(single, "date")
        return day, day
    start = request.args.get("startDate")
    end = request.args.get("endDate")
    if not start or not end:
        raise reporting_service.ReportError("startDate and endDate (or date) are required")
    return coerce_date(start, "startDate"), coerce_date(end, "endDate")


@reports_bp.get("/vat-summary")
def vat_summary_report():
    try:
        start, end = _report_range()
        report = reporting_service.vat_summary(start, end)
        return jsonify(report), 200
    except BackofficeError as exc:
        return jsonify(exc.to_dict()), 400


@reports_bp.get("/category-summary")
def category_summary_report():
    try:
        start, end = _report_range()
        report = reporting_service.category_summary(start, end)
        return jsonify(report), 200
    except BackofficeError as exc:
        return jsonify(exc.to_dict()), 400
