# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/backoffice/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, request, jsonify
from flask import current_app

from ..errors import BackofficeError, ValidationError
from ..services import sales_service
from ..validation import coerce_date, coerce_datetime, coerce_int, coerce_optional_int, require_fields
from backoffice.time_utils import local_today


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _sale_kwargs(data: dict) -> dict:
    """Translate the camelCase request body into sales_service keyword arguments."""
    require_fields(data, "paymentMethod")
    raw_items = data.get("saleItems")
    if not isinstance(raw_items, list):
        raise ValidationError("saleItems must be a list")

    line_items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ValidationError("Each sale item must be an object")
        line_items.append({
            "item_id": raw.get("itemId"),
            "quantity": raw.get("quantity"),
            "unit_price": raw.get("unitPrice"),
            "total_price": raw.get("totalPrice"),
            "vat_rate": raw.get("vatRate"),
        })

    return {
        "payment_method": data.get("paymentMethod"),
        "user_id": coerce_optional_int(data.get("userId"), "userId"),
        "line_items": line_items,
        "discount_type": data.get("discountType"),
        "discount_value": data.get("discountValue"),
        "discount_amount": data.get("discountAmount"),
    }


def _datetime_range_args() -> tuple:
    require_fields(request.args, "startDate", "endDate")
    start = coerce_datetime(request.args.get("startDate"), "startDate")
    end = coerce_datetime(request.args.get("endDate"), "endDate")
    return start, end


@sales_bp.post("")
def create_sale_route():
    """
    Create a sale and decrement stock for catalog lines.

    Body: {paymentMethod, userId?, saleItems: [{itemId?, quantity, unitPrice, totalPrice?, vatRate?}]}
    vatRate is read only on quick-sale lines (no itemId); catalog lines
    always use the item's own or category VAT rate.
    """
    try:
        data = request.get_json(silent=True) or {}
        sale = sales_service.create_sale(**_sale_kwargs(data))
        return jsonify(sale.to_dict()), 201

    except BackofficeError as e:
        return jsonify(e.to_dict()), 400
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("")
def list_sales_route():
    sales = sales_service.list_sales()
    return jsonify([sale.to_dict() for sale in sales]), 200


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    sale = sales_service.get_sale(sale_id)
    if not sale:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify(sale.to_dict()), 200


@sales_bp.put("/<int:sale_id>")
def update_sale_route(sale_id: int):
    """Replace payment method, user and all lines; stock follows the new lines."""
    try:
        data = request.get_json(silent=True) or {}
        sale = sales_service.update_sale(sale_id, **_sale_kwargs(data))
        return jsonify(sale.to_dict()), 200

    except BackofficeError as e:
        return jsonify(e.to_dict()), 400
    except Exception:
        current_app.logger.exception("Failed to update sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.delete("/<int:sale_id>")
def delete_sale_route(sale_id: int):
    """Delete a sale and restore the stock it consumed."""
    try:
        sales_service.delete_sale(sale_id)
        return jsonify({"message": "Sale deleted successfully"}), 200

    except BackofficeError as e:
        return jsonify(e.to_dict()), 400
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/user/<int:user_id>")
def user_sales_route(user_id: int):
    sales = sales_service.get_sales_by_user(user_id)
    return jsonify([sale.to_dict() for sale in sales]), 200


@sales_bp.get("/today")
def today_sales_route():
    """Admins (isAdmin=true) see all of today's sales; others only their own."""
    try:
        is_admin = request.args.get("isAdmin", "false").lower() == "true"
        user_id = coerce_optional_int(request.args.get("userId"), "userId")
        if not is_admin and user_id is None:
            raise ValidationError("userId is required unless isAdmin=true")
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    sales = sales_service.get_today_sales(user_id, is_admin)
    return jsonify([sale.to_dict() for sale in sales]), 200


@sales_bp.get("/date-range")
def range_sales_route():
    try:
        start, end = _datetime_range_args()
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    sales = sales_service.get_sales_by_range(start, end)
    return jsonify([sale.to_dict() for sale in sales]), 200


@sales_bp.get("/total")
def total_sales_route():
    try:
        start, end = _datetime_range_args()
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    return jsonify({"total": sales_service.get_total_by_range(start, end)}), 200


@sales_bp.get("/daily-report")
def daily_report_route():
    """{reportDate, totalSales, totalAmount, cashSales, cashAmount, cardSales, cardAmount}"""
    try:
        raw = request.args.get("date")
        day = coerce_date(raw, "date") if raw else local_today()
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    return jsonify(sales_service.get_daily_report(day)), 200


@sales_bp.get("/daily-report/user")
def user_daily_report_route():
    try:
        require_fields(request.args, "userId")
        user_id = coerce_int(request.args.get("userId"), "userId")
        raw = request.args.get("date")
        day = coerce_date(raw, "date") if raw else local_today()
    except BackofficeError as e:
        return jsonify(e.to_dict()), 400

    return jsonify(sales_service.get_daily_report_by_user(day, user_id)), 200
