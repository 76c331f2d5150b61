# Overview: Flask API routes for catalog item stock; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..errors import BackofficeError
from ..services import inventory_service


items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("/<int:item_id>")
def get_item_route(item_id: int):
    try:
        item = inventory_service.get_item(item_id)
    except BackofficeError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify(item.to_dict()), 200


@items_bp.patch("/<int:item_id>/stock")
def adjust_stock_route(item_id: int):
    """
    Set or shift an item's stock.

    Body: {quantity} (absolute) or {delta} (relative). Never below zero.
    """
    try:
        data = request.get_json(silent=True) or {}
        item = inventory_service.adjust_stock(
            item_id=item_id,
            quantity=data.get("quantity"),
            delta=data.get("delta"),
        )
        return jsonify(item.to_dict()), 200

    except BackofficeError as e:
        return jsonify(e.to_dict()), 400
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return jsonify({"error": "Internal server error"}), 500
