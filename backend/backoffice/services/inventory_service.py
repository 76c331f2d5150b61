# Overview: Service-layer operations for inventory; direct stock adjustments.

from __future__ import annotations

import logging

from ..extensions import db
from ..errors import NotFoundError, ValidationError
from ..models import Item
from ..validation import coerce_int
from .concurrency import lock_for_update, run_with_retry


logger = logging.getLogger(__name__)


class InventoryError(ValidationError):
    """Raised when a stock adjustment would break the non-negative invariant."""
    pass


def get_item(item_id: int) -> Item:
    item = db.session.get(Item, item_id)
    if not item:
        raise NotFoundError(f"Item not found with ID: {item_id}")
    return item


def adjust_stock(*, item_id: int, quantity=None, delta=None) -> Item:
    """
    Set (quantity) or shift (delta) an item's stock.

    Exactly one of quantity / delta must be given. A result below zero is
    rejected and nothing is written.
    """
    if (quantity is None) == (delta is None):
        raise ValidationError("Provide exactly one of quantity or delta")

    def _op():
        item = lock_for_update(db.session.query(Item).filter_by(id=item_id)).first()
        if not item:
            raise NotFoundError(f"Item not found with ID: {item_id}")

        if quantity is not None:
            new_quantity = coerce_int(quantity, "quantity")
        else:
            new_quantity = item.stock_quantity + coerce_int(delta, "delta")

        if new_quantity < 0:
            raise InventoryError(
                "Stock quantity cannot go below zero",
                details={"item_id": item.id, "stock_quantity": item.stock_quantity},
            )

        previous = item.stock_quantity
        item.stock_quantity = new_quantity
        db.session.commit()
        logger.info("Stock for item %s changed %s -> %s", item.id, previous, new_quantity)
        return item

    return run_with_retry(_op)
