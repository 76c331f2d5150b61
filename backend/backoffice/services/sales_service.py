"""
Sales Service - till transactions with stock and VAT

WHY: A sale is written as one unit: stock decrements, the sale header and
its lines commit together or not at all. Deleting a sale is the exact
inverse of creating it for stock purposes.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import func

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Item, Sale, SaleItem, User, PAYMENT_METHODS, DISCOUNT_TYPES
from ..models.sales import QUICK_SALE_NAME
from ..money import ZERO, quantize, resolve_vat_rate, split_vat
from ..validation import coerce_amount, coerce_choice, coerce_int, coerce_optional_int
from backoffice.time_utils import day_bounds, local_now, local_today
from .concurrency import lock_for_update, run_with_retry


class SaleError(ConflictError):
    """Raised when a sale cannot be applied to current stock."""
    pass


def _normalize_lines(line_items: list[dict] | None) -> list[dict]:
    """
    Validate raw line dicts before any stock is touched.

    Accepted keys: item_id, quantity, unit_price, total_price, vat_rate.
    total_price defaults to unit_price * quantity. vat_rate only matters for
    quick-sale lines; _build_sale_item ignores it when item_id is set.
    """
    if not line_items:
        raise ValidationError("Sale must contain at least one line item")

    normalized = []
    for index, raw in enumerate(line_items, start=1):
        if not isinstance(raw, dict):
            raise ValidationError(f"Line {index} must be an object")

        quantity = coerce_int(raw.get("quantity"), f"Line {index} quantity", minimum=1)
        unit_price = coerce_amount(raw.get("unit_price"), f"Line {index} unit price")

        if raw.get("total_price") is not None:
            total_price = coerce_amount(raw.get("total_price"), f"Line {index} total price")
        else:
            total_price = quantize(unit_price * quantity)

        vat_rate = None
        if raw.get("vat_rate") is not None:
            vat_rate = coerce_amount(raw.get("vat_rate"), f"Line {index} VAT rate", positive=False)

        normalized.append({
            "item_id": coerce_optional_int(raw.get("item_id"), f"Line {index} item id"),
            "quantity": quantity,
            "unit_price": unit_price,
            "total_price": total_price,
            "vat_rate": vat_rate,
        })
    return normalized


def _resolve_user(user_id: int | None) -> User | None:
    if user_id is None:
        return None
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError(f"User not found with ID: {user_id}")
    return user


def _lock_items(lines: list[dict]) -> dict[int, Item]:
    items: dict[int, Item] = {}
    for line in lines:
        item_id = line["item_id"]
        if item_id is None or item_id in items:
            continue
        item = lock_for_update(db.session.query(Item).filter_by(id=item_id)).first()
        if not item:
            raise NotFoundError(f"Item not found with ID: {item_id}")
        items[item_id] = item
    return items


def _validate_stock(lines: list[dict], items: dict[int, Item]) -> None:
    requested: dict[int, int] = {}
    for line in lines:
        if line["item_id"] is not None:
            requested[line["item_id"]] = requested.get(line["item_id"], 0) + line["quantity"]

    insufficient = []
    for item_id, qty in requested.items():
        item = items[item_id]
        if item.stock_quantity < qty:
            insufficient.append({
                "item_id": item_id,
                "item_name": item.name,
                "requested_quantity": qty,
                "stock_quantity": item.stock_quantity,
            })

    if insufficient:
        names = ", ".join(entry["item_name"] for entry in insufficient)
        raise SaleError(f"Insufficient stock for item: {names}", details={"items": insufficient})


def _build_sale_item(line: dict, item: Item | None) -> SaleItem:
    if item is not None:
        vat_rate = item.effective_vat_rate
        name, barcode, batch_id = item.name, item.barcode, item.batch_id
    else:
        vat_rate = resolve_vat_rate(line["vat_rate"])
        name, barcode, batch_id = QUICK_SALE_NAME, None, None

    vat_amount, price_excluding_vat = split_vat(line["total_price"], vat_rate)

    return SaleItem(
        item=item,
        quantity=line["quantity"],
        unit_price=line["unit_price"],
        total_price=line["total_price"],
        item_name=name,
        item_barcode=barcode,
        batch_id=batch_id,
        vat_rate=vat_rate,
        vat_amount=vat_amount,
        price_excluding_vat=price_excluding_vat,
    )


def _apply_lines(sale: Sale, lines: list[dict]) -> None:
    """Check stock, decrement it, and attach freshly built lines to the sale."""
    items = _lock_items(lines)
    _validate_stock(lines, items)

    sale_items = []
    total = ZERO
    for line in lines:
        item = items.get(line["item_id"]) if line["item_id"] is not None else None
        if item is not None:
            item.stock_quantity -= line["quantity"]
        sale_items.append(_build_sale_item(line, item))
        total += line["total_price"]

    sale.sale_items = sale_items
    sale.subtotal_amount = total
    sale.total_amount = total


def _restore_stock(sale: Sale) -> dict[int, int]:
    """Add every catalog line's quantity back to its item; returns item_id -> qty."""
    restored: dict[int, int] = {}
    for line in sale.sale_items:
        if line.item_id is None:
            continue
        item = lock_for_update(db.session.query(Item).filter_by(id=line.item_id)).first()
        if not item:
            # Catalog item deleted since the sale; nothing to restore into
            continue
        item.stock_quantity += line.quantity
        restored[item.id] = restored.get(item.id, 0) + line.quantity
    return restored


def _apply_discount(sale: Sale, discount_type, discount_value, discount_amount) -> None:
    sale.discount_type = coerce_choice(discount_type, "discountType", DISCOUNT_TYPES) if discount_type else None
    sale.discount_value = (
        coerce_amount(discount_value, "discountValue", positive=False) if discount_value is not None else None
    )
    sale.discount_amount = (
        coerce_amount(discount_amount, "discountAmount", positive=False) if discount_amount is not None else None
    )


def create_sale(
    *,
    payment_method: str,
    line_items: list[dict],
    user_id: int | None = None,
    discount_type: str | None = None,
    discount_value=None,
    discount_amount=None,
    sale_date: datetime | None = None,
) -> Sale:
    """
    Create and persist a sale, decrementing stock for catalog lines.

    Any failure (unknown user or item, insufficient stock, bad line) rolls
    back every stock change; the sale is never half-written.
    """
    method = coerce_choice(payment_method, "paymentMethod", PAYMENT_METHODS)
    lines = _normalize_lines(line_items)

    def _op():
        user = _resolve_user(user_id)
        sale = Sale(payment_method=method, sale_date=sale_date or local_now())
        _apply_discount(sale, discount_type, discount_value, discount_amount)
        _apply_lines(sale, lines)

        # User.sales must not hold a sale that is outside the session at autoflush
        sale.user = user
        db.session.add(sale)
        db.session.commit()
        return sale

    return run_with_retry(_op)


def update_sale(
    sale_id: int,
    *,
    payment_method: str,
    line_items: list[dict],
    user_id: int | None = None,
    discount_type: str | None = None,
    discount_value=None,
    discount_amount=None,
) -> Sale:
    """
    Replace a sale's payment method, user and full line collection.

    Stock is kept symmetric with create/delete: the old lines' quantities are
    restored first, then the new lines are checked and decremented.
    """
    method = coerce_choice(payment_method, "paymentMethod", PAYMENT_METHODS)
    lines = _normalize_lines(line_items)

    def _op():
        sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
        if not sale:
            raise NotFoundError(f"Sale not found with id: {sale_id}")

        sale.payment_method = method
        if user_id is not None:
            sale.user = _resolve_user(user_id)
        _apply_discount(sale, discount_type, discount_value, discount_amount)

        _restore_stock(sale)
        # Flush the restore so the new lines are checked against it
        db.session.flush()
        _apply_lines(sale, lines)

        db.session.commit()
        return sale

    return run_with_retry(_op)


def delete_sale(sale_id: int) -> dict[int, int]:
    """Delete a sale and unconditionally restore the stock it consumed."""
    def _op():
        sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
        if not sale:
            raise NotFoundError(f"Sale not found with ID: {sale_id}")

        restored = _restore_stock(sale)
        db.session.delete(sale)
        db.session.commit()
        return restored

    return run_with_retry(_op)


def get_sale(sale_id: int) -> Sale | None:
    return db.session.get(Sale, sale_id)


def list_sales() -> list[Sale]:
    return db.session.query(Sale).order_by(Sale.sale_date.desc(), Sale.id.desc()).all()


def get_sales_by_user(user_id: int) -> list[Sale]:
    return (
        db.session.query(Sale)
        .filter(Sale.user_id == user_id)
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .all()
    )


def get_sales_by_range(start: datetime, end: datetime, user_id: int | None = None) -> list[Sale]:
    query = db.session.query(Sale).filter(Sale.sale_date.between(start, end))
    if user_id is not None:
        query = query.filter(Sale.user_id == user_id)
    return query.order_by(Sale.sale_date.desc(), Sale.id.desc()).all()


def get_today_sales(user_id: int | None, is_admin: bool) -> list[Sale]:
    """Admins see every sale made today; everyone else only their own."""
    start, end = day_bounds(local_today())
    if is_admin:
        return get_sales_by_range(start, end)
    return get_sales_by_range(start, end, user_id=user_id)


def get_total_by_range(start: datetime, end: datetime) -> Decimal:
    total = (
        db.session.query(func.coalesce(func.sum(Sale.total_amount), 0))
        .filter(Sale.sale_date.between(start, end))
        .scalar()
    )
    return quantize(total or 0)


def _daily_report(day: date, user_id: int | None = None) -> dict:
    start, end = day_bounds(day)

    query = db.session.query(
        Sale.payment_method,
        func.count(Sale.id).label("sales_count"),
        func.coalesce(func.sum(Sale.total_amount), 0).label("amount"),
    ).filter(Sale.sale_date.between(start, end))
    if user_id is not None:
        query = query.filter(Sale.user_id == user_id)

    by_method = {
        row.payment_method: (int(row.sales_count or 0), quantize(row.amount or 0))
        for row in query.group_by(Sale.payment_method).all()
    }
    cash_sales, cash_amount = by_method.get("CASH", (0, ZERO))
    card_sales, card_amount = by_method.get("CARD", (0, ZERO))

    return {
        "reportDate": day.isoformat(),
        "totalSales": sum(count for count, _ in by_method.values()),
        "totalAmount": quantize(sum((amount for _, amount in by_method.values()), ZERO)),
        "cashSales": cash_sales,
        "cashAmount": cash_amount,
        "cardSales": card_sales,
        "cardAmount": card_amount,
    }


def get_daily_report(day: date) -> dict:
    return _daily_report(day)


def get_daily_report_by_user(day: date, user_id: int) -> dict:
    return _daily_report(day, user_id=user_id)
