# Overview: Service-layer operations for reporting; read-only aggregation over sale lines.

from __future__ import annotations

from datetime import date

from sqlalchemy import case, func

from ..extensions import db
from ..errors import ValidationError
from ..models import Category, Item, Sale, SaleItem
from ..models.sales import QUICK_SALE_NAME
from ..money import quantize
from backoffice.time_utils import day_bounds


UNCATEGORIZED = "Uncategorized"


class ReportError(ValidationError):
    """Raised when report generation fails."""
    pass


def _resolve_range(start: date, end: date):
    if end < start:
        raise ReportError("endDate cannot be before startDate")
    start_dt, _ = day_bounds(start)
    _, end_dt = day_bounds(end)
    return start_dt, end_dt


def vat_summary(start: date, end: date) -> list[dict]:
    """
    Gross, VAT and net totals per distinct VAT rate, lowest rate first.

    Lines are selected by their sale's timestamp within [start 00:00:00, end 23:59:59].
    """
    start_dt, end_dt = _resolve_range(start, end)

    rows = (
        db.session.query(
            SaleItem.vat_rate.label("vat_rate"),
            func.coalesce(func.sum(SaleItem.total_price), 0).label("gross"),
            func.coalesce(func.sum(SaleItem.vat_amount), 0).label("vat_amount"),
            func.coalesce(func.sum(SaleItem.price_excluding_vat), 0).label("net"),
        )
        .join(Sale, Sale.id == SaleItem.sale_id)
        .filter(Sale.sale_date.between(start_dt, end_dt))
        .group_by(SaleItem.vat_rate)
        .order_by(SaleItem.vat_rate.asc())
        .all()
    )

    return [
        {
            "vatRate": quantize(row.vat_rate or 0),
            "gross": quantize(row.gross or 0),
            "vatAmount": quantize(row.vat_amount or 0),
            "net": quantize(row.net or 0),
        }
        for row in rows
    ]


def category_summary(start: date, end: date) -> list[dict]:
    """
    Sales total and units sold per category, largest total first.

    Lines with no catalog item (quick sales, or lines whose item has since
    been deleted) form the "Quick Sale" bucket; catalog items without a
    category fall under "Uncategorized".
    """
    start_dt, end_dt = _resolve_range(start, end)

    bucket = func.coalesce(
        Category.name,
        case((Item.id.is_(None), QUICK_SALE_NAME), else_=UNCATEGORIZED),
    )

    rows = (
        db.session.query(
            bucket.label("name"),
            func.coalesce(func.sum(SaleItem.total_price), 0).label("total"),
            func.coalesce(func.sum(SaleItem.quantity), 0).label("count"),
        )
        .join(Sale, Sale.id == SaleItem.sale_id)
        .outerjoin(Item, Item.id == SaleItem.item_id)
        .outerjoin(Category, Category.id == Item.category_id)
        .filter(Sale.sale_date.between(start_dt, end_dt))
        .group_by(bucket)
        .all()
    )

    summary = [
        {
            "name": row.name,
            "total": quantize(row.total or 0),
            "count": int(row.count or 0),
        }
        for row in rows
    ]
    summary.sort(key=lambda entry: (-entry["total"], entry["name"]))
    return summary
