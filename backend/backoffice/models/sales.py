from __future__ import annotations

from ..extensions import db
from ..money import as_json_number
from backoffice.time_utils import local_now, to_iso


PAYMENT_METHODS = ("CASH", "CARD")
DISCOUNT_TYPES = ("PERCENTAGE", "FIXED")

QUICK_SALE_NAME = "Quick Sale"
QUICK_SALE_BARCODE = "N/A"


class Sale(db.Model):
    """
    Completed till transaction.

    WHY: A sale and its lines are written together or not at all; the line
    collection is owned by the sale and deleted with it.

    INVARIANT: total_amount == sum(line.total_price for line in sale_items)
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_sale_date", "sale_date"),
        db.Index("ix_sales_user_date", "user_id", "sale_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    subtotal_amount = db.Column(db.Numeric(10, 2), nullable=True)

    # Discount as entered at the till (informational)
    discount_amount = db.Column(db.Numeric(10, 2), nullable=True)
    discount_type = db.Column(db.String(16), nullable=True)
    discount_value = db.Column(db.Numeric(10, 2), nullable=True)

    # Local wall-clock time of the sale
    sale_date = db.Column(db.DateTime, nullable=False, default=local_now)

    # CASH | CARD
    payment_method = db.Column(db.String(16), nullable=False)

    # Nullable: legacy and anonymous quick sales carry no user
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    user = db.relationship("User", backref=db.backref("sales", lazy=True))
    sale_items = db.relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} total={self.total_amount} method={self.payment_method}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "totalAmount": as_json_number(self.total_amount),
            "subtotalAmount": as_json_number(self.subtotal_amount),
            "discountAmount": as_json_number(self.discount_amount),
            "discountType": self.discount_type,
            "discountValue": as_json_number(self.discount_value),
            "saleDate": to_iso(self.sale_date),
            "paymentMethod": self.payment_method,
            "userId": self.user_id,
            "saleItems": [line.to_dict() for line in self.sale_items],
        }


class SaleItem(db.Model):
    """
    Individual line on a sale.

    item_name / item_barcode are a snapshot taken at sale time so receipts
    stay stable if the catalog item is later renamed or deleted.
    item_id is null for quick-sale lines.
    """
    __tablename__ = "sale_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_sale_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.id", ondelete="SET NULL"), nullable=True, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)

    item_name = db.Column(db.String(255), nullable=False)
    item_barcode = db.Column(db.String(64), nullable=True)
    batch_id = db.Column(db.String(64), nullable=True)

    vat_rate = db.Column(db.Numeric(5, 2), nullable=False)
    vat_amount = db.Column(db.Numeric(10, 2), nullable=False)
    price_excluding_vat = db.Column(db.Numeric(10, 2), nullable=False)

    sale = db.relationship("Sale", back_populates="sale_items")
    item = db.relationship("Item")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "itemId": self.item_id,
            "itemName": self.item_name,
            "itemBarcode": self.item_barcode or QUICK_SALE_BARCODE,
            "quantity": self.quantity,
            "unitPrice": as_json_number(self.unit_price),
            "totalPrice": as_json_number(self.total_price),
            "batchId": self.batch_id,
            "vatRate": as_json_number(self.vat_rate),
            "vatAmount": as_json_number(self.vat_amount),
            "priceExcludingVat": as_json_number(self.price_excluding_vat),
        }
