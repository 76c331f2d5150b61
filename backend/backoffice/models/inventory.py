from __future__ import annotations

from ..extensions import db
from ..money import as_json_number, resolve_vat_rate
from backoffice.time_utils import to_iso


class Category(db.Model):
    """
    Product grouping with a default VAT rate.

    Items without an explicit VAT rate inherit the category's rate.
    """
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    description = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    display_on_pos = db.Column(db.Boolean, nullable=False, default=True)

    # Percentage, e.g. 23.00
    vat_rate = db.Column(db.Numeric(5, 2), nullable=False, default=23)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "isActive": self.is_active,
            "displayOnPos": self.display_on_pos,
            "vatRate": as_json_number(self.vat_rate),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }


class Item(db.Model):
    """
    Catalog product sold at the till.

    INVARIANT: stock_quantity never goes below zero. Every stock change goes
    through sales_service or inventory_service, which reject decrements past
    zero; the CHECK constraint backs that up at the database level.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.CheckConstraint("stock_quantity >= 0", name="ck_items_stock_non_negative"),
        db.Index("ix_items_category", "category_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    barcode = db.Column(db.String(64), nullable=True, unique=True)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)

    # Null means "inherit from category, else the flat default"
    vat_rate = db.Column(db.Numeric(5, 2), nullable=True)

    batch_id = db.Column(db.String(64), nullable=True)
    expiry_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    category = db.relationship("Category", backref=db.backref("items", lazy=True))

    def __repr__(self) -> str:
        return f"<Item id={self.id} name={self.name!r} stock={self.stock_quantity}>"

    @property
    def effective_vat_rate(self):
        category_rate = self.category.vat_rate if self.category is not None else None
        return resolve_vat_rate(self.vat_rate, category_rate)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": as_json_number(self.price),
            "stockQuantity": self.stock_quantity,
            "barcode": self.barcode,
            "categoryId": self.category_id,
            "categoryName": self.category.name if self.category is not None else None,
            "vatRate": as_json_number(self.effective_vat_rate),
            "batchId": self.batch_id,
            "expiryDate": to_iso(self.expiry_date),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }


class Batch(db.Model):
    """Received stock batch with expiry tracking."""
    __tablename__ = "batches"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.id"), nullable=False, index=True)
    batch_id = db.Column(db.String(64), nullable=False)
    expiry_date = db.Column(db.Date, nullable=True)
    manufacture_date = db.Column(db.Date, nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    received_date = db.Column(db.Date, nullable=True)
    supplier_id = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    item = db.relationship("Item", backref=db.backref("batches", lazy=True, cascade="all, delete-orphan"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "itemId": self.item_id,
            "batchId": self.batch_id,
            "expiryDate": to_iso(self.expiry_date),
            "manufactureDate": to_iso(self.manufacture_date),
            "quantity": self.quantity,
            "receivedDate": to_iso(self.received_date),
            "supplierId": self.supplier_id,
        }
