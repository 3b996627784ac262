from __future__ import annotations

from ..extensions import db
from .lifecycle import LifecycleMixin
from salesdash.time_utils import to_iso_date, to_utc_z


class Sale(LifecycleMixin, db.Model):
    """
    Sales transaction header.

    Line items and payments hang off transno. Soft-deleting a sale leaves its
    line items untouched; they carry their own lifecycle.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_custno", "custno"),
    )

    transno = db.Column(db.String(10), primary_key=True)
    salesdate = db.Column(db.Date, nullable=True)
    custno = db.Column(db.String(10), db.ForeignKey("customer.custno"), nullable=True)
    empno = db.Column(db.String(10), db.ForeignKey("employee.empno"), nullable=True)

    customer = db.relationship("Customer", backref=db.backref("sales", lazy=True))
    employee = db.relationship("Employee", backref=db.backref("sales", lazy=True))

    def to_dict(self) -> dict:
        return {
            "transno": self.transno,
            "salesdate": to_iso_date(self.salesdate),
            "custno": self.custno,
            "empno": self.empno,
            **self.lifecycle_dict(),
        }


class SaleLineItem(LifecycleMixin, db.Model):
    """
    One product line on a sale (the salesdetail collection).

    Lines are soft-deleted and restored individually. At most one active line
    per (transno, prodcode) is allowed; the service layer enforces this since
    deleted lines for the same product may coexist.
    """
    __tablename__ = "salesdetail"
    __table_args__ = (
        db.Index("ix_salesdetail_transno", "transno"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    transno = db.Column(db.String(10), db.ForeignKey("sales.transno"), nullable=False)
    prodcode = db.Column(db.String(10), db.ForeignKey("product.prodcode"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    sale = db.relationship("Sale", backref=db.backref("line_items", lazy=True))
    product = db.relationship("Product")

    @property
    def record_key(self) -> str:
        return f"{self.transno}:{self.prodcode}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transno": self.transno,
            "prodcode": self.prodcode,
            "quantity": self.quantity,
            **self.lifecycle_dict(),
        }


class Payment(db.Model):
    """
    Payment received against a sale.

    IMMUTABLE: append-only, never updated or soft-deleted.
    """
    __tablename__ = "payment"
    __table_args__ = (
        db.Index("ix_payment_transno", "transno"),
    )

    orno = db.Column(db.String(10), primary_key=True)
    transno = db.Column(db.String(10), db.ForeignKey("sales.transno"), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    paydate = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    created_by = db.Column(db.Integer, nullable=True)

    sale = db.relationship("Sale", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "orno": self.orno,
            "transno": self.transno,
            "amount_cents": self.amount_cents,
            "paydate": to_iso_date(self.paydate),
            "created_at": to_utc_z(self.created_at),
            "created_by": self.created_by,
        }
