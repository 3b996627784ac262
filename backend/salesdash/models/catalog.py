from __future__ import annotations

from ..extensions import db
from salesdash.time_utils import to_iso_date


class Employee(db.Model):
    __tablename__ = "employee"

    empno = db.Column(db.String(10), primary_key=True)
    firstname = db.Column(db.String(64), nullable=True)
    lastname = db.Column(db.String(64), nullable=True)

    @property
    def full_name(self) -> str | None:
        if self.firstname and self.lastname:
            return f"{self.firstname} {self.lastname}"
        return None

    def to_dict(self) -> dict:
        return {
            "empno": self.empno,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "empname": self.full_name,
        }


class Product(db.Model):
    __tablename__ = "product"

    prodcode = db.Column(db.String(10), primary_key=True)
    description = db.Column(db.String(100), nullable=True)
    unit = db.Column(db.String(10), nullable=True)

    def to_dict(self) -> dict:
        return {
            "prodcode": self.prodcode,
            "description": self.description,
            "unit": self.unit,
        }


class PriceHistory(db.Model):
    """
    Time-versioned unit prices.

    The price of a product on a given day is the row with the most recent
    effdate that is not after that day.
    """
    __tablename__ = "pricehist"
    __table_args__ = (
        db.Index("ix_pricehist_prodcode_effdate", "prodcode", "effdate"),
    )

    prodcode = db.Column(db.String(10), db.ForeignKey("product.prodcode"), primary_key=True)
    effdate = db.Column(db.Date, primary_key=True)
    unitprice_cents = db.Column(db.Integer, nullable=False)

    product = db.relationship("Product", backref=db.backref("prices", lazy=True))

    def to_dict(self) -> dict:
        return {
            "prodcode": self.prodcode,
            "effdate": to_iso_date(self.effdate),
            "unitprice_cents": self.unitprice_cents,
        }
