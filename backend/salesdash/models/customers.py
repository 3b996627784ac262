from __future__ import annotations

from ..extensions import db
from .lifecycle import LifecycleMixin


class Customer(LifecycleMixin, db.Model):
    """
    Customer master data.

    custno is the business key: assigned at creation, never edited and never
    reused. Soft-deleted customers keep their custno, so the unique primary key
    also blocks re-creating a deleted customer under the same number.
    """
    __tablename__ = "customer"

    custno = db.Column(db.String(10), primary_key=True)
    custname = db.Column(db.String(20), nullable=True)
    address = db.Column(db.String(50), nullable=True)
    payterm = db.Column(db.String(3), nullable=True)

    def to_dict(self) -> dict:
        return {
            "custno": self.custno,
            "custname": self.custname,
            "address": self.address,
            "payterm": self.payterm,
            **self.lifecycle_dict(),
        }
