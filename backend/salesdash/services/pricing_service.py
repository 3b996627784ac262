# Overview: Service-layer operations for pricing; date-effective unit price lookup.

from __future__ import annotations

from datetime import date

from ..extensions import db
from ..models import Product, PriceHistory


def resolve_unit_price_cents(prodcode: str, as_of: date | None = None) -> int:
    """
    Unit price in effect on as_of.

    Picks the price row with the most recent effdate not after as_of; with no
    date, the latest price overall. Returns 0 when no price applies.
    """
    query = db.session.query(PriceHistory).filter(PriceHistory.prodcode == prodcode)
    if as_of is not None:
        query = query.filter(PriceHistory.effdate <= as_of)
    row = query.order_by(PriceHistory.effdate.desc()).first()
    return row.unitprice_cents if row else 0


def list_products_with_prices(as_of: date | None = None) -> list[dict]:
    products = db.session.query(Product).order_by(Product.prodcode.asc()).all()
    out = []
    for product in products:
        row = product.to_dict()
        row["unitprice_cents"] = resolve_unit_price_cents(product.prodcode, as_of)
        out.append(row)
    return out
