from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from lumber_sales.models import SalesTax
from lumber_sales.services.errors import NotFoundError


def list_sales_tax(db: Session) -> list[SalesTax]:
    return db.execute(select(SalesTax).order_by(SalesTax.state.asc(), SalesTax.county.asc())).scalars().all()


def get_sales_tax(db: Session, sales_tax_id: int) -> SalesTax:
    sales_tax = db.get(SalesTax, sales_tax_id)
    if not sales_tax:
        raise NotFoundError('Sales tax not found')
    return sales_tax


def get_sales_tax_by_location(db: Session, *, county: str, state: str) -> SalesTax:
    """Most recently effective rate for a county and state."""
    if not county.strip() or not state.strip():
        raise ValueError('County and state are required')
    sales_tax = db.execute(
        select(SalesTax)
        .where(SalesTax.county == county.strip(), SalesTax.state == state.strip().upper())
        .order_by(SalesTax.effective_date.desc())
        .limit(1)
    ).scalar_one_or_none()
    if not sales_tax:
        raise NotFoundError('Sales tax not found for this location')
    return sales_tax


def _validate(name: str, county: str, state: str, tax_rate: Decimal) -> None:
    if not name.strip() or not county.strip() or not state.strip():
        raise ValueError('Missing required fields')
    if tax_rate < 0:
        raise ValueError('Tax rate cannot be negative')


def create_sales_tax(
    db: Session,
    *,
    name: str,
    county: str,
    state: str,
    tax_rate: Decimal,
    effective_date: date,
) -> SalesTax:
    _validate(name, county, state, tax_rate)
    sales_tax = SalesTax(
        name=name.strip(),
        county=county.strip(),
        state=state.strip().upper(),
        tax_rate=tax_rate,
        effective_date=effective_date,
    )
    db.add(sales_tax)
    db.flush()
    return sales_tax


def update_sales_tax(
    db: Session,
    *,
    sales_tax_id: int,
    name: str,
    county: str,
    state: str,
    tax_rate: Decimal,
    effective_date: date,
) -> SalesTax:
    sales_tax = get_sales_tax(db, sales_tax_id)
    _validate(name, county, state, tax_rate)
    sales_tax.name = name.strip()
    sales_tax.county = county.strip()
    sales_tax.state = state.strip().upper()
    sales_tax.tax_rate = tax_rate
    sales_tax.effective_date = effective_date
    db.flush()
    return sales_tax


def delete_sales_tax(db: Session, *, sales_tax_id: int) -> bool:
    result = db.execute(delete(SalesTax).where(SalesTax.id == sales_tax_id))
    return result.rowcount > 0
