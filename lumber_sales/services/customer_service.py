from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from lumber_sales.models import Address, Customer, Party, ShipVia
from lumber_sales.services.address_service import list_party_addresses
from lumber_sales.services.errors import DuplicateError, NotFoundError
from lumber_sales.services.party_service import add_party_type, get_party, remove_party_type

logger = logging.getLogger(__name__)

CUSTOMER_PARTY_TYPE = 'customer'


@dataclass(frozen=True)
class CustomerDefaults:
    default_billing_address_id: int | None = None
    default_shipping_address_id: int | None = None
    default_ship_via_id: int | None = None
    sales_tax_exempt: bool = False


def _customer_row(customer: Customer, party: Party) -> dict:
    return {
        'id': customer.id,
        'party_id': customer.party_id,
        'party_number': party.party_number,
        'name': party.name,
        'list_name': party.list_name,
        'phone': party.phone,
        'email': party.email,
        'default_billing_address_id': customer.default_billing_address_id,
        'default_shipping_address_id': customer.default_shipping_address_id,
        'default_ship_via_id': customer.default_ship_via_id,
        'sales_tax_exempt': customer.sales_tax_exempt,
    }


def list_customers(db: Session) -> list[dict]:
    rows = db.execute(
        select(Customer, Party).join(Party, Party.id == Customer.party_id).order_by(Party.list_name.asc())
    ).all()
    return [_customer_row(row.Customer, row.Party) for row in rows]


def get_customer(db: Session, customer_id: int) -> dict:
    row = db.execute(
        select(Customer, Party).join(Party, Party.id == Customer.party_id).where(Customer.id == customer_id)
    ).one_or_none()
    if not row:
        raise NotFoundError('Customer not found')
    return _customer_row(row.Customer, row.Party)


def get_customer_by_party(db: Session, party_id: int) -> dict | None:
    row = db.execute(
        select(Customer, Party).join(Party, Party.id == Customer.party_id).where(Customer.party_id == party_id)
    ).one_or_none()
    if not row:
        return None
    return _customer_row(row.Customer, row.Party)


def get_customer_with_addresses(db: Session, customer_id: int) -> dict:
    customer = get_customer(db, customer_id)
    customer['default_billing_address'] = _optional_address(db, customer['default_billing_address_id'])
    customer['default_shipping_address'] = _optional_address(db, customer['default_shipping_address_id'])
    customer['addresses'] = list_party_addresses(db, party_id=customer['party_id'])
    return customer


def _optional_address(db: Session, address_id: int | None) -> Address | None:
    if address_id is None:
        return None
    return db.get(Address, address_id)


def _ensure_ship_via(db: Session, ship_via_id: int | None) -> None:
    if ship_via_id is not None and not db.get(ShipVia, ship_via_id):
        raise NotFoundError('Shipping method not found')


def _apply_defaults(customer: Customer, defaults: CustomerDefaults) -> None:
    customer.default_billing_address_id = defaults.default_billing_address_id
    customer.default_shipping_address_id = defaults.default_shipping_address_id
    customer.default_ship_via_id = defaults.default_ship_via_id
    customer.sales_tax_exempt = defaults.sales_tax_exempt


def create_customer(db: Session, *, party_id: int, defaults: CustomerDefaults | None = None) -> dict:
    get_party(db, party_id)
    if db.execute(select(Customer.id).where(Customer.party_id == party_id)).scalar_one_or_none() is not None:
        raise DuplicateError('Party is already a customer')
    defaults = defaults or CustomerDefaults()
    _ensure_ship_via(db, defaults.default_ship_via_id)

    customer = Customer(party_id=party_id)
    _apply_defaults(customer, defaults)
    db.add(customer)
    add_party_type(db, party_id=party_id, type_name=CUSTOMER_PARTY_TYPE, description='Buys lumber')
    db.flush()
    logger.info('Registered party %s as customer %s', party_id, customer.id)
    return get_customer(db, customer.id)


def update_customer(db: Session, *, customer_id: int, defaults: CustomerDefaults) -> dict:
    customer = db.get(Customer, customer_id)
    if not customer:
        raise NotFoundError('Customer not found')
    _ensure_ship_via(db, defaults.default_ship_via_id)
    _apply_defaults(customer, defaults)
    db.flush()
    return get_customer(db, customer_id)


def delete_customer(db: Session, *, customer_id: int) -> bool:
    customer = db.get(Customer, customer_id)
    if not customer:
        return False
    party_id = customer.party_id
    db.execute(delete(Customer).where(Customer.id == customer_id))
    remove_party_type(db, party_id=party_id, type_name=CUSTOMER_PARTY_TYPE)
    logger.info('Removed customer %s (party %s)', customer_id, party_id)
    return True
