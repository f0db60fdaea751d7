import argparse
import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from lumber_sales.db import SessionLocal, init_db
from lumber_sales.logging_config import setup_logging
from lumber_sales.models import (
    Address,
    AddressType,
    Customer,
    Party,
    PartyAddress,
    PartyType,
    PartyTypeMapping,
    SalesTax,
    ShipVia,
    Species,
    Ticket,
    TicketItem,
)
from lumber_sales.services.address_service import AddressInput, create_address
from lumber_sales.services.customer_service import CustomerDefaults, create_customer
from lumber_sales.services.party_service import create_party, get_or_create_party_type, get_party_by_number
from lumber_sales.services.ship_via_service import create_ship_via, get_ship_via_by_name
from lumber_sales.services.species_service import create_species, get_species_by_number

logger = logging.getLogger(__name__)

SALES_TAX = [
    ('Gilmer County, GA', 'Gilmer', 'GA', Decimal('0.05')),
    ('Fannin County, GA', 'Fannin', 'GA', Decimal('0.07')),
    ('Pickens County Sales Tax', 'Pickens', 'GA', Decimal('0.07')),
    ('Gordon County Sales Tax', 'Gordon', 'GA', Decimal('0.07')),
]
SHIP_VIA = [
    ('Pickup', 'Customer picks up order at the mill'),
    ('Delivery', 'Order delivered to customer location'),
    ('Freight', 'Order shipped via freight carrier'),
    ('Transfer', 'Internal transfer between locations'),
]
PARTY_TYPES = [
    ('customer', 'Customer party type'),
    ('vendor', 'Vendor party type'),
    ('both', 'Both customer and vendor'),
]
# (party_number, name, phone, tax exempt)
PARTIES = [
    ('7', 'Honest Abe', '706-555-0101', True),
    ('23', 'Ellijay Lumber', '706-555-0102', False),
    ('44', 'Babb', '706-555-0103', False),
    ('86', 'Koppers', '706-555-0104', False),
    ('87', 'Trull', '706-555-0105', False),
    ('103', 'Tree Brand', '706-555-0105', True),
    ('545', 'Sparks Lumber Company', '706-678-4047', False),
]
# (party_number, address_line1, address_line2, city, county, postal_code)
ADDRESSES = [
    ('7', '123 Main St', 'Suite 101', 'Ellijay', 'Gilmer', '30540'),
    ('23', '789 Pine Ln', 'Building B', 'Blue Ridge', 'Fannin', '30513'),
    ('44', '321 Cedar Rd', None, 'Jasper', 'Pickens', '30143'),
    ('86', '999 Spruce Way', None, 'Blue Ridge', 'Fannin', '30513'),
    ('87', '777 Hickory Ct', None, 'Jasper', 'Pickens', '30143'),
    ('545', '9222 Highway 515 S', None, 'Ellijay', 'Gilmer', '30540'),
]
SPECIES = [
    ('1', 'Yellow Pine', 'Southern Yellow Pine - Dense and strong softwood'),
    ('2', 'White Pine', 'White Pine - Clear softwood'),
    ('3', 'Hardwood', 'Premium hardwood - Oak, Cherry, etc.'),
    ('5', 'Poplar', 'Economical hardwood, easy to work with'),
    ('6', 'Hemlock', 'Light softwood with straight grain'),
    ('9', 'Red Oak', 'Hardwood with strong grain pattern'),
]

# Children first so foreign keys hold.
CLEAR_ORDER = [
    TicketItem,
    Ticket,
    PartyTypeMapping,
    PartyType,
    PartyAddress,
    Customer,
    Address,
    Species,
    Party,
    SalesTax,
    ShipVia,
]


def clear(db: Session) -> None:
    for model in CLEAR_ORDER:
        db.execute(delete(model))
        logger.info('Cleared %s', model.__tablename__)


def seed(db: Session) -> None:
    taxes_by_county: dict[str, SalesTax] = {}
    for name, county, state, rate in SALES_TAX:
        tax = db.execute(
            select(SalesTax).where(SalesTax.county == county, SalesTax.state == state)
        ).scalars().first()
        if not tax:
            tax = SalesTax(name=name, county=county, state=state, tax_rate=rate, effective_date=date(2020, 1, 1))
            db.add(tax)
            db.flush()
        taxes_by_county[county] = tax

    for name, description in SHIP_VIA:
        if not get_ship_via_by_name(db, name):
            create_ship_via(db, name=name, description=description)
    pickup = get_ship_via_by_name(db, 'Pickup')
    delivery = get_ship_via_by_name(db, 'Delivery')

    for name, description in PARTY_TYPES:
        get_or_create_party_type(db, name=name, description=description)

    for index, (party_number, name, phone, tax_exempt) in enumerate(PARTIES):
        if get_party_by_number(db, party_number):
            continue
        party = create_party(db, party_number=party_number, name=name, phone=phone)
        ship_via = pickup if index % 2 == 0 else delivery
        create_customer(
            db,
            party_id=party.id,
            defaults=CustomerDefaults(default_ship_via_id=ship_via.id, sales_tax_exempt=tax_exempt),
        )

    for party_number, line1, line2, city, county, postal_code in ADDRESSES:
        party = get_party_by_number(db, party_number)
        existing = db.execute(
            select(Address.id)
            .join(PartyAddress, PartyAddress.address_id == Address.id)
            .where(PartyAddress.party_id == party.id, Address.address_line1 == line1)
        ).first()
        if existing:
            continue
        address = create_address(
            db,
            AddressInput(
                address_line1=line1,
                address_line2=line2,
                city=city,
                state='GA',
                county=county,
                postal_code=postal_code,
                sales_tax_id=taxes_by_county[county].id,
            ),
            party_id=party.id,
            address_type=AddressType.BOTH,
            is_default=True,
        )
        customer = db.execute(select(Customer).where(Customer.party_id == party.id)).scalar_one_or_none()
        if customer:
            customer.default_billing_address_id = address.id
            customer.default_shipping_address_id = address.id

    for species_number, name, description in SPECIES:
        if not get_species_by_number(db, species_number):
            create_species(db, species_number=species_number, name=name, description=description)

    db.flush()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description='Insert sample lumber sales reference data.')
    parser.add_argument('--clear', action='store_true', help='delete existing rows before seeding')
    args = parser.parse_args(argv)

    setup_logging()
    init_db()
    with SessionLocal() as db:
        if args.clear:
            clear(db)
        seed(db)
        db.commit()
    logger.info('Seed data inserted/verified.')


if __name__ == '__main__':
    main()
