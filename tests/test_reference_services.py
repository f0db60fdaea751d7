from __future__ import annotations

import unittest
from datetime import date
from decimal import Decimal

from lumber_sales.models import AddressType
from lumber_sales.services.address_service import (
    AddressInput,
    associate_address,
    create_address,
    format_multi_line,
    format_single_line,
    get_default_party_address,
    list_party_addresses,
    remove_address_association,
)
from lumber_sales.services.customer_service import (
    CustomerDefaults,
    create_customer,
    delete_customer,
    get_customer_by_party,
    get_customer_with_addresses,
)
from lumber_sales.services.errors import DuplicateError, NotFoundError
from lumber_sales.services.party_service import (
    create_party,
    get_party_with_addresses,
    list_parties_by_type,
    search_parties,
    update_party,
)
from lumber_sales.services.sales_tax_service import create_sales_tax, get_sales_tax_by_location
from lumber_sales.services.ship_via_service import create_ship_via, update_ship_via
from lumber_sales.services.species_service import create_species, search_species, update_species
from db_support import make_engine, make_session_factory


def _address(line1: str, **overrides) -> AddressInput:
    values = {'address_line1': line1, 'city': 'Ellijay', 'state': 'ga', 'postal_code': '30540', 'county': 'Gilmer'}
    values.update(overrides)
    return AddressInput(**values)


class ReferenceServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        self.db = make_session_factory(self.engine)()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def test_party_list_name_and_unique_number(self) -> None:
        party = create_party(self.db, party_number='7', name='Honest Abe')
        self.assertEqual(party.list_name, '7 - Honest Abe')

        with self.assertRaises(DuplicateError):
            create_party(self.db, party_number='7', name='Someone Else')
        with self.assertRaises(ValueError):
            create_party(self.db, party_number=' ', name='Blank')

        other = create_party(self.db, party_number='44', name='Babb')
        with self.assertRaises(DuplicateError):
            update_party(self.db, party_id=other.id, party_number='7', name='Babb')

        renamed = update_party(self.db, party_id=party.id, party_number='8', name='Honest Abe')
        self.assertEqual(renamed.list_name, '8 - Honest Abe')

    def test_party_search_needs_two_characters(self) -> None:
        create_party(self.db, party_number='23', name='Ellijay Lumber')
        create_party(self.db, party_number='545', name='Sparks Lumber Company')

        self.assertEqual(search_parties(self.db, 'l'), [])
        self.assertEqual([party.party_number for party in search_parties(self.db, 'lumber')], ['23', '545'])

    def test_customer_registration_adds_party_type(self) -> None:
        party = create_party(self.db, party_number='86', name='Koppers')
        pickup = create_ship_via(self.db, name='Pickup')

        customer = create_customer(
            self.db,
            party_id=party.id,
            defaults=CustomerDefaults(default_ship_via_id=pickup.id, sales_tax_exempt=True),
        )

        self.assertEqual(customer['list_name'], '86 - Koppers')
        self.assertTrue(customer['sales_tax_exempt'])
        self.assertEqual([p.id for p in list_parties_by_type(self.db, 'customer')], [party.id])
        with self.assertRaises(DuplicateError):
            create_customer(self.db, party_id=party.id)

        self.assertTrue(delete_customer(self.db, customer_id=customer['id']))
        self.assertIsNone(get_customer_by_party(self.db, party.id))
        self.assertEqual(list_parties_by_type(self.db, 'customer'), [])

    def test_customer_requires_existing_party_and_ship_via(self) -> None:
        with self.assertRaises(NotFoundError):
            create_customer(self.db, party_id=404)

        party = create_party(self.db, party_number='87', name='Trull')
        with self.assertRaises(NotFoundError):
            create_customer(self.db, party_id=party.id, defaults=CustomerDefaults(default_ship_via_id=404))

    def test_default_address_is_replaced(self) -> None:
        party = create_party(self.db, party_number='7', name='Honest Abe')
        first = create_address(
            self.db, _address('123 Main St'), party_id=party.id, address_type=AddressType.BILLING, is_default=True
        )
        second = create_address(self.db, _address('456 Oak Ave'))

        associate_address(
            self.db, party_id=party.id, address_id=second.id, address_type=AddressType.BILLING, is_default=True
        )

        default = get_default_party_address(self.db, party_id=party.id, address_type=AddressType.BILLING)
        self.assertEqual(default.id, second.id)
        links = {row['address'].id: row['is_default'] for row in list_party_addresses(self.db, party_id=party.id)}
        self.assertEqual(links, {first.id: False, second.id: True})

        detail = get_party_with_addresses(self.db, party.id)
        self.assertEqual(len(detail['addresses']), 2)

        self.assertTrue(remove_address_association(self.db, party_id=party.id, address_id=first.id))
        self.assertEqual(len(list_party_addresses(self.db, party_id=party.id)), 1)

    def test_both_address_serves_shipping(self) -> None:
        party = create_party(self.db, party_number='545', name='Sparks Lumber Company')
        address = create_address(
            self.db, _address('9222 Highway 515 S'), party_id=party.id, address_type=AddressType.BOTH, is_default=True
        )

        default = get_default_party_address(self.db, party_id=party.id, address_type=AddressType.SHIPPING)

        self.assertEqual(default.id, address.id)
        self.assertEqual(address.state, 'GA')

    def test_customer_with_addresses(self) -> None:
        party = create_party(self.db, party_number='23', name='Ellijay Lumber')
        address = create_address(self.db, _address('789 Pine Ln'), party_id=party.id, is_default=True)
        customer = create_customer(
            self.db,
            party_id=party.id,
            defaults=CustomerDefaults(default_billing_address_id=address.id),
        )

        detail = get_customer_with_addresses(self.db, customer['id'])

        self.assertEqual(detail['default_billing_address'].id, address.id)
        self.assertIsNone(detail['default_shipping_address'])
        self.assertEqual(len(detail['addresses']), 1)

    def test_address_formatting(self) -> None:
        address = create_address(self.db, _address('123 Main St', address_line2='Suite 101'))

        self.assertEqual(format_single_line(address), '123 Main St, Suite 101, Ellijay, GA 30540')
        self.assertEqual(format_multi_line(address), '123 Main St\nSuite 101\nEllijay, GA 30540')
        self.assertEqual(format_single_line(None), '')

    def test_address_requires_core_fields(self) -> None:
        with self.assertRaises(ValueError):
            create_address(self.db, _address(' '))

    def test_species_number_is_unique(self) -> None:
        pine = create_species(self.db, species_number='1', name='Yellow Pine')
        create_species(self.db, species_number='9', name='Red Oak')

        with self.assertRaises(DuplicateError):
            create_species(self.db, species_number='1', name='Other')
        with self.assertRaises(DuplicateError):
            update_species(self.db, species_id=pine.id, species_number='9', name='Yellow Pine')

        self.assertEqual([species.name for species in search_species(self.db, 'oak')], ['Red Oak'])

    def test_ship_via_name_is_unique(self) -> None:
        pickup = create_ship_via(self.db, name='Pickup')
        create_ship_via(self.db, name='Delivery')

        with self.assertRaises(DuplicateError):
            create_ship_via(self.db, name='Pickup')
        with self.assertRaises(DuplicateError):
            update_ship_via(self.db, ship_via_id=pickup.id, name='Delivery')

    def test_sales_tax_by_location_uses_latest_rate(self) -> None:
        create_sales_tax(
            self.db, name='Gilmer 2020', county='Gilmer', state='GA', tax_rate=Decimal('0.05'),
            effective_date=date(2020, 1, 1),
        )
        create_sales_tax(
            self.db, name='Gilmer 2024', county='Gilmer', state='GA', tax_rate=Decimal('0.06'),
            effective_date=date(2024, 1, 1),
        )

        latest = get_sales_tax_by_location(self.db, county='Gilmer', state='GA')

        self.assertEqual(latest.name, 'Gilmer 2024')
        with self.assertRaises(NotFoundError):
            get_sales_tax_by_location(self.db, county='Fannin', state='GA')

        pickens = create_sales_tax(
            self.db, name='Pickens', county='Pickens', state='ga', tax_rate=Decimal('0.07'),
            effective_date=date(2024, 1, 1),
        )
        self.assertEqual(pickens.state, 'GA')
        self.assertEqual(get_sales_tax_by_location(self.db, county='Pickens', state='ga').id, pickens.id)
        with self.assertRaises(ValueError):
            create_sales_tax(
                self.db, name='Bad', county='Gilmer', state='GA', tax_rate=Decimal('-1'),
                effective_date=date(2024, 1, 1),
            )


if __name__ == '__main__':
    unittest.main()
