from __future__ import annotations

import unittest
from decimal import Decimal

from fastapi.testclient import TestClient

from lumber_sales.db import get_db
from lumber_sales.main import app
from db_support import make_engine, make_session_factory


class TicketsApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        session_factory = make_session_factory(self.engine)

        def override_get_db():
            with session_factory() as db:
                yield db

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

        self.pine_id = self._post('/api/species', {'species_number': '1', 'name': 'Yellow Pine'})['id']
        self.oak_id = self._post('/api/species', {'species_number': '9', 'name': 'Red Oak'})['id']
        self.ship_via_id = self._post('/api/ship-via', {'name': 'Pickup'})['id']

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.engine.dispose()

    def _post(self, path: str, payload: dict) -> dict:
        response = self.client.post(path, json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def _ticket(self, ticket_id: str | None, items: list[dict], **overrides) -> dict:
        payload = {
            'id': ticket_id,
            'customer_name': 'Ellijay Lumber',
            'date': '2026-10-19',
            'ship_via_id': self.ship_via_id,
            'items': items,
        }
        payload.update(overrides)
        return payload

    def _line(self, species_id, thickness, width, length) -> dict:
        return {
            'species_id': species_id,
            'quantity': 12,
            'thickness': thickness,
            'width': width,
            'length': length,
            'price_per_mbf': '650.00',
        }

    def test_health(self) -> None:
        response = self.client.get('/api')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ok')

    def test_create_and_fetch_ticket(self) -> None:
        created = self._post(
            '/api/tickets',
            self._ticket(
                'T-1',
                [
                    self._line(self.oak_id, 1, 8, 10),
                    self._line('', 1, 4, 8),
                    self._line(self.pine_id, 2, 6, 12),
                ],
            ),
        )

        self.assertEqual(created['invoice_number'], 30000)
        self.assertEqual(created['distribution_total'], 3)
        self.assertEqual([item['species_id'] for item in created['items']], [self.pine_id, self.oak_id, None])
        self.assertEqual(created['ship_via_name'], 'Pickup')

        fetched = self.client.get('/api/tickets/T-1').json()
        self.assertEqual([item['distribution_number'] for item in fetched['items']], [1, 2, 3])
        self.assertEqual(Decimal(fetched['items'][0]['width']), Decimal('6'))

        listed = self.client.get('/api/tickets').json()
        self.assertEqual([row['id'] for row in listed], ['T-1'])

    def test_update_keeps_invoice_number(self) -> None:
        self._post('/api/tickets', self._ticket('T-1', [self._line(self.oak_id, 1, 8, 10)]))
        self._post('/api/tickets', self._ticket('T-2', []))

        response = self.client.put(
            '/api/tickets/T-1',
            json=self._ticket(None, [self._line(self.pine_id, 1, 4, 8), self._line(self.pine_id, 1, 2, 8)]),
        )

        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body['invoice_number'], 30000)
        self.assertEqual([Decimal(item['width']) for item in body['items']], [Decimal('2'), Decimal('4')])

    def test_delete_ticket(self) -> None:
        self._post('/api/tickets', self._ticket('T-1', [self._line(self.oak_id, 1, 8, 10)]))

        self.assertEqual(self.client.delete('/api/tickets/T-1').status_code, 204)
        self.assertEqual(self.client.get('/api/tickets/T-1').status_code, 404)
        self.assertEqual(self.client.delete('/api/tickets/T-1').status_code, 404)

    def test_duplicate_and_missing_ids_are_rejected(self) -> None:
        self._post('/api/tickets', self._ticket('T-1', []))

        self.assertEqual(self.client.post('/api/tickets', json=self._ticket('T-1', [])).status_code, 400)
        self.assertEqual(self.client.post('/api/tickets', json=self._ticket(None, [])).status_code, 400)
        self.assertEqual(self.client.put('/api/tickets/missing', json=self._ticket(None, [])).status_code, 404)

    def test_unknown_references_return_not_found(self) -> None:
        response = self.client.post('/api/tickets', json=self._ticket('T-1', [self._line(999, 1, 4, 8)]))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['detail'], 'Species with ID 999 not found')
        self.assertEqual(self.client.get('/api/tickets').json(), [])

        response = self.client.post('/api/tickets', json=self._ticket('T-1', [], billing_address_id=999))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['detail'], 'Billing address not found')
        response = self.client.post('/api/tickets', json=self._ticket('T-1', [], party_id=0))
        self.assertEqual(response.status_code, 404)

    def test_delete_species_in_use_is_rejected(self) -> None:
        self._post('/api/tickets', self._ticket('T-1', [self._line(self.oak_id, 1, 8, 10)]))

        response = self.client.delete(f'/api/species/{self.oak_id}')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['detail'], 'Species is in use')
        self.assertEqual(self.client.get(f'/api/species/{self.oak_id}').status_code, 200)
        self.assertEqual(len(self.client.get('/api/tickets/T-1').json()['items']), 1)
        self.assertEqual(self.client.delete(f'/api/species/{self.pine_id}').status_code, 204)

    def test_invalid_items_fail_validation(self) -> None:
        bad_quantity = self._line(self.pine_id, 1, 4, 8)
        bad_quantity['quantity'] = 0

        self.assertEqual(self.client.post('/api/tickets', json=self._ticket('T-1', [bad_quantity])).status_code, 422)
        self.assertEqual(
            self.client.post('/api/tickets', json=self._ticket('T-1', [self._line('abc', 1, 4, 8)])).status_code,
            422,
        )

    def test_reference_endpoints(self) -> None:
        party = self._post('/api/parties', {'party_number': '23', 'name': 'Ellijay Lumber'})
        customer = self._post('/api/customers', {'party_id': party['id'], 'default_ship_via_id': self.ship_via_id})
        self._post(
            '/api/addresses',
            {
                'address_line1': '789 Pine Ln',
                'city': 'Blue Ridge',
                'state': 'GA',
                'postal_code': '30513',
                'party_id': party['id'],
                'is_default': True,
            },
        )

        self.assertEqual(self.client.get('/api/species/number/9').json()['name'], 'Red Oak')
        self.assertEqual(self.client.post('/api/species', json={'species_number': '9', 'name': 'X'}).status_code, 400)
        self.assertEqual(self.client.get(f"/api/customers/{customer['id']}").json()['list_name'], '23 - Ellijay Lumber')
        self.assertEqual(self.client.get('/api/parties/type/customer').json()[0]['id'], party['id'])
        addresses = self.client.get(f"/api/parties/{party['id']}/addresses").json()
        self.assertEqual(addresses['addresses'][0]['address']['city'], 'Blue Ridge')
        default = self.client.get(f"/api/addresses/party/{party['id']}/default/shipping")
        self.assertEqual(default.status_code, 200)
        self.assertEqual(self.client.get('/api/parties/404').status_code, 404)


if __name__ == '__main__':
    unittest.main()
