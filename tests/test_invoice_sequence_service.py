from __future__ import annotations

import unittest

from sqlalchemy import select

from lumber_sales.models import InvoiceSequence
from lumber_sales.services.errors import InvoiceSequenceError
from lumber_sales.services.invoice_sequence_service import (
    advance_invoice_sequence,
    ensure_invoice_sequence,
    next_invoice_number,
)
from db_support import make_engine, make_session_factory


class InvoiceSequenceServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        self.db = make_session_factory(self.engine)()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def _stored_seq(self) -> int | None:
        return self.db.execute(select(InvoiceSequence.seq).where(InvoiceSequence.name == 'tickets')).scalar_one_or_none()

    def test_missing_counter_starts_at_floor(self) -> None:
        self.assertIsNone(self._stored_seq())

        self.assertEqual(next_invoice_number(self.db), 30000)
        self.assertEqual(self._stored_seq(), 29999)

    def test_advance_moves_the_counter(self) -> None:
        first = next_invoice_number(self.db)
        advance_invoice_sequence(self.db, first)
        self.db.commit()

        self.assertEqual(next_invoice_number(self.db), 30001)
        self.assertEqual(self._stored_seq(), 30000)

    def test_advance_refuses_to_move_backwards(self) -> None:
        ensure_invoice_sequence(self.db)
        advance_invoice_sequence(self.db, 30005)

        with self.assertRaises(InvoiceSequenceError):
            advance_invoice_sequence(self.db, 30005)
        with self.assertRaises(InvoiceSequenceError):
            advance_invoice_sequence(self.db, 30001)

    def test_advance_without_counter_fails(self) -> None:
        with self.assertRaises(InvoiceSequenceError):
            advance_invoice_sequence(self.db, 30000)

    def test_ensure_is_idempotent(self) -> None:
        ensure_invoice_sequence(self.db)
        advance_invoice_sequence(self.db, 30010)
        ensure_invoice_sequence(self.db)

        self.assertEqual(self._stored_seq(), 30010)

    def test_custom_floor(self) -> None:
        self.assertEqual(next_invoice_number(self.db, floor=100), 101)


if __name__ == '__main__':
    unittest.main()
