from __future__ import annotations

import unittest
from decimal import Decimal

from lumber_sales.services.distribution_service import (
    TicketItemInput,
    distribution_sort_key,
    normalize_species_id,
    sort_and_number_items,
)
from lumber_sales.services.sort_utils import parse_species_number


def _item(species_id, thickness, width, length, quantity=1) -> TicketItemInput:
    return TicketItemInput(
        species_id=species_id,
        quantity=quantity,
        thickness=Decimal(str(thickness)),
        width=Decimal(str(width)),
        length=Decimal(str(length)),
        price_per_mbf=Decimal('500'),
    )


class ParseSpeciesNumberTests(unittest.TestCase):
    def test_leading_integer_is_used(self) -> None:
        self.assertEqual(parse_species_number('9'), 9)
        self.assertEqual(parse_species_number('09'), 9)
        self.assertEqual(parse_species_number('12A'), 12)
        self.assertEqual(parse_species_number(' 5 '), 5)

    def test_unparseable_returns_none(self) -> None:
        self.assertIsNone(parse_species_number('Oak'))
        self.assertIsNone(parse_species_number(''))
        self.assertIsNone(parse_species_number(None))


class NormalizeSpeciesIdTests(unittest.TestCase):
    def test_blank_values_become_none(self) -> None:
        self.assertIsNone(normalize_species_id(''))
        self.assertIsNone(normalize_species_id('   '))
        self.assertIsNone(normalize_species_id(None))

    def test_digit_strings_become_ints(self) -> None:
        self.assertEqual(normalize_species_id('14'), 14)
        self.assertEqual(normalize_species_id(3), 3)

    def test_garbage_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            normalize_species_id('abc')


class SortAndNumberItemsTests(unittest.TestCase):
    def setUp(self) -> None:
        # species id -> parsed species number
        self.species_numbers = {1: 1, 2: 2, 3: 9, 4: None}

    def test_scenario_orders_by_species_then_dimensions(self) -> None:
        oak_wide = _item(3, 1, 8, 10)
        pine = _item(1, 2, 6, 12)
        oak_narrow = _item(3, 1, 6, 10)

        numbered = sort_and_number_items([oak_wide, pine, oak_narrow], self.species_numbers)

        self.assertEqual([entry.item for entry in numbered], [pine, oak_narrow, oak_wide])
        self.assertEqual([entry.distribution_number for entry in numbered], [1, 2, 3])

    def test_species_number_takes_priority_over_dimensions(self) -> None:
        thin_high_species = _item(3, 1, 4, 8)
        thick_low_species = _item(2, 4, 12, 16)

        numbered = sort_and_number_items([thin_high_species, thick_low_species], self.species_numbers)

        self.assertIs(numbered[0].item, thick_low_species)
        self.assertIs(numbered[1].item, thin_high_species)

    def test_missing_and_unresolvable_species_sort_last(self) -> None:
        no_species = _item(None, 1, 4, 8)
        unknown_species = _item(99, 1, 4, 8)
        unparseable_species = _item(4, 1, 4, 8)
        pine = _item(1, 8, 12, 20)

        numbered = sort_and_number_items(
            [no_species, unknown_species, pine, unparseable_species],
            self.species_numbers,
        )

        self.assertIs(numbered[0].item, pine)
        self.assertEqual(
            [entry.item for entry in numbered[1:]],
            [no_species, unknown_species, unparseable_species],
        )

    def test_identical_keys_keep_submitted_order(self) -> None:
        first = _item(1, 1, 6, 10, quantity=5)
        second = _item(1, 1, 6, 10, quantity=7)
        third = _item(1, 1, 6, 10, quantity=9)

        numbered = sort_and_number_items([first, second, third], self.species_numbers)

        self.assertEqual([entry.item.quantity for entry in numbered], [5, 7, 9])

    def test_sort_is_deterministic(self) -> None:
        items = [_item(3, 2, 6, 8), _item(None, 1, 1, 1), _item(1, 2, 6, 8), _item(1, 1, 6, 8)]

        first = sort_and_number_items(items, self.species_numbers)
        second = sort_and_number_items(list(items), self.species_numbers)

        self.assertEqual(first, second)

    def test_numbers_are_dense_from_one(self) -> None:
        items = [_item(index % 3 + 1, index, 6, 8) for index in range(7)]

        numbered = sort_and_number_items(items, self.species_numbers)

        self.assertEqual(sorted(entry.distribution_number for entry in numbered), list(range(1, 8)))

    def test_empty_input(self) -> None:
        self.assertEqual(sort_and_number_items([], self.species_numbers), [])

    def test_dimensions_break_ties_in_thickness_width_length_order(self) -> None:
        longer = _item(1, 1, 6, 12)
        shorter = _item(1, 1, 6, 8)
        wider = _item(1, 1, 8, 4)

        keys = [distribution_sort_key(item, self.species_numbers) for item in (longer, shorter, wider)]

        self.assertLess(keys[1], keys[0])
        self.assertLess(keys[0], keys[2])


if __name__ == '__main__':
    unittest.main()
